import pytest
from pydantic import ValidationError

from art_identify.config import CandidateOut, HealthResponse, IdentifyRequest, IdentifyResponse


def test_identify_request_defaults():
    req = IdentifyRequest(artworkId="a1")
    assert req.imageUrl is None
    assert req.textSignals is None


def test_identify_request_requires_artwork_id():
    with pytest.raises(ValidationError):
        IdentifyRequest(artworkId="")
    with pytest.raises(ValidationError):
        IdentifyRequest.model_validate({"museum_name": "Louvre"})


def test_text_signals_keywords_default_empty():
    req = IdentifyRequest.model_validate({"artworkId": "a1", "textSignals": {"caption": "a bridge"}})
    assert req.textSignals.keywords == []
    assert req.textSignals.ocrText is None


def test_identify_response_structure():
    item = CandidateOut(id="c1", rank=1, confidence=0.3, title="Nighthawks", source="aic")
    resp = IdentifyResponse(artworkId="a1", candidates=[item])
    assert len(resp.candidates) == 1
    assert resp.candidates[0].artist is None
    with pytest.raises(ValidationError):
        CandidateOut(id="c2", rank=0)


def test_health_response():
    health = HealthResponse(status="healthy")
    assert health.status == "healthy"


def test_text_signals_null_keywords_become_empty():
    req = IdentifyRequest.model_validate({"artworkId": "a1", "textSignals": {"keywords": None}})
    assert req.textSignals.keywords == []
