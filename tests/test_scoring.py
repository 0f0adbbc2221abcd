from art_identify.pipeline_types import Candidate
from art_identify.scoring import confidence_from_score, museum_bonus, score_candidate


def test_museum_bonus_only_scenario():
    cand = Candidate(source="aic", title="Paris Street, Rainy Day", artist="Gustave Caillebotte")
    score = score_candidate(cand, "chicago impressionist", "Art Institute of Chicago Chicago USA")
    assert score == 2
    assert abs(confidence_from_score(score) - 0.2) < 1e-9


def test_token_overlap_counts_each_occurrence():
    cand = Candidate(source="met", title="Water Lilies", artist="Claude Monet", medium="Oil on canvas")
    # "monet" twice, "oil" once, "on" dropped (< 3 chars), "sunset" missing
    assert score_candidate(cand, "Monet monet oil on sunset", "") == 3


def test_haystack_ignores_missing_fields():
    cand = Candidate(source="met", title=None, artist=None, style="Impressionism")
    assert score_candidate(cand, "impressionism", "") == 1


def test_bonus_applies_to_matching_source_only():
    museum = "The Metropolitan Museum of Art, Chicago trip"
    aic = Candidate(source="aic", title="x")
    met = Candidate(source="met", title="x")
    other = Candidate(source="rijks", title="x")
    assert score_candidate(aic, "", museum) == 2
    assert score_candidate(met, "", museum) == 2
    assert score_candidate(other, "", museum) == 0


def test_met_bonus_is_not_doubled_for_metropolitan():
    assert museum_bonus("met", "Metropolitan Museum of Art") == 2
    assert museum_bonus("met", "The Met Fifth Avenue") == 2
    assert museum_bonus("met", "Louvre") == 0


def test_bonus_table_is_configurable():
    bonuses = {"rijks": (("amsterdam",), 3)}
    cand = Candidate(source="rijks", title="The Night Watch")
    assert score_candidate(cand, "", "Rijksmuseum Amsterdam", bonuses=bonuses) == 3
    aic = Candidate(source="aic", title="x")
    assert score_candidate(aic, "", "chicago", bonuses=bonuses) == 0


def test_score_is_deterministic_and_confidence_clamped():
    cand = Candidate(source="aic", title="a b c painting painting painting", artist="painting")
    q = " ".join(["painting"] * 20)
    first = score_candidate(cand, q, "chicago")
    assert first == score_candidate(cand, q, "chicago")
    assert first == 22
    assert confidence_from_score(first) == 1.0
    assert confidence_from_score(-5) == 0.0


def test_bonus_ignores_museum_text_case():
    assert museum_bonus("aic", "ART INSTITUTE OF CHICAGO") == 2
    assert museum_bonus("met", "THE METROPOLITAN MUSEUM OF ART") == 2
