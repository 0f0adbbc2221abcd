from art_identify.pipeline_types import Candidate
from art_identify.rank import dedup_key, rank_candidates


def test_duplicates_keep_highest_scored():
    low = Candidate(source="aic", title="Nighthawks", artist="Edward Hopper", raw_json={"id": 1})
    high = Candidate(
        source="aic", title=" nighthawks ", artist="EDWARD HOPPER", medium="oil", raw_json={"id": 2}
    )
    ranked = rank_candidates([low, high], "nighthawks hopper oil", "")
    assert len(ranked) == 1
    assert ranked[0].raw_json == {"id": 2}
    assert abs(ranked[0].confidence - 0.3) < 1e-9


def test_same_title_different_source_both_survive():
    a = Candidate(source="aic", title="Nighthawks", artist="Edward Hopper")
    b = Candidate(source="met", title="Nighthawks", artist="Edward Hopper")
    ranked = rank_candidates([a, b], "nighthawks", "")
    assert [c.source for c in ranked] == ["aic", "met"]


def test_ties_keep_input_order():
    cands = [Candidate(source="met", title=f"Untitled {i}", raw_json={"i": i}) for i in range(3)]
    ranked = rank_candidates(cands, "landscape", "")
    assert [c.raw_json["i"] for c in ranked] == [0, 1, 2]


def test_at_most_three_unique_results():
    cands = [Candidate(source="aic", title=f"Study {i}", artist="Cézanne") for i in range(8)]
    cands += [Candidate(source="aic", title="Study 0", artist="cézanne")]
    ranked = rank_candidates(cands, "study", "chicago")
    assert len(ranked) == 3
    assert len({dedup_key(c) for c in ranked}) == 3


def test_sorted_by_confidence_and_inputs_untouched():
    weak = Candidate(source="met", title="Harbor")
    strong = Candidate(source="aic", title="Harbor at Sunset")
    ranked = rank_candidates([weak, strong], "harbor sunset", "Chicago")
    assert ranked[0].source == "aic"
    assert ranked[0].confidence > ranked[1].confidence
    # inputs are never mutated
    assert weak.confidence == 0.0
    assert strong.confidence == 0.0


def test_empty_input():
    assert rank_candidates([], "anything", "") == []
