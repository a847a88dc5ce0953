from __future__ import annotations

import pytest

from petmatch.catalog.models import Animal, Coordinate
from petmatch.preferences.models import Preference
from petmatch.recommendations.scoring import (
    DEFAULT_REASON,
    ScoringEngine,
    age_score,
    location_score,
    personality_score,
    size_score,
    special_score,
)

SEOUL = Coordinate(latitude=37.5665, longitude=126.9780)
BUSAN = Coordinate(latitude=35.1796, longitude=129.0756)


def _animal(**overrides) -> Animal:
    fields = {
        "id": "a1",
        "species": "dog",
        "age_months": 24,
        "size": "medium",
        "available": True,
    }
    fields.update(overrides)
    return Animal(**fields)


engine = ScoringEngine()


# --- Sub-scores ---


def test_age_score_in_range():
    assert age_score(24, 12, 36) == 1.0


def test_age_score_partial_credit_near_range():
    assert age_score(11, 12, 36) == pytest.approx(0.7)
    assert age_score(10, 12, 36) == pytest.approx(0.4)
    assert age_score(38, 12, 36) == pytest.approx(0.4)


def test_age_score_far_outside_range():
    assert age_score(5, 12, 36) == 0.1


def test_age_score_zero_bound_is_open():
    assert age_score(120, 12, 0) == 1.0
    assert age_score(1, 0, 36) == 1.0


def test_age_score_without_range_is_neutral():
    assert age_score(24, 0, 0) == 0.7


def test_size_score_ladder():
    assert size_score("medium", ["medium"]) == 1.0
    assert size_score("medium", ["large"]) == 0.7
    assert size_score("medium", ["extra_large"]) == 0.4
    assert size_score("extra_small", ["extra_large"]) == 0.1


def test_size_score_takes_best_accepted_size():
    assert size_score("small", ["extra_large", "medium"]) == 0.7


def test_size_score_off_ladder():
    assert size_score("giant", ["medium"]) == 0.5


def test_location_score_without_origin_is_neutral():
    assert location_score(SEOUL, None, 50.0) == 0.7
    assert location_score(SEOUL, SEOUL, 0.0) == 0.7


def test_location_score_unknown_animal_location():
    assert location_score(None, SEOUL, 50.0) == 0.5


def test_location_score_distance_bands():
    assert location_score(SEOUL, SEOUL, 50.0) == pytest.approx(1.0)
    # Seoul to Busan is roughly 325 km
    assert location_score(BUSAN, SEOUL, 400.0) >= 0.5
    assert location_score(BUSAN, SEOUL, 250.0) == 0.2
    assert location_score(BUSAN, SEOUL, 100.0) == 0.0


def test_personality_score_fraction_of_desired_tags():
    assert personality_score(["playful", "calm"], ["playful", "shy"]) == 0.5
    assert personality_score(["Playful"], ["play"]) == 1.0
    assert personality_score([], ["calm"]) == 0.0
    assert personality_score(["calm"], []) == 0.7


def test_special_score_penalties():
    pref = Preference(user_id="u", good_with_kids=True)
    assert special_score(_animal(good_with_kids=True), pref) == 1.0
    assert special_score(_animal(good_with_kids=None), pref) == pytest.approx(0.7)
    assert special_score(_animal(good_with_kids=False), pref) == pytest.approx(0.3)

    no_special = Preference(user_id="u", special_needs=False)
    assert special_score(_animal(has_special_needs=True), no_special) == 0.5
    assert special_score(_animal(has_special_needs=False), no_special) == 1.0


# --- Combined score ---


def test_empty_preference_scores_neutral():
    score, reason = engine.score(_animal(), Preference(user_id="u"))
    assert score == 0.5
    assert reason == DEFAULT_REASON


def test_missing_preference_scores_neutral():
    score, reason = engine.score(_animal(), None)
    assert score == 0.5
    assert reason == DEFAULT_REASON


def test_full_match_scores_one_with_reasons():
    pref = Preference(user_id="u", species=["dog"], age_min=12, age_max=36, sizes=["medium"])
    score, reason = engine.score(_animal(), pref)
    assert score == pytest.approx(1.0)
    assert reason == "perfect species match, age preference match and ideal size"


def test_species_mismatch_ranks_lower():
    pref = Preference(user_id="u", species=["dog"], age_min=12, age_max=36, sizes=["medium"])
    cat_score, reason = engine.score(_animal(id="b", species="cat", age_months=36, size="large"), pref)
    # species 0, age 1.0, size 0.7 over weights 0.25 + 0.15 + 0.15
    assert cat_score == pytest.approx((0.15 * 1.0 + 0.15 * 0.7) / 0.55)
    assert reason == "age preference match"


def test_inverted_age_range_is_swapped():
    normal = Preference(user_id="u", age_min=12, age_max=36)
    inverted = Preference(user_id="u", age_min=36, age_max=12)
    for age in (5, 11, 24, 40):
        animal = _animal(age_months=age)
        assert engine.score(animal, normal) == engine.score(animal, inverted)


def test_unknown_age_does_not_count_against_candidate():
    pref = Preference(user_id="u", species=["dog"], age_min=12, age_max=36)
    score, _ = engine.score(_animal(age_months=None), pref)
    assert score == 1.0


def test_requester_location_overrides_stored_location():
    pref = Preference(user_id="u", location=BUSAN, max_radius=50.0)
    animal = _animal(location=SEOUL)
    far, _ = engine.score(animal, pref)
    near, _ = engine.score(animal, pref, requester_location=SEOUL)
    assert far == 0.0
    assert near == pytest.approx(1.0)


def test_scores_stay_in_unit_interval():
    pref = Preference(
        user_id="u",
        species=["cat"],
        age_min=2,
        age_max=6,
        sizes=["extra_large"],
        location=SEOUL,
        max_radius=10.0,
        personalities=["calm", "shy", "independent"],
        special_needs=False,
        good_with_kids=True,
        good_with_pets=True,
    )
    animals = [
        _animal(id="1"),
        _animal(id="2", species="cat", age_months=4, size="small", personality=["calm"]),
        _animal(id="3", location=BUSAN, has_special_needs=True, good_with_kids=False),
        _animal(id="4", species="rabbit", age_months=None, size=None, good_with_pets=None),
    ]
    for animal in animals:
        score, reason = engine.score(animal, pref)
        assert 0.0 <= score <= 1.0
        assert reason
