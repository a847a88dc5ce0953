from __future__ import annotations

from datetime import datetime, timezone

import pytest

from petmatch.catalog.data_store import InMemoryCatalog
from petmatch.catalog.models import Animal, Coordinate
from petmatch.errors import NotFoundError
from petmatch.suggestions.engine import SuggestionEngine, similarity
from petmatch.suggestions.models import FeedType

SEOUL = Coordinate(latitude=37.5665, longitude=126.9780)
GANGNAM = Coordinate(latitude=37.4979, longitude=127.0276)
BUSAN = Coordinate(latitude=35.1796, longitude=129.0756)
NOW = datetime(2026, 10, 17, tzinfo=timezone.utc)


def _animal(animal_id: str, **overrides) -> Animal:
    fields = {
        "id": animal_id,
        "species": "dog",
        "breed": "Jindo",
        "age_months": 24,
        "size": "medium",
        "personality": ["loyal", "calm"],
        "available": True,
    }
    fields.update(overrides)
    return Animal(**fields)


def test_clone_is_maximally_similar():
    seed = _animal("seed")
    assert similarity(seed, _animal("clone")) == pytest.approx(1.0)


def test_similarity_components():
    seed = _animal("seed")
    other = _animal("x", breed="Poodle", age_months=26, size="small", personality=["calm", "shy"])
    # age within 2 months: 0.1; tag Jaccard 1/3 weighted 0.2
    assert similarity(seed, other) == pytest.approx(0.1 + 0.2 / 3)


def test_similarity_ignores_missing_fields():
    seed = _animal("seed", breed=None, age_months=None, personality=[])
    assert similarity(seed, _animal("x", breed=None)) == pytest.approx(0.2)


def test_similar_feed_excludes_seed_and_weak_matches():
    engine = SuggestionEngine(InMemoryCatalog([
        _animal("seed"),
        _animal("clone"),
        _animal("breed-only", age_months=90, size="large", personality=[]),
        _animal("stranger", breed="Persian", species="cat", age_months=90, size="small",
                personality=["shy"]),
        _animal("hidden", available=False),
    ]))

    feed = engine.similar_to("seed")

    assert feed.type is FeedType.similar
    assert [s.animal.id for s in feed.animals] == ["clone", "breed-only"]
    assert feed.animals[0].similarity_score == pytest.approx(1.0)
    assert feed.total == 2
    assert feed.limit == 10


def test_similar_feed_unknown_seed():
    engine = SuggestionEngine(InMemoryCatalog([_animal("a")]))
    with pytest.raises(NotFoundError):
        engine.similar_to("missing")


def test_nearby_feed_sorted_by_distance_within_radius():
    engine = SuggestionEngine(InMemoryCatalog([
        _animal("gangnam", location=GANGNAM),
        _animal("seoul", location=SEOUL),
        _animal("busan", location=BUSAN),
        _animal("nowhere"),
    ]))

    feed = engine.nearby(SEOUL, limit=5)

    assert feed.type is FeedType.nearby
    assert [s.animal.id for s in feed.animals] == ["seoul", "gangnam"]
    assert feed.animals[0].distance == pytest.approx(0.0)
    assert all(s.distance >= 0 for s in feed.animals)


def test_new_listings_window():
    engine = SuggestionEngine(InMemoryCatalog([
        _animal("week", listed_at=datetime(2026, 10, 10, tzinfo=timezone.utc)),
        _animal("today", listed_at=datetime(2026, 10, 17, tzinfo=timezone.utc)),
        _animal("stale", listed_at=datetime(2026, 8, 1, tzinfo=timezone.utc)),
        _animal("future", listed_at=datetime(2026, 11, 1, tzinfo=timezone.utc)),
        _animal("undated"),
    ]))

    feed = engine.new_listings(now=NOW)

    assert feed.type is FeedType.new
    assert [s.animal.id for s in feed.animals] == ["today", "future", "week"]
    assert [s.days_since_listed for s in feed.animals] == [0, 0, 7]


def test_feed_limit_truncates_and_total_counts_returned():
    engine = SuggestionEngine(InMemoryCatalog(
        [_animal(f"a{i}", location=SEOUL) for i in range(15)]
    ))
    feed = engine.nearby(SEOUL)
    assert len(feed.animals) == 10
    assert feed.total == 10
