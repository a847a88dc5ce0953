"""
Suggestion feeds: animals similar to a seed, animals near a point, and
recently listed animals.

Similarity is an unnormalized weighted sum (unlike the compatibility score):

    0.4 × same breed
  + 0.2 if ages within 1 month, 0.1 if within 2
  + 0.2 × same size
  + 0.2 × Jaccard(personality tags)
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

import numpy as np

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Animal, Coordinate
from ..geo import haversine_km
from ..pagination import clamp_limit
from .models import FeedType, SuggestedAnimal, SuggestionFeed

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 10
SIMILARITY_THRESHOLD = 0.3
NEARBY_RADIUS_KM = 100.0
NEW_LISTING_WINDOW_DAYS = 30


def similarity(seed: Animal, other: Animal) -> float:
    score = 0.0

    if seed.breed and other.breed and seed.breed.casefold() == other.breed.casefold():
        score += 0.4

    if seed.age_months is not None and other.age_months is not None:
        age_diff = abs(seed.age_months - other.age_months)
        if age_diff <= 1:
            score += 0.2
        elif age_diff <= 2:
            score += 0.1

    if seed.size and other.size and seed.size.casefold() == other.size.casefold():
        score += 0.2

    seed_tags = {t.casefold() for t in seed.personality}
    other_tags = {t.casefold() for t in other.personality}
    if seed_tags and other_tags:
        score += 0.2 * len(seed_tags & other_tags) / len(seed_tags | other_tags)

    return score


class SuggestionEngine:
    def __init__(self, catalog: CatalogAccess) -> None:
        self._catalog = catalog

    def _available(self) -> list[Animal]:
        return [a for a in self._catalog.list_all() if a.available]

    def similar_to(self, animal_id: str, limit: int | None = None) -> SuggestionFeed:
        limit = clamp_limit(limit, DEFAULT_FEED_LIMIT)
        seed = self._catalog.get_by_id(animal_id)

        scored: list[SuggestedAnimal] = []
        for animal in self._available():
            if animal.id == seed.id:
                continue
            score = similarity(seed, animal)
            if score > SIMILARITY_THRESHOLD:
                scored.append(SuggestedAnimal(animal=animal, similarity_score=round(score, 4)))

        scored.sort(key=lambda s: s.similarity_score, reverse=True)
        top = scored[:limit]
        return SuggestionFeed(animals=top, type=FeedType.similar, total=len(top), limit=limit)

    def nearby(self, location: Coordinate, limit: int | None = None) -> SuggestionFeed:
        limit = clamp_limit(limit, DEFAULT_FEED_LIMIT)
        geotagged = [a for a in self._available() if a.location is not None]

        nearby: list[SuggestedAnimal] = []
        if geotagged:
            lats = np.array([a.location.latitude for a in geotagged])
            lons = np.array([a.location.longitude for a in geotagged])
            distances = haversine_km(location.latitude, location.longitude, lats, lons)
            for animal, distance in zip(geotagged, distances):
                if distance <= NEARBY_RADIUS_KM:
                    nearby.append(SuggestedAnimal(animal=animal, distance=float(distance)))

        nearby.sort(key=lambda s: s.distance)
        top = nearby[:limit]
        return SuggestionFeed(animals=top, type=FeedType.nearby, total=len(top), limit=limit)

    def new_listings(self, limit: int | None = None, now: datetime | None = None) -> SuggestionFeed:
        limit = clamp_limit(limit, DEFAULT_FEED_LIMIT)
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        recent: list[SuggestedAnimal] = []
        for animal in self._available():
            if animal.listed_at is None:
                continue
            days = (now - animal.listed_at).total_seconds() / 86400
            # Future-dated listings (clock skew at the shelter) count as listed today
            if days <= NEW_LISTING_WINDOW_DAYS:
                recent.append(SuggestedAnimal(animal=animal, days_since_listed=max(int(days), 0)))

        recent.sort(key=lambda s: s.days_since_listed)
        top = recent[:limit]
        logger.debug("New-listings feed: %d recent, returning %d", len(recent), len(top))
        return SuggestionFeed(animals=top, type=FeedType.new, total=len(top), limit=limit)
