from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Animal
from ..pagination import clamp_limit
from ..preferences.models import Preference, PreferenceUpdate
from ..preferences.store import PreferenceStore
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import MatchItem, MatchResult
from .scoring import ScoringEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    animal: Animal
    score: float
    reason: str


def apply_diversity_filter(
    candidates: list[ScoredCandidate],
    max_per_species: int = DEFAULT_RANKING_CONFIG.max_per_species,
    min_candidates: int = DEFAULT_RANKING_CONFIG.diversity_min_candidates,
) -> list[ScoredCandidate]:
    """
    Cap each species at ``max_per_species`` in the head of the list.

    Candidates over the cap are moved, in their incoming order, behind the
    capped head. Nothing is dropped.
    """
    if len(candidates) <= min_candidates:
        return list(candidates)

    head: list[ScoredCandidate] = []
    tail: list[ScoredCandidate] = []
    per_species: dict[str, int] = {}

    for candidate in candidates:
        species = candidate.animal.species.casefold() or "unknown"
        if per_species.get(species, 0) < max_per_species:
            head.append(candidate)
            per_species[species] = per_species.get(species, 0) + 1
        else:
            tail.append(candidate)

    return head + tail


def apply_freshness_boost(
    candidates: list[ScoredCandidate],
    boost: float = DEFAULT_RANKING_CONFIG.freshness_boost,
) -> list[ScoredCandidate]:
    """Boost listed animals, then re-sort by score (ties keep their order)."""
    boosted = [
        replace(c, score=c.score * boost) if c.animal.listed_at is not None else c
        for c in candidates
    ]
    return sorted(boosted, key=lambda c: c.score, reverse=True)


def apply_engagement_boost(
    candidates: list[ScoredCandidate],
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> list[ScoredCandidate]:
    adjusted: list[ScoredCandidate] = []
    for c in candidates:
        score = c.score
        if c.animal.photo_count > 0:
            score *= config.photo_boost
        if c.animal.description_length > config.description_min_length:
            score *= config.description_boost
        if c.animal.verified:
            score *= config.verified_boost
        adjusted.append(replace(c, score=score))
    return adjusted


class RankingPipeline:
    def __init__(
        self,
        catalog: CatalogAccess,
        preferences: PreferenceStore,
        scorer: ScoringEngine | None = None,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ) -> None:
        self._catalog = catalog
        self._preferences = preferences
        self._scorer = scorer or ScoringEngine()
        self._config = config

    def resolve_preference(
        self, user_id: str, criteria: PreferenceUpdate | None = None
    ) -> Preference:
        stored = self._preferences.get(user_id)
        preference = stored if stored is not None else Preference(user_id=user_id)
        if criteria is not None:
            preference = preference.merged_with(criteria)
        return preference

    def find_matches(
        self,
        user_id: str,
        criteria: PreferenceUpdate | None = None,
        limit: int | None = None,
    ) -> list[MatchItem]:
        start_time = time.time()
        limit = clamp_limit(limit, self._config.default_limit)

        preference = self.resolve_preference(user_id, criteria)
        requester_location = criteria.location if criteria is not None else None

        animals = self._catalog.list_all()

        # --- Scoring ---
        scored: list[ScoredCandidate] = []
        for animal in animals:
            if not animal.available:
                continue
            score, reason = self._scorer.score(animal, preference, requester_location)
            scored.append(ScoredCandidate(animal=animal, score=score, reason=reason))
        scored.sort(key=lambda c: c.score, reverse=True)

        # --- Re-ranking ---
        ranked = apply_diversity_filter(
            scored,
            max_per_species=self._config.max_per_species,
            min_candidates=self._config.diversity_min_candidates,
        )
        ranked = apply_freshness_boost(ranked, self._config.freshness_boost)
        ranked = apply_engagement_boost(ranked, self._config)

        now = datetime.now(timezone.utc)
        items = [
            MatchItem(
                match=MatchResult(
                    user_id=user_id,
                    animal_id=c.animal.id,
                    # Boosts may push past 1.0; the reported score stays in [0, 1]
                    score=round(min(c.score, 1.0), 4),
                    reason=c.reason,
                    created_at=now,
                    updated_at=now,
                ),
                animal=c.animal,
            )
            for c in ranked[:limit]
        ]

        logger.info(
            "Ranked %d of %d animals for user %s in %.1f ms",
            len(items),
            len(animals),
            user_id,
            (time.time() - start_time) * 1000,
        )
        return items
