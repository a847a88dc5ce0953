from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringWeights:
    species: float = 0.25
    age: float = 0.15
    size: float = 0.15
    location: float = 0.20
    personality: float = 0.10
    special: float = 0.15


@dataclass(frozen=True)
class RankingConfig:
    default_limit: int = 20
    # Diversity only kicks in above this many candidates
    diversity_min_candidates: int = 5
    max_per_species: int = 3
    freshness_boost: float = 1.05
    photo_boost: float = 1.10
    description_boost: float = 1.05
    description_min_length: int = 100
    verified_boost: float = 1.08


DEFAULT_SCORING_WEIGHTS = ScoringWeights()
DEFAULT_RANKING_CONFIG = RankingConfig()
