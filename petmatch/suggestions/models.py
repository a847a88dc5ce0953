from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from ..catalog.models import Animal


class FeedType(str, Enum):
    similar = "similar"
    nearby = "nearby"
    new = "new"


class SuggestedAnimal(BaseModel):
    animal: Animal
    similarity_score: float | None = None
    distance: float | None = None
    days_since_listed: int | None = None


class SuggestionFeed(BaseModel):
    animals: list[SuggestedAnimal]
    type: FeedType
    total: int
    limit: int
