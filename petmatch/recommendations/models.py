from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.models import Animal
from ..preferences.models import PreferenceUpdate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchStatus(str, Enum):
    pending = "pending"
    viewed = "viewed"
    contacted = "contacted"
    rejected = "rejected"


class MatchRequest(PreferenceUpdate):
    """Per-call override criteria layered over the stored preference."""

    limit: int | None = Field(default=None, description="Clamped to [1, 100]; default 20")


class MatchResult(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    animal_id: str
    score: float = Field(..., ge=0.0, le=1.0)
    reason: str
    status: MatchStatus = MatchStatus.pending
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class MatchItem(BaseModel):
    match: MatchResult
    animal: Animal


class MatchResponse(BaseModel):
    matches: list[MatchItem]
    total: int
    limit: int


class MatchStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)
    note: str | None = None


class MatchHistoryResponse(BaseModel):
    matches: list[MatchResult]
    total: int
    page: int
    limit: int
    status: MatchStatus | None = None
