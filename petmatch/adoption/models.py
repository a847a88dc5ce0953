from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.models import Animal


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ── Favorites ────────────────────────────────────────────────────────────


class Favorite(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    animal_id: str
    note: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class FavoriteRequest(BaseModel):
    animal_id: str = Field(..., min_length=1)
    note: str | None = Field(default=None, max_length=500)


class FavoriteItem(BaseModel):
    favorite: Favorite
    animal: Animal


class FavoriteResponse(BaseModel):
    favorites: list[FavoriteItem]
    total: int
    page: int
    limit: int


# ── Applications ─────────────────────────────────────────────────────────


class ApplicationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    interview_scheduled = "interview_scheduled"
    trial = "trial"
    adopted = "adopted"
    cancelled = "cancelled"


class ApplicantProfile(BaseModel):
    experience: str | None = Field(default=None, description="beginner, intermediate, advanced")
    housing_type: str | None = Field(default=None, description="apartment, house, condo")
    has_yard: bool = False
    has_other_pets: bool = False
    has_children: bool = False
    children_ages: list[int] = Field(default_factory=list)


class ApplicationRequest(BaseModel):
    animal_id: str = Field(..., min_length=1)
    organization_id: str | None = Field(
        default=None, description="Defaults to the animal's listing organization"
    )
    message: str = Field(..., min_length=20, max_length=1000)
    applicant: ApplicantProfile = Field(default_factory=ApplicantProfile)


class Application(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    animal_id: str
    organization_id: str
    status: ApplicationStatus = ApplicationStatus.pending
    message: str
    applicant: ApplicantProfile
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ApplicationStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class ApplicationDetail(BaseModel):
    application: Application
    animal: Animal | None = None


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationDetail]
    total: int
    page: int
    limit: int


class ApplicationStatusCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    interview_scheduled: int = 0
    trial: int = 0
    adopted: int = 0
    cancelled: int = 0
    total: int = 0
