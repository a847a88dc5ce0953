from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Animal(BaseModel):
    """One adoptable animal as seen by the matching engine.

    ``good_with_kids`` / ``good_with_pets`` are tri-state: ``None`` means the
    listing does not say, which scores differently from an explicit ``False``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    species: str = Field(..., min_length=1)
    breed: str | None = None
    age_months: int | None = Field(default=None, ge=0)
    gender: str | None = None
    size: str | None = None
    color: str | None = None
    personality: list[str] = Field(default_factory=list)
    good_with_kids: bool | None = None
    good_with_pets: bool | None = None
    has_special_needs: bool = False
    vaccinated: bool = False
    neutered: bool = False
    available: bool = False
    verified: bool = False
    location: Coordinate | None = None
    photo_count: int = Field(default=0, ge=0)
    description_length: int = Field(default=0, ge=0)
    listed_at: datetime | None = None
    organization_id: str | None = None

    @field_validator("listed_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
