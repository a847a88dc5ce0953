from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..catalog.models import Coordinate


class PreferenceUpdate(BaseModel):
    """Partial preference write. Fields left as ``None`` keep their stored value."""

    species: list[str] | None = None
    breeds: list[str] | None = None
    age_min: int | None = Field(default=None, ge=0, description="Months; 0 means unbounded")
    age_max: int | None = Field(default=None, ge=0, description="Months; 0 means unbounded")
    sizes: list[str] | None = None
    genders: list[str] | None = None
    max_radius: float | None = Field(default=None, ge=0.0, description="Kilometres")
    location: Coordinate | None = None
    personalities: list[str] | None = None
    special_needs: bool | None = Field(
        default=None, description="False rejects animals with special needs"
    )
    good_with_kids: bool | None = None
    good_with_pets: bool | None = None
    experience_level: str | None = Field(default=None, description="beginner, intermediate, expert")
    housing_type: str | None = Field(default=None, description="apartment, house, farm")
    has_yard: bool | None = None
    custom_filters: dict[str, Any] | None = None


class Preference(BaseModel):
    user_id: str
    species: list[str] = Field(default_factory=list)
    breeds: list[str] = Field(default_factory=list)
    age_min: int = Field(default=0, ge=0)
    age_max: int = Field(default=0, ge=0)
    sizes: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    max_radius: float = Field(default=0.0, ge=0.0)
    location: Coordinate | None = None
    personalities: list[str] = Field(default_factory=list)
    special_needs: bool | None = None
    good_with_kids: bool = False
    good_with_pets: bool = False
    experience_level: str | None = None
    housing_type: str | None = None
    has_yard: bool | None = None
    custom_filters: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def merged_with(self, update: PreferenceUpdate) -> Preference:
        """Return a copy with every field ``update`` actually supplies applied on top."""
        fields = type(self).model_fields
        changes = {
            name: getattr(update, name)
            for name in update.model_fields_set
            if name in fields and getattr(update, name) is not None
        }
        return self.model_copy(update=changes, deep=True)
