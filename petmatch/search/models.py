from __future__ import annotations

from pydantic import BaseModel, Field

from ..catalog.models import Animal, Coordinate


class SearchCriteria(BaseModel):
    species: str | None = None
    breeds: list[str] = Field(default_factory=list)
    age_min: int | None = Field(default=None, ge=0, description="Months; 0 means unbounded")
    age_max: int | None = Field(default=None, ge=0, description="Months; 0 means unbounded")
    gender: str | None = None
    size: str | None = None
    location: Coordinate | None = None
    max_radius: float | None = Field(default=None, ge=0.0, description="Kilometres; 50 when omitted")
    good_with_kids: bool | None = None
    good_with_pets: bool | None = None
    has_special_needs: bool | None = None
    available: bool | None = None


class SearchRequest(SearchCriteria):
    page: int | None = None
    limit: int | None = None
    sort_by: str | None = Field(default=None, description="created_at, age or distance")
    sort_order: str | None = Field(default=None, description="asc or desc")


class SearchHit(BaseModel):
    animal: Animal
    distance: float | None = None


class SearchResponse(BaseModel):
    animals: list[SearchHit]
    total: int
    page: int
    limit: int
    sort_by: str
    sort_order: str
    filters: SearchCriteria
