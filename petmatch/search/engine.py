from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Animal
from ..geo import haversine_km
from ..pagination import clamp_limit, clamp_page, paginate
from .models import SearchCriteria, SearchHit, SearchResponse

logger = logging.getLogger(__name__)

SORT_KEYS = ("created_at", "age", "distance")
SORT_ORDERS = ("asc", "desc")
DEFAULT_RADIUS_KM = 50.0

_NEVER_LISTED = datetime.min.replace(tzinfo=timezone.utc)


def normalize_criteria(criteria: SearchCriteria) -> SearchCriteria:
    """Swap an inverted age range and fill in the default search radius."""
    # Drop paging/sort fields when handed a SearchRequest
    criteria = SearchCriteria.model_validate(
        criteria.model_dump(include=set(SearchCriteria.model_fields))
    )
    changes = {}
    # A bound of 0 means unbounded, so only two real bounds can be inverted
    if criteria.age_min and criteria.age_max and criteria.age_min > criteria.age_max:
        changes["age_min"], changes["age_max"] = criteria.age_max, criteria.age_min
    if criteria.location is not None and not criteria.max_radius:
        changes["max_radius"] = DEFAULT_RADIUS_KM
    return criteria.model_copy(update=changes) if changes else criteria


def _same(a: str | None, b: str) -> bool:
    return a is not None and a.casefold() == b.casefold()


def _filter_animal(animal: Animal, criteria: SearchCriteria) -> SearchHit | None:
    """Return a hit when ``animal`` passes every supplied filter, else ``None``."""
    if criteria.species and not _same(animal.species, criteria.species):
        return None

    if criteria.breeds and not any(_same(animal.breed, b) for b in criteria.breeds):
        return None

    if criteria.age_min or criteria.age_max:
        if animal.age_months is None:
            return None
        if criteria.age_min and animal.age_months < criteria.age_min:
            return None
        if criteria.age_max and animal.age_months > criteria.age_max:
            return None

    if criteria.gender and not _same(animal.gender, criteria.gender):
        return None

    if criteria.size and not _same(animal.size, criteria.size):
        return None

    if criteria.good_with_kids and animal.good_with_kids is not True:
        return None

    if criteria.good_with_pets and animal.good_with_pets is not True:
        return None

    if criteria.has_special_needs is not None and animal.has_special_needs != criteria.has_special_needs:
        return None

    if criteria.available and not animal.available:
        return None

    distance = None
    if criteria.location is not None and criteria.max_radius:
        if animal.location is None:
            return None
        distance = haversine_km(
            criteria.location.latitude,
            criteria.location.longitude,
            animal.location.latitude,
            animal.location.longitude,
        )
        if distance > criteria.max_radius:
            return None
        distance = round(distance, 1)

    return SearchHit(animal=animal, distance=distance)


def _sort_hits(hits: list[SearchHit], sort_by: str, ascending: bool) -> list[SearchHit]:
    if sort_by == "distance":
        if any(h.distance is None for h in hits):
            return hits
        key = lambda h: h.distance
    elif sort_by == "age":
        key = lambda h: h.animal.age_months or 0
    else:
        key = lambda h: h.animal.listed_at or _NEVER_LISTED
    return sorted(hits, key=key, reverse=not ascending)


class SearchEngine:
    def __init__(self, catalog: CatalogAccess) -> None:
        self._catalog = catalog

    def get_animal(self, animal_id: str) -> Animal:
        return self._catalog.get_by_id(animal_id)

    def search(
        self,
        criteria: SearchCriteria,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> SearchResponse:
        criteria = normalize_criteria(criteria)
        page = clamp_page(page)
        limit = clamp_limit(limit)
        sort_by = sort_by if sort_by in SORT_KEYS else "created_at"
        sort_order = sort_order if sort_order in SORT_ORDERS else "desc"

        hits: list[SearchHit] = []
        for animal in self._catalog.list_all():
            hit = _filter_animal(animal, criteria)
            if hit is not None:
                hits.append(hit)

        hits = _sort_hits(hits, sort_by, ascending=sort_order == "asc")
        logger.debug("Search matched %d animals (sort=%s %s)", len(hits), sort_by, sort_order)

        return SearchResponse(
            animals=paginate(hits, page, limit),
            total=len(hits),
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
            filters=criteria,
        )
