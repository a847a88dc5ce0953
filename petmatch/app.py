from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from .adoption.applications import (
    ApplicationStore,
    get_application_store,
    parse_application_status,
)
from .adoption.favorites import FavoriteStore, get_favorite_store
from .adoption.models import (
    Application,
    ApplicationDetail,
    ApplicationListResponse,
    ApplicationRequest,
    ApplicationStatusCounts,
    ApplicationStatusUpdate,
    Favorite,
    FavoriteItem,
    FavoriteRequest,
    FavoriteResponse,
)
from .auth.dependencies import require_user
from .catalog.data_store import CatalogAccess, get_catalog
from .catalog.models import Animal, Coordinate
from .errors import NotFoundError, PetMatchError
from .pagination import clamp_limit, clamp_page, paginate
from .preferences.models import Preference, PreferenceUpdate
from .preferences.store import PreferenceStore, get_preference_store
from .recommendations.history import MatchHistory, get_match_history, parse_match_status
from .recommendations.models import (
    MatchHistoryResponse,
    MatchRequest,
    MatchResponse,
    MatchResult,
    MatchStatusUpdate,
)
from .recommendations.ranking import RankingPipeline
from .search.engine import SearchEngine
from .search.models import SearchRequest, SearchResponse
from .suggestions.engine import SuggestionEngine
from .suggestions.models import SuggestionFeed

logger = logging.getLogger(__name__)

app = FastAPI(title="PetMatch Matching API", version="1.0.0")

RECOMMENDATIONS_DEFAULT_LIMIT = 10


@app.exception_handler(PetMatchError)
async def petmatch_error_handler(request: Request, exc: PetMatchError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


# ── Providers ────────────────────────────────────────────────────────────


def get_ranking_pipeline(
    catalog: CatalogAccess = Depends(get_catalog),
    preferences: PreferenceStore = Depends(get_preference_store),
) -> RankingPipeline:
    return RankingPipeline(catalog, preferences)


def get_search_engine(catalog: CatalogAccess = Depends(get_catalog)) -> SearchEngine:
    return SearchEngine(catalog)


def get_suggestion_engine(catalog: CatalogAccess = Depends(get_catalog)) -> SuggestionEngine:
    return SuggestionEngine(catalog)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/search", response_model=SearchResponse)
def search(
    body: SearchRequest,
    engine: SearchEngine = Depends(get_search_engine),
) -> SearchResponse:
    return engine.search(
        body,
        page=body.page,
        limit=body.limit,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
    )


@app.get("/animals/{animal_id}", response_model=Animal)
def get_animal(
    animal_id: str,
    engine: SearchEngine = Depends(get_search_engine),
) -> Animal:
    return engine.get_animal(animal_id)


@app.get("/suggestions/similar/{animal_id}", response_model=SuggestionFeed)
def similar_animals(
    animal_id: str,
    limit: int | None = None,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> SuggestionFeed:
    return engine.similar_to(animal_id, limit)


@app.get("/suggestions/nearby", response_model=SuggestionFeed)
def nearby_animals(
    latitude: float = Query(..., ge=-90.0, le=90.0),
    longitude: float = Query(..., ge=-180.0, le=180.0),
    limit: int | None = None,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> SuggestionFeed:
    return engine.nearby(Coordinate(latitude=latitude, longitude=longitude), limit)


@app.get("/suggestions/new", response_model=SuggestionFeed)
def new_animals(
    limit: int | None = None,
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> SuggestionFeed:
    return engine.new_listings(limit)


# ── Match endpoints ──────────────────────────────────────────────────────


@app.post("/matches", response_model=MatchResponse)
def find_matches(
    body: MatchRequest | None = None,
    user_id: str = Depends(require_user),
    pipeline: RankingPipeline = Depends(get_ranking_pipeline),
    history: MatchHistory = Depends(get_match_history),
) -> MatchResponse:
    body = body or MatchRequest()
    items = pipeline.find_matches(user_id, criteria=body, limit=body.limit)
    history.record(item.match for item in items)
    return MatchResponse(matches=items, total=len(items), limit=clamp_limit(body.limit))


@app.get("/matches/recommendations", response_model=MatchResponse)
def recommendations(
    limit: int | None = None,
    user_id: str = Depends(require_user),
    pipeline: RankingPipeline = Depends(get_ranking_pipeline),
    history: MatchHistory = Depends(get_match_history),
) -> MatchResponse:
    """Matches from the saved preferences only."""
    limit = clamp_limit(limit, RECOMMENDATIONS_DEFAULT_LIMIT)
    items = pipeline.find_matches(user_id, limit=limit)
    history.record(item.match for item in items)
    return MatchResponse(matches=items, total=len(items), limit=limit)


@app.get("/matches/history", response_model=MatchHistoryResponse)
def match_history(
    status: str | None = None,
    page: int | None = None,
    limit: int | None = None,
    user_id: str = Depends(require_user),
    history: MatchHistory = Depends(get_match_history),
) -> MatchHistoryResponse:
    match_status = parse_match_status(status) if status else None
    page, limit = clamp_page(page), clamp_limit(limit)
    matches = history.list_for_user(user_id, match_status)
    return MatchHistoryResponse(
        matches=paginate(matches, page, limit),
        total=len(matches),
        page=page,
        limit=limit,
        status=match_status,
    )


@app.put("/matches/{match_id}/status", response_model=MatchResult)
def update_match_status(
    match_id: str,
    body: MatchStatusUpdate,
    user_id: str = Depends(require_user),
    history: MatchHistory = Depends(get_match_history),
) -> MatchResult:
    return history.update_status(user_id, match_id, body.status, body.note)


# ── Preference endpoints ─────────────────────────────────────────────────


@app.get("/preferences", response_model=Preference)
def get_preferences(
    user_id: str = Depends(require_user),
    store: PreferenceStore = Depends(get_preference_store),
) -> Preference:
    preference = store.get(user_id)
    if preference is None:
        raise NotFoundError(f"No preferences stored for user {user_id!r}")
    return preference


@app.post("/preferences", response_model=Preference)
@app.put("/preferences", response_model=Preference)
def set_preferences(
    body: PreferenceUpdate,
    user_id: str = Depends(require_user),
    store: PreferenceStore = Depends(get_preference_store),
) -> Preference:
    return store.set(user_id, body)


# ── Favorite endpoints ───────────────────────────────────────────────────


@app.post("/favorites", response_model=Favorite)
def add_favorite(
    body: FavoriteRequest,
    user_id: str = Depends(require_user),
    catalog: CatalogAccess = Depends(get_catalog),
    store: FavoriteStore = Depends(get_favorite_store),
) -> Favorite:
    animal = catalog.get_by_id(body.animal_id)
    return store.add(user_id, animal.id, body.note)


@app.get("/favorites", response_model=FavoriteResponse)
def list_favorites(
    page: int | None = None,
    limit: int | None = None,
    user_id: str = Depends(require_user),
    catalog: CatalogAccess = Depends(get_catalog),
    store: FavoriteStore = Depends(get_favorite_store),
) -> FavoriteResponse:
    page, limit = clamp_page(page), clamp_limit(limit)
    favorites = store.list_for_user(user_id)
    page_items = paginate(favorites, page, limit)

    animals = {a.id: a for a in catalog.get_by_ids(f.animal_id for f in page_items)}
    items = [
        FavoriteItem(favorite=f, animal=animals[f.animal_id])
        for f in page_items
        if f.animal_id in animals
    ]
    return FavoriteResponse(favorites=items, total=len(favorites), page=page, limit=limit)


@app.delete("/favorites/{animal_id}")
def remove_favorite(
    animal_id: str,
    user_id: str = Depends(require_user),
    store: FavoriteStore = Depends(get_favorite_store),
) -> dict[str, str]:
    store.remove(user_id, animal_id)
    return {"status": "removed"}


# ── Application endpoints ────────────────────────────────────────────────


@app.post("/applications", response_model=Application, status_code=201)
def create_application(
    body: ApplicationRequest,
    user_id: str = Depends(require_user),
    catalog: CatalogAccess = Depends(get_catalog),
    store: ApplicationStore = Depends(get_application_store),
) -> Application:
    animal = catalog.get_by_id(body.animal_id)
    return store.create(user_id, animal, body)


@app.get("/applications", response_model=ApplicationListResponse)
def list_applications(
    status: str | None = None,
    page: int | None = None,
    limit: int | None = None,
    user_id: str = Depends(require_user),
    catalog: CatalogAccess = Depends(get_catalog),
    store: ApplicationStore = Depends(get_application_store),
) -> ApplicationListResponse:
    app_status = parse_application_status(status) if status else None
    page, limit = clamp_page(page), clamp_limit(limit)
    applications = store.list_for_user(user_id, app_status)
    page_items = paginate(applications, page, limit)

    animals = {a.id: a for a in catalog.get_by_ids(a.animal_id for a in page_items)}
    details = [ApplicationDetail(application=a, animal=animals.get(a.animal_id)) for a in page_items]
    return ApplicationListResponse(
        applications=details, total=len(applications), page=page, limit=limit
    )


@app.get("/applications/stats", response_model=ApplicationStatusCounts)
def application_stats(
    user_id: str = Depends(require_user),
    store: ApplicationStore = Depends(get_application_store),
) -> ApplicationStatusCounts:
    return store.status_counts(user_id)


@app.get("/applications/{application_id}", response_model=ApplicationDetail)
def get_application(
    application_id: str,
    user_id: str = Depends(require_user),
    catalog: CatalogAccess = Depends(get_catalog),
    store: ApplicationStore = Depends(get_application_store),
) -> ApplicationDetail:
    application = store.get(user_id, application_id)
    animals = catalog.get_by_ids([application.animal_id])
    return ApplicationDetail(application=application, animal=animals[0] if animals else None)


@app.put("/applications/{application_id}/status", response_model=Application)
def update_application_status(
    application_id: str,
    body: ApplicationStatusUpdate,
    user_id: str = Depends(require_user),
    store: ApplicationStore = Depends(get_application_store),
) -> Application:
    return store.update_status(user_id, application_id, body.status)


@app.delete("/applications/{application_id}", response_model=Application)
def cancel_application(
    application_id: str,
    user_id: str = Depends(require_user),
    store: ApplicationStore = Depends(get_application_store),
) -> Application:
    return store.cancel(user_id, application_id)
