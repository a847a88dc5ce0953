from __future__ import annotations

import logging
import threading
from typing import Iterable, Protocol

from ..errors import NotFoundError, UpstreamUnavailableError
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .ingest import load_catalog
from .models import Animal

logger = logging.getLogger(__name__)


class CatalogAccess(Protocol):
    """Read-only view of the animal catalog."""

    def get_by_id(self, animal_id: str) -> Animal: ...

    def get_by_ids(self, animal_ids: Iterable[str]) -> list[Animal]: ...

    def list_all(self) -> list[Animal]: ...


class InMemoryCatalog:
    def __init__(self, animals: Iterable[Animal]) -> None:
        self._animals: dict[str, Animal] = {a.id: a for a in animals}

    def get_by_id(self, animal_id: str) -> Animal:
        animal = self._animals.get(animal_id)
        if animal is None:
            raise NotFoundError(f"Animal {animal_id!r} not found")
        return animal

    def get_by_ids(self, animal_ids: Iterable[str]) -> list[Animal]:
        """Return the known animals among ``animal_ids`` in request order."""
        return [self._animals[i] for i in animal_ids if i in self._animals]

    def list_all(self) -> list[Animal]:
        return list(self._animals.values())


class FileCatalog:
    """Catalog backed by a CSV/JSON file, loaded on first access."""

    def __init__(self, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> None:
        self._config = config
        self._loaded: InMemoryCatalog | None = None
        self._lock = threading.Lock()

    def _catalog(self) -> InMemoryCatalog:
        with self._lock:
            if self._loaded is None:
                try:
                    animals = load_catalog(self._config)
                except (OSError, ValueError) as exc:
                    logger.warning(
                        "Catalog read failed for %s", self._config.catalog_path, exc_info=True
                    )
                    raise UpstreamUnavailableError("Animal catalog is unavailable") from exc
                self._loaded = InMemoryCatalog(animals)
            return self._loaded

    def get_by_id(self, animal_id: str) -> Animal:
        return self._catalog().get_by_id(animal_id)

    def get_by_ids(self, animal_ids: Iterable[str]) -> list[Animal]:
        return self._catalog().get_by_ids(animal_ids)

    def list_all(self) -> list[Animal]:
        return self._catalog().list_all()


_catalog: FileCatalog | None = None


def get_catalog() -> FileCatalog:
    """Return the process-wide file catalog, creating it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = FileCatalog()
    return _catalog
