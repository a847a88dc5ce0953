from __future__ import annotations

import threading

from .models import Favorite


class FavoriteStore:
    """Per-user favorite set; at most one favorite per (user, animal)."""

    def __init__(self) -> None:
        self._favorites: dict[tuple[str, str], Favorite] = {}
        self._lock = threading.Lock()

    def add(self, user_id: str, animal_id: str, note: str | None = None) -> Favorite:
        key = (user_id, animal_id)
        with self._lock:
            existing = self._favorites.get(key)
            if existing is not None:
                return existing
            favorite = Favorite(user_id=user_id, animal_id=animal_id, note=note)
            self._favorites[key] = favorite
            return favorite

    def remove(self, user_id: str, animal_id: str) -> None:
        with self._lock:
            self._favorites.pop((user_id, animal_id), None)

    def contains(self, user_id: str, animal_id: str) -> bool:
        with self._lock:
            return (user_id, animal_id) in self._favorites

    def list_for_user(self, user_id: str) -> list[Favorite]:
        """Newest first."""
        with self._lock:
            favorites = [f for (uid, _), f in self._favorites.items() if uid == user_id]
        return sorted(favorites, key=lambda f: f.created_at, reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._favorites.clear()


_store: FavoriteStore | None = None


def get_favorite_store() -> FavoriteStore:
    global _store
    if _store is None:
        _store = FavoriteStore()
    return _store
