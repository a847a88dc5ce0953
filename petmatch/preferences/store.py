from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Protocol

from .models import Preference, PreferenceUpdate


class PreferenceStore(Protocol):
    def get(self, user_id: str) -> Preference | None: ...

    def set(self, user_id: str, update: PreferenceUpdate) -> Preference: ...


class InMemoryPreferenceStore:
    def __init__(self) -> None:
        self._preferences: dict[str, Preference] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Preference | None:
        with self._lock:
            return self._preferences.get(user_id)

    def set(self, user_id: str, update: PreferenceUpdate) -> Preference:
        now = datetime.now(timezone.utc)
        with self._lock:
            existing = self._preferences.get(user_id)
            if existing is None:
                existing = Preference(user_id=user_id, created_at=now)
            merged = existing.merged_with(update).model_copy(update={"updated_at": now})
            self._preferences[user_id] = merged
        return merged

    def clear(self) -> None:
        with self._lock:
            self._preferences.clear()


_store: InMemoryPreferenceStore | None = None


def get_preference_store() -> InMemoryPreferenceStore:
    global _store
    if _store is None:
        _store = InMemoryPreferenceStore()
    return _store
