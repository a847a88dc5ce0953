from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Iterable

from ..errors import InvalidArgumentError, NotFoundError
from .models import MatchResult, MatchStatus


def parse_match_status(value: str) -> MatchStatus:
    try:
        return MatchStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in MatchStatus)
        raise InvalidArgumentError(f"Invalid match status {value!r}; expected one of: {allowed}") from None


class MatchHistory:
    """In-memory record of produced matches and their status changes."""

    def __init__(self) -> None:
        self._matches: dict[str, MatchResult] = {}
        self._by_user: dict[str, list[str]] = {}
        self._changes: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def record(self, results: Iterable[MatchResult]) -> None:
        with self._lock:
            for result in results:
                self._matches[result.id] = result
                self._by_user.setdefault(result.user_id, []).insert(0, result.id)

    def _owned(self, user_id: str, match_id: str) -> MatchResult:
        # Caller holds the lock
        match = self._matches.get(match_id)
        if match is None or match.user_id != user_id:
            raise NotFoundError(f"Match {match_id!r} not found")
        return match

    def get(self, user_id: str, match_id: str) -> MatchResult:
        with self._lock:
            return self._owned(user_id, match_id)

    def list_for_user(self, user_id: str, status: MatchStatus | None = None) -> list[MatchResult]:
        """Newest first, optionally filtered by status."""
        with self._lock:
            matches = [self._matches[i] for i in self._by_user.get(user_id, [])]
        if status is not None:
            matches = [m for m in matches if m.status is status]
        return matches

    def update_status(
        self, user_id: str, match_id: str, status: str, note: str | None = None
    ) -> MatchResult:
        new_status = parse_match_status(status)
        now = datetime.now(timezone.utc)

        with self._lock:
            current = self._owned(user_id, match_id)
            if new_status is MatchStatus.pending and current.status is not MatchStatus.pending:
                raise InvalidArgumentError("A match cannot move back to pending")

            updated = current.model_copy(update={"status": new_status, "updated_at": now})
            self._matches[match_id] = updated
            if note:
                self._changes.setdefault(match_id, []).insert(0, {
                    "status": new_status.value,
                    "note": note,
                    "timestamp": now,
                    "user_id": user_id,
                })
        return updated

    def status_changes(self, match_id: str) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._changes.get(match_id, []))

    def clear(self) -> None:
        with self._lock:
            self._matches.clear()
            self._by_user.clear()
            self._changes.clear()


_history: MatchHistory | None = None


def get_match_history() -> MatchHistory:
    global _history
    if _history is None:
        _history = MatchHistory()
    return _history
