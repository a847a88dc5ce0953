from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from petmatch.errors import InvalidArgumentError, NotFoundError
from petmatch.recommendations.history import MatchHistory, parse_match_status
from petmatch.recommendations.models import MatchResult, MatchStatus


def _match(user_id: str = "u1", animal_id: str = "a1") -> MatchResult:
    return MatchResult(user_id=user_id, animal_id=animal_id, score=0.8, reason="ideal size")


def test_parse_match_status():
    assert parse_match_status("viewed") is MatchStatus.viewed
    with pytest.raises(InvalidArgumentError):
        parse_match_status("adopted")


def test_history_newest_first_and_filtered():
    history = MatchHistory()
    first, second = _match(animal_id="a1"), _match(animal_id="a2")
    history.record([first])
    history.record([second])
    history.record([_match(user_id="u2")])

    assert [m.id for m in history.list_for_user("u1")] == [second.id, first.id]

    history.update_status("u1", first.id, "viewed")
    assert [m.id for m in history.list_for_user("u1", MatchStatus.viewed)] == [first.id]


def test_status_transitions():
    history = MatchHistory()
    match = _match()
    history.record([match])

    viewed = history.update_status("u1", match.id, "viewed")
    assert viewed.status is MatchStatus.viewed
    contacted = history.update_status("u1", match.id, "contacted", note="called the shelter")
    assert contacted.status is MatchStatus.contacted
    assert history.get("u1", match.id).status is MatchStatus.contacted

    changes = history.status_changes(match.id)
    assert len(changes) == 1
    assert changes[0]["note"] == "called the shelter"


def test_cannot_return_to_pending():
    history = MatchHistory()
    match = _match()
    history.record([match])
    history.update_status("u1", match.id, "rejected")

    with pytest.raises(InvalidArgumentError):
        history.update_status("u1", match.id, "pending")


def test_unknown_status_rejected():
    history = MatchHistory()
    match = _match()
    history.record([match])
    with pytest.raises(InvalidArgumentError):
        history.update_status("u1", match.id, "maybe")


def test_other_users_match_is_not_found():
    history = MatchHistory()
    match = _match()
    history.record([match])
    with pytest.raises(NotFoundError):
        history.update_status("u2", match.id, "viewed")
    with pytest.raises(NotFoundError):
        history.get("u1", "missing")


class _CountingLock:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.acquired = 0

    def __enter__(self):
        self._lock.acquire()
        self.acquired += 1
        return self

    def __exit__(self, *exc) -> None:
        self._lock.release()


def test_status_update_checks_and_writes_under_one_lock():
    history = MatchHistory()
    match = _match()
    history.record([match])
    lock = _CountingLock()
    history._lock = lock

    history.update_status("u1", match.id, "viewed", note="seen")

    assert lock.acquired == 1


def test_concurrent_updates_never_return_to_pending():
    history = MatchHistory()
    match = _match()
    history.record([match])
    history.update_status("u1", match.id, "viewed")

    def attempt(status: str) -> str:
        try:
            return history.update_status("u1", match.id, status).status.value
        except InvalidArgumentError:
            return "refused"

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, ["pending", "contacted"] * 20))

    assert results.count("refused") == 20
    assert history.get("u1", match.id).status is MatchStatus.contacted
