from __future__ import annotations

import logging
import threading
from collections import Counter
from datetime import datetime, timezone

from ..catalog.models import Animal
from ..errors import ConflictError, InvalidArgumentError, NotFoundError
from .models import (
    Application,
    ApplicationRequest,
    ApplicationStatus,
    ApplicationStatusCounts,
)

logger = logging.getLogger(__name__)

# The only transition an applicant can make on their own application.
USER_TRANSITIONS = {ApplicationStatus.cancelled}


def parse_application_status(value: str) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise InvalidArgumentError(
            f"Invalid application status {value!r}; expected one of: {allowed}"
        ) from None


class ApplicationStore:
    def __init__(self) -> None:
        self._applications: dict[str, Application] = {}
        self._lock = threading.Lock()

    def create(self, user_id: str, animal: Animal, request: ApplicationRequest) -> Application:
        if not animal.available:
            raise InvalidArgumentError(f"Animal {animal.id!r} is not available for adoption")

        organization_id = request.organization_id or animal.organization_id or ""
        application = Application(
            user_id=user_id,
            animal_id=animal.id,
            organization_id=organization_id,
            message=request.message,
            applicant=request.applicant,
        )

        with self._lock:
            for existing in self._applications.values():
                if existing.user_id == user_id and existing.animal_id == animal.id:
                    raise ConflictError(
                        f"An application for animal {animal.id!r} already exists"
                    )
            self._applications[application.id] = application

        logger.info("Application %s created for animal %s", application.id, animal.id)
        return application

    def _owned(self, user_id: str, application_id: str) -> Application:
        # Caller holds the lock
        application = self._applications.get(application_id)
        if application is None or application.user_id != user_id:
            raise NotFoundError(f"Application {application_id!r} not found")
        return application

    def get(self, user_id: str, application_id: str) -> Application:
        with self._lock:
            return self._owned(user_id, application_id)

    def list_for_user(
        self, user_id: str, status: ApplicationStatus | None = None
    ) -> list[Application]:
        with self._lock:
            applications = [a for a in self._applications.values() if a.user_id == user_id]
        if status is not None:
            applications = [a for a in applications if a.status is status]
        return sorted(applications, key=lambda a: a.created_at, reverse=True)

    def update_status(self, user_id: str, application_id: str, status: str) -> Application:
        new_status = parse_application_status(status)
        if new_status not in USER_TRANSITIONS:
            raise InvalidArgumentError(
                f"Applicants may not set status {new_status.value!r}; only cancellation is allowed"
            )

        with self._lock:
            current = self._owned(user_id, application_id)
            if current.status is new_status:
                return current
            if current.status is not ApplicationStatus.pending:
                raise InvalidArgumentError(
                    f"Application in status {current.status.value!r} can no longer be cancelled"
                )

            updated = current.model_copy(
                update={"status": new_status, "updated_at": datetime.now(timezone.utc)}
            )
            self._applications[application_id] = updated
        return updated

    def cancel(self, user_id: str, application_id: str) -> Application:
        return self.update_status(user_id, application_id, ApplicationStatus.cancelled.value)

    def status_counts(self, user_id: str) -> ApplicationStatusCounts:
        counts = Counter(a.status.value for a in self.list_for_user(user_id))
        return ApplicationStatusCounts(**counts, total=sum(counts.values()))

    def clear(self) -> None:
        with self._lock:
            self._applications.clear()


_store: ApplicationStore | None = None


def get_application_store() -> ApplicationStore:
    global _store
    if _store is None:
        _store = ApplicationStore()
    return _store
