from __future__ import annotations


class PetMatchError(Exception):
    """Base class for errors surfaced by the matching engine."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(PetMatchError):
    code = "NOT_FOUND"
    status_code = 404


class InvalidArgumentError(PetMatchError):
    code = "BAD_REQUEST"
    status_code = 400


class ConflictError(PetMatchError):
    code = "CONFLICT"
    status_code = 409


class UpstreamUnavailableError(PetMatchError):
    """Catalog or preference store could not be read."""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503


class InternalError(PetMatchError):
    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
