"""Application exception hierarchy for the product database service."""

from __future__ import annotations

from fastapi import status


class ApplicationError(Exception):
    """Base application error with HTTP semantics."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message


class BadInputError(ApplicationError):
    """Request fields are missing, malformed or unparseable."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_input"


class BadReferenceError(ApplicationError):
    """A referenced id does not exist or points at a node of the wrong category."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_reference"


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class BackendError(ApplicationError):
    """The storage backend failed for a reason other than a missing record."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "backend_error"


class OperationCancelledError(ApplicationError):
    """The request was abandoned before it completed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "cancelled"
