"""Domain errors rendered by the API error handler (see main.py)."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    """Malformed or ambiguous payload. User-fixable, never retried."""

    code = "validation_error"


class AuthorizationError(AppError):
    """Credential does not belong to the caller's tenant."""

    code = "authorization_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class InvalidStateError(AppError):
    code = "invalid_state"


class UpstreamError(AppError):
    """Non-2xx response or transport failure from the gateway.

    `upstream_status` is None for network errors.
    """

    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str, upstream_status: int | None = None, body: Any = None) -> None:
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status
        self.body = body


class CredentialNotFound(AppError):
    code = "credential_not_found"

    def __init__(self, credential_id: str) -> None:
        super().__init__(f"Credential not found: {credential_id}")
        self.credential_id = credential_id


class QueueUnavailableError(AppError):
    status_code = 503
    code = "queue_unavailable"
