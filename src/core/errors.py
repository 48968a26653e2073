# src/core/errors.py — v1
"""Error taxonomy shared by the service, stores and CLI.

Only caller-contract errors (validation, not-found) are expected to cross the
recommendation core boundary. Cache-tier failures are absorbed where they
happen and never reach this hierarchy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class QuoteServiceError(Exception):
    """Base error carrying a machine-readable code and an HTTP-style status."""

    status_code: int = 500

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        """Serializable view for the request layer."""
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "status_code": self.status_code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class QuoteValidationError(QuoteServiceError):
    """Caller passed an invalid id or limit."""

    status_code = 400

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(ErrorCode.VALIDATION_ERROR, message, details=details)


class QuoteNotFoundError(QuoteServiceError):
    """Referenced quote id does not exist in the pool."""

    status_code = 404

    def __init__(self, quote_id: str) -> None:
        self.quote_id = quote_id
        super().__init__(
            ErrorCode.QUOTE_NOT_FOUND, "Quote not found", details={"id": quote_id}
        )


class PoolUnavailableError(QuoteServiceError):
    """The persistence collaborator failed and no cache tier could answer."""

    status_code = 503

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(
            ErrorCode.DATABASE_ERROR,
            message,
            details={"error": str(cause)} if cause is not None else None,
        )
