# tests/unit/core/test_errors.py — v1
"""Tests for core/errors.py — error codes and status mapping."""

from __future__ import annotations

from quoterec.core.errors import (
    ErrorCode,
    PoolUnavailableError,
    QuoteNotFoundError,
    QuoteServiceError,
    QuoteValidationError,
)


class TestErrors:
    def test_validation_error(self):
        err = QuoteValidationError("bad limit", details={"limit": 0})
        assert err.code is ErrorCode.VALIDATION_ERROR
        assert err.status_code == 400
        assert err.as_dict() == {
            "code": "VALIDATION_ERROR",
            "message": "bad limit",
            "status_code": 400,
            "details": {"limit": 0},
        }

    def test_not_found(self):
        err = QuoteNotFoundError("q1")
        assert isinstance(err, QuoteServiceError)
        assert err.status_code == 404
        assert err.quote_id == "q1"
        assert str(err) == "Quote not found"
        assert err.as_dict()["details"] == {"id": "q1"}

    def test_pool_unavailable(self):
        cause = RuntimeError("disk I/O error")
        err = PoolUnavailableError("Quote pool unavailable", cause=cause)
        assert err.code is ErrorCode.DATABASE_ERROR
        assert err.status_code == 503
        assert err.cause is cause
        assert err.details == {"error": "disk I/O error"}

    def test_explicit_status_override(self):
        err = QuoteServiceError(ErrorCode.DATABASE_ERROR, "boom", status_code=502)
        assert err.status_code == 502
        assert "details" not in err.as_dict()
        assert QuoteServiceError(ErrorCode.DATABASE_ERROR, "x").status_code == 500
