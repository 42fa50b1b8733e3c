"""Unit tests for error codes and their structured log fields."""

from __future__ import annotations

from sitewatch.errors import (
    ConfigError,
    CryptoError,
    ErrorCode,
    FetchError,
    StateError,
)


class TestErrorCodes:
    def test_default_codes(self) -> None:
        assert FetchError("down").code == ErrorCode.FETCH_FAILED
        assert CryptoError("bad key").code == ErrorCode.CRYPTO_FAILED
        assert ConfigError("no sites").code == ErrorCode.CONFIG_INVALID
        assert StateError("corrupt").code == ErrorCode.STATE_INVALID

    def test_http_status_code_when_response_received(self) -> None:
        exc = FetchError("HTTP 404: Not Found", status_code=404, reason="Not Found")
        assert exc.code == ErrorCode.HTTP_STATUS


class TestToDict:
    def test_base_fields(self) -> None:
        assert ConfigError("Site configuration not found").to_dict() == {
            "code": ErrorCode.CONFIG_INVALID,
            "message": "Site configuration not found",
        }

    def test_network_failure_has_no_status(self) -> None:
        assert FetchError("Network error: timed out").to_dict() == {
            "code": ErrorCode.FETCH_FAILED,
            "message": "Network error: timed out",
        }

    def test_http_failure_carries_status_and_reason(self) -> None:
        exc = FetchError(
            "HTTP 503: Service Unavailable",
            status_code=503,
            reason="Service Unavailable",
        )
        assert exc.to_dict() == {
            "code": ErrorCode.HTTP_STATUS,
            "message": "HTTP 503: Service Unavailable",
            "status_code": 503,
            "reason": "Service Unavailable",
        }
