from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    HTTP_STATUS = "HTTP_STATUS"
    CRYPTO_FAILED = "CRYPTO_FAILED"
    CONFIG_INVALID = "CONFIG_INVALID"
    STATE_INVALID = "STATE_INVALID"


class SiteWatchError(Exception):
    """Base class for every expected failure raised by sitewatch components.

    Leaf components (fetcher, cipher, stores) raise; only the run loop and the
    CLI catch. Per-site failures are turned into an ``error`` status by the
    run loop, everything else ends the process with a non-zero exit code.
    """

    code: ErrorCode = ErrorCode.FETCH_FAILED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        """Machine-readable fields, used as structured log context."""
        return {"code": self.code, "message": self.message}


class FetchError(SiteWatchError):
    """Raised when a page could not be retrieved with a 2xx response."""

    code = ErrorCode.FETCH_FAILED

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.HTTP_STATUS if status_code is not None else None,
        )
        self.status_code = status_code
        self.reason = reason

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.status_code is not None:
            payload["status_code"] = self.status_code
            payload["reason"] = self.reason
        return payload


class CryptoError(SiteWatchError):
    """Raised on key setup failures and on undecryptable URL payloads."""

    code = ErrorCode.CRYPTO_FAILED


class ConfigError(SiteWatchError):
    """Raised when the site configuration is missing or invalid. Fatal to a run."""

    code = ErrorCode.CONFIG_INVALID


class StateError(SiteWatchError):
    """Raised when persisted status or history cannot be read. Fatal to a run."""

    code = ErrorCode.STATE_INVALID
