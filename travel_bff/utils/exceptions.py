# travel_bff/utils/exceptions.py
"""Exception hierarchy for the travel BFF cache subsystem.

Every error raised by this package derives from :class:`TravelBFFError`, which
carries:

- a stable error ``code`` for programmatic handling,
- a free-form ``context`` mapping for debugging,
- the UTC timestamp of the failure,
- an optional chained ``cause``.

The cache policy layer itself is fail-open: store errors are raised by the RPC
transport and absorbed at the adapter boundary, so callers of the smart cache
only ever see these types for programming or configuration mistakes.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from typing import Any, Dict, Optional

__all__ = [
    "TravelBFFError",
    "ValidationError",
    "ConfigurationError",
    "StoreError",
    "StoreUnavailableError",
    "StoreTimeoutError",
    "MalformedResponseError",
    "RequestEncodingError",
    "log_exception",
]

log = logging.getLogger(__name__)


# =============================================================================
# Base Exception Class
# =============================================================================

class TravelBFFError(RuntimeError):
    """Base exception class for all travel BFF errors.

    Attributes:
        message: Human-readable error description
        context: Additional context information as key-value pairs
        code: Error code for programmatic handling
        ts_utc: UTC timestamp when the error occurred

    Example:
        try:
            payload = await client.rpc("get_cache_stats")
        except httpx.HTTPError as e:
            raise StoreError(
                "Stats RPC failed",
                context={"function": "get_cache_stats"},
                cause=e,
            )
    """

    default_code: str = "travel_bff_error"

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.code = self.default_code
        self.ts_utc = dt.datetime.now(dt.timezone.utc)

        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to a JSON-serializable dictionary."""
        payload: Dict[str, Any] = {
            "error": self.code,
            "message": self.message,
            "timestamp": self.ts_utc.isoformat(),
        }

        if self.context:
            payload["context"] = self.context

        if self.__cause__ is not None:
            payload["cause"] = {
                "type": type(self.__cause__).__name__,
                "message": str(self.__cause__),
            }

        return payload

    def __str__(self) -> str:
        """Return compact JSON representation of the exception."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"), default=str)


# =============================================================================
# Validation and Configuration Errors
# =============================================================================

class ValidationError(TravelBFFError):
    """Raised when caller-supplied input is unusable.

    Used for malformed cache-key parts and other programming errors that the
    fail-open cache layer deliberately does not recover from.
    """

    default_code = "validation_error"


class ConfigurationError(TravelBFFError):
    """Raised when required configuration is missing or inconsistent.

    Example:
        if not settings.supabase_url:
            raise ConfigurationError(
                "Supabase URL not configured",
                context={"setting": "supabase_url"},
            )
    """

    default_code = "configuration_error"


# =============================================================================
# Remote Store Errors
# =============================================================================

class StoreError(TravelBFFError):
    """Base class for failures talking to the remote cache store.

    The store adapter catches this family and degrades (miss / ``False`` /
    zeroed stats / failure marker) instead of propagating.
    """

    default_code = "store_error"


class StoreUnavailableError(StoreError):
    """Network-level failure: connection refused, DNS, TLS, reset."""

    default_code = "store_unavailable"


class StoreTimeoutError(StoreError):
    """The transport timeout elapsed before the store answered."""

    default_code = "store_timeout"


class MalformedResponseError(StoreError):
    """The store answered with a body that could not be decoded."""

    default_code = "malformed_response"


class RequestEncodingError(StoreError):
    """RPC parameters could not be encoded as JSON; nothing was sent."""

    default_code = "request_encoding"


# =============================================================================
# Helper Functions
# =============================================================================

def log_exception(
    exception: TravelBFFError,
    *,
    level: int = logging.ERROR,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Log a TravelBFFError with its structured payload attached.

    Args:
        exception: The error to log
        level: Logging level (default ERROR)
        logger: Logger to use (defaults to this module's logger)
    """
    target = logger or log
    target.log(level, "%s: %s", exception.code, exception.message, extra={"error": exception.to_dict()})
