"""travel_bff.core.supabase
=========================
Async client for the Supabase PostgREST interface.

One :class:`SupabaseClient` is created per process by the runtime container
and shared by every request; ``httpx.AsyncClient`` pools connections, so the
handle is safe for concurrent use. Unlike the store adapter, this client
*raises*: every failure is mapped onto the :class:`StoreError` family and it
is the adapter's job to absorb it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
import orjson

from travel_bff.utils.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    RequestEncodingError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
)

__all__ = ["SupabaseClient"]

logger = logging.getLogger(__name__)


class SupabaseClient:
    """Thin async wrapper over ``/rest/v1/rpc/<function>``."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        url: str,
        key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not url or not key:
            missing = [name for name, val in (("supabase_url", url), ("supabase_service_key", key)) if not val]
            raise ConfigurationError("Supabase credentials missing", context={"missing": missing})

        self.url = url.rstrip("/")
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._client = httpx.AsyncClient(
            base_url=self.url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "SupabaseClient":
        key = settings.supabase_service_key.get_secret_value() if settings.supabase_service_key else ""
        return cls(
            settings.supabase_url or "",
            key,
            timeout=settings.supabase_timeout_sec,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Call a Postgres function and return its decoded JSON result.

        Raises:
            StoreTimeoutError: the transport timeout elapsed.
            StoreUnavailableError: connection-level failure.
            StoreError: non-2xx answer from PostgREST.
            MalformedResponseError: body is not valid JSON.
            RequestEncodingError: *params* cannot be serialised.
        """
        context = {"function": function}
        try:
            body = orjson.dumps(params or {})
        except TypeError as exc:
            raise RequestEncodingError(
                "Supabase RPC parameters are not JSON-serialisable", context=context, cause=exc
            ) from exc
        try:
            response = await self._client.post(f"/rest/v1/rpc/{function}", content=body)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise StoreTimeoutError("Supabase RPC timed out", context=context, cause=exc) from exc
        except httpx.HTTPStatusError as exc:
            context.update(status_code=exc.response.status_code, body=exc.response.text[:500])
            raise StoreError("Supabase RPC rejected", context=context, cause=exc) from exc
        except httpx.HTTPError as exc:
            raise StoreUnavailableError("Supabase unreachable", context=context, cause=exc) from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError("Supabase RPC returned invalid JSON", context=context, cause=exc) from exc

    async def ping(self) -> bool:
        """Return True when the REST endpoint answers at all."""
        try:
            response = await self._client.get("/rest/v1/")
        except httpx.HTTPError as exc:
            logger.warning("Supabase ping failed: %s", exc)
            return False
        return response.status_code < 500

    async def aclose(self) -> None:
        await self._client.aclose()
