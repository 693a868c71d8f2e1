"""httpx-backed REST transport.

Paths resolved by the registry are relative to ``base_url``. The bearer
token is attached only to verbs configured ``with_credentials``.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from deckcache.errors import TransportError
from deckcache.models.resources import HttpMethod
from deckcache.transport.base import Transport

_log = structlog.get_logger(component="transport.http")


class HttpTransport(Transport):
    """Performs resource verbs with an ``httpx.AsyncClient``.

    Args:
        base_url: API root the resource routes are relative to.
        token:    Optional bearer token for credentialed verbs.
        timeout:  Request timeout in seconds. Defaults to 10.
        client:   Pre-built client (tests pass one with a mock transport).
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Transport base_url must not be empty")
        self._token = token
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def request(
        self,
        method: HttpMethod,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        with_credentials: bool = False,
    ) -> dict[str, Any] | None:
        headers = {"Accept": "application/json"}
        if with_credentials and self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = await self._client.request(str(method), path, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            _log.warning(
                "transport_non_2xx_response",
                method=str(method),
                path=path,
                status_code=status,
                body=exc.response.text[:200],
            )
            raise TransportError(f"{method} {path} failed with HTTP {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            _log.warning("transport_http_error", method=str(method), path=path, error=str(exc))
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path} returned invalid JSON", status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise TransportError(
                f"{method} {path} returned {type(body).__name__}, expected an object",
                status_code=response.status_code,
            )
        return body

    async def close(self) -> None:
        await self._client.aclose()
