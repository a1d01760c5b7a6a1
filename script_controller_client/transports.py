"""
The two ways a request reaches the backend.

`DirectTransport` issues the HTTP call itself with aiohttp; `ProxyTransport`
hands the call to the host bridge, which performs it out-of-process and only
ever answers with raw text or an error. Both expose the same capability: run
one attempt, classify its outcome as retryable or not, and turn the final
outcome into raw body text for the decoder.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple
from urllib.parse import urlparse

import aiohttp

from .decoder import summarize
from .errors import HTTPStatusError, TransportError
from .logger import logger
from .resolver import HostBridge
from .types import RequestDescriptor


class Transport(Protocol):
    """Capability shared by both transport variants."""

    async def attempt(self, request: RequestDescriptor) -> Any:
        """Perform one round-trip; return its outcome or raise."""

    def is_retryable(self, outcome: Any) -> bool:
        """Classify an attempt outcome (raised exception or returned value)."""

    def finish(self, request: RequestDescriptor, outcome: Any) -> Optional[str]:
        """Turn the final outcome into raw response text, raising on failure."""


@dataclass(frozen=True)
class RawResponse:
    """Completed HTTP exchange as seen by the direct transport."""

    status: int
    text: str


class ProxyTransport:
    """Send every request through the host bridge.

    The bridge reports only text or an error, never a status, so every
    raised error counts as retryable.
    """

    def __init__(self, bridge: HostBridge) -> None:
        self._bridge = bridge

    async def attempt(self, request: RequestDescriptor) -> str:
        logger.debug(
            f"Script-Controller client: proxy {request.method} {request.path}"
        )
        return await self._bridge.fetch_api(request.path, request.method, request.body)

    def is_retryable(self, outcome: Any) -> bool:
        return isinstance(outcome, Exception)

    def finish(self, request: RequestDescriptor, outcome: Any) -> Optional[str]:
        return outcome


class DirectTransport:
    """Call the backend over HTTP at `base_url + path`.

    Args:
        base_url: Resolved backend address, or the origin for relative requests.
        session: Optional externally-managed aiohttp session for reuse.
        timeout: Total timeout in seconds for a single HTTP call.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 30.0,
    ) -> None:
        _ensure_scheme(base_url, ("http", "https"))
        self._base_url: str = base_url
        self._session = session
        self._timeout: float = float(timeout)

    def url_for(self, request: RequestDescriptor) -> str:
        return _join_http_base(self._base_url, request.path)

    async def attempt(self, request: RequestDescriptor) -> RawResponse:
        url = self.url_for(request)
        logger.debug(f"Script-Controller client: {request.method} {url}")
        async with _TempSession(self._session) as session:
            try:
                async with session.request(
                    request.method,
                    url,
                    data=request.body,
                    headers=_request_headers(request),
                    timeout=aiohttp.ClientTimeout(total=self._timeout),
                ) as resp:
                    raw = await resp.read()
                    return RawResponse(
                        status=resp.status,
                        text=raw.decode("utf-8", errors="replace"),
                    )
            except asyncio.TimeoutError as e:
                raise TransportError(
                    f"Timeout while calling {request.method} {request.path}",
                    route=request.path,
                    method=request.method,
                    code="timeout",
                ) from e
            except aiohttp.ClientError as e:
                raise TransportError(
                    f"Connection error while calling {request.method} {request.path}: {e}",
                    route=request.path,
                    method=request.method,
                    code="connection_error",
                ) from e

    def is_retryable(self, outcome: Any) -> bool:
        if isinstance(outcome, TransportError):
            return True
        if isinstance(outcome, RawResponse):
            return _is_server_error(outcome.status)
        return False

    def finish(self, request: RequestDescriptor, outcome: RawResponse) -> Optional[str]:
        if _is_server_error(outcome.status):
            raise HTTPStatusError(
                f"HTTP {outcome.status}",
                route=request.path,
                method=request.method,
                status=outcome.status,
                code="http_error",
                body_snippet=summarize(outcome.text),
            )
        return outcome.text


# ---- Internal helpers ----


def _is_server_error(status: int) -> bool:
    return status >= 500


def _request_headers(request: RequestDescriptor) -> Dict[str, str]:
    headers = {"Accept": "application/json"}
    if request.body is not None:
        headers["Content-Type"] = "application/json"
    return headers


def _join_http_base(base: str, route: str) -> str:
    if not route:
        return base
    return f"{base.rstrip('/')}{route}"


def _ensure_scheme(base: str, allowed: Tuple[str, ...]) -> None:
    parsed = urlparse(base)
    if not parsed.scheme or parsed.scheme.lower() not in allowed:
        allowed_str = ", ".join(allowed)
        raise ValueError(
            f"Base URL must start with one of [{allowed_str}]; got: {base!r}. "
            "Set SCRIPT_CONTROLLER_API_BASE or SCRIPT_CONTROLLER_ORIGIN."
        )


class _TempSession:
    """Context manager that yields an aiohttp session, reusing if provided."""

    def __init__(self, session: Optional[aiohttp.ClientSession]):
        self._provided = session
        self._owned: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> aiohttp.ClientSession:
        if self._provided is not None:
            return self._provided
        self._owned = aiohttp.ClientSession()
        return self._owned

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        if self._owned is not None:
            await self._owned.close()


__all__ = ["Transport", "RawResponse", "ProxyTransport", "DirectTransport"]
