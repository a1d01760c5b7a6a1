"""
Host-side pieces of the desktop integration.

`LocalHostBridge` is the trusted intermediary behind the proxy transport: it
talks to the backend on the loopback interface and hands back raw text.
`apply_startup_status` is the host-initialization step that injects the
override address once the backend port is known, and `discover_api_port`
finds that port by polling the health endpoint.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import aiohttp

from .errors import BackendNotReady, TransportError
from .logger import logger
from .resolver import HostContext, get_host_context
from .types import HTTP_METHODS


API_PORT_MIN = 8765
API_PORT_MAX = 8775
BRIDGE_TIMEOUT_SECONDS = 30.0
PORT_POLL_INTERVAL_SECONDS = 0.3


@dataclass(frozen=True)
class StartupStatus:
    """Startup report from the desktop host.

    Attributes:
        python_ok: Whether a usable Python interpreter was found for the backend.
        api_port: Port the backend answered on, or None if it never came up.
        error: Startup error message, if any.
    """

    python_ok: bool
    api_port: Optional[int] = None
    error: Optional[str] = None


class LocalHostBridge:
    """Perform backend calls on 127.0.0.1 on behalf of the proxy transport.

    Args:
        port: Backend port; must lie within `port_range`.
        session: Optional externally-managed aiohttp session for reuse.
        timeout: Total timeout in seconds for one call.
        port_range: Inclusive (min, max) of ports the backend may listen on.
    """

    def __init__(
        self,
        port: Optional[int],
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = BRIDGE_TIMEOUT_SECONDS,
        port_range: Tuple[int, int] = (API_PORT_MIN, API_PORT_MAX),
    ) -> None:
        self._port = port
        self._port_range = port_range
        self._session = session
        self._timeout = float(timeout)

    @property
    def port(self) -> Optional[int]:
        return self._port

    async def fetch_api(self, path: str, method: str, body: Optional[str]) -> str:
        port = self._port
        if port is None:
            raise BackendNotReady("Backend is not ready.")
        low, high = self._port_range
        if not low <= port <= high:
            raise TransportError(
                f"API port {port} is outside the expected range {low}-{high}; "
                "do not point the app at a dev server port such as 5173.",
                code="port_out_of_range",
            )

        route = "/" + path.lstrip("/")
        url = f"http://127.0.0.1:{port}{route}"
        verb = (method or "GET").upper()
        if verb not in HTTP_METHODS:
            raise TransportError(
                f"Unsupported method: {method}", route=route, method=verb, code="bad_method"
            )

        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        owned = self._session is None
        session = self._session or aiohttp.ClientSession()
        try:
            async with session.request(
                verb,
                url,
                data=body,
                headers=headers,
                allow_redirects=False,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                status = resp.status
                text = (await resp.read()).decode("utf-8", errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                str(e) or type(e).__name__,
                route=route,
                method=verb,
                code="connection_error",
            ) from e
        finally:
            if owned:
                await session.close()

        if not 200 <= status <= 299:
            raise TransportError(
                f"HTTP {status}: {text}",
                route=route,
                method=verb,
                status=status,
                code="http_error",
                body_snippet=text[:512],
            )

        trimmed = text.strip()
        if trimmed:
            if trimmed.startswith("<"):
                raise TransportError(
                    f"Backend returned HTML instead of JSON; make sure {url} is the API address. "
                    f"Summary: {trimmed[:80]}",
                    route=route,
                    method=verb,
                    status=status,
                    code="html_body",
                )
            try:
                json.loads(trimmed)
            except ValueError as e:
                raise TransportError(
                    "Backend returned non-JSON data; make sure the script controller has started correctly. "
                    f"Response summary: {trimmed[:120]}",
                    route=route,
                    method=verb,
                    status=status,
                    code="bad_json",
                ) from e
        return text


def apply_startup_status(
    status: StartupStatus,
    host: Optional[HostContext] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> bool:
    """Inject the backend address reported by the desktop host.

    Returns True when an override address was injected. Without a port the
    host is still marked as a desktop host, so dispatch fails fast with
    BackendNotReady instead of guessing an address.
    """
    host = host if host is not None else get_host_context()
    host.desktop_host = True
    if status.api_port is None:
        logger.warning(
            f"⚠️  Script-Controller client: backend not available (python_ok={status.python_ok}): "
            f"{status.error or 'no API port reported'}"
        )
        return False

    host.install_bridge(LocalHostBridge(status.api_port, session=session))
    host.set_api_base(f"http://127.0.0.1:{status.api_port}")
    logger.info(
        f"✅ Script-Controller client: backend reported on port {status.api_port}"
    )
    return True


async def discover_api_port(
    max_wait_s: float = 15.0,
    session: Optional[aiohttp.ClientSession] = None,
    poll_interval_s: float = PORT_POLL_INTERVAL_SECONDS,
    ports: Optional[Iterable[int]] = None,
) -> Optional[int]:
    """Poll `/api/health` across the port range until a backend answers.

    Returns the `port` field of the health payload when it lies in range,
    otherwise the probed port. Returns None when nothing answers in time.
    """
    owned = session is None
    session = session or aiohttp.ClientSession()
    candidates = list(ports) if ports is not None else list(range(API_PORT_MIN, API_PORT_MAX + 1))
    deadline = time.monotonic() + max_wait_s
    try:
        while time.monotonic() < deadline:
            for port in candidates:
                found = await _probe_health(session, port)
                if found is not None:
                    return found
            await asyncio.sleep(poll_interval_s)
        return None
    finally:
        if owned:
            await session.close()


async def _probe_health(session: aiohttp.ClientSession, port: int) -> Optional[int]:
    url = f"http://127.0.0.1:{port}/api/health"
    try:
        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=PORT_POLL_INTERVAL_SECONDS * 3)
        ) as resp:
            if not 200 <= resp.status <= 299:
                return None
            data = await resp.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError):
        return None

    reported = data.get("port") if isinstance(data, dict) else None
    if isinstance(reported, int) and API_PORT_MIN <= reported <= API_PORT_MAX:
        return reported
    return port


__all__ = [
    "API_PORT_MIN",
    "API_PORT_MAX",
    "StartupStatus",
    "LocalHostBridge",
    "apply_startup_status",
    "discover_api_port",
]
