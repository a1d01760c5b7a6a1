"""
Composition root: resolve once, then retry through the active transport and
decode the body.

Errors from resolution, transport exhaustion and decoding reach the caller
unchanged.
"""

from __future__ import annotations

from typing import Any, Optional

import aiohttp

from .config.config import ClientConfig, load_client_config
from .decoder import decode_response
from .errors import BackendNotReady
from .resolver import AddressResolver, HostContext
from .retry import RetryExecutor
from .transports import DirectTransport, ProxyTransport, Transport
from .types import RequestDescriptor, Resolution, TransportMode


class Dispatcher:
    """Uniform request API over the proxy and direct transports.

    The transport mode is resolved lazily on the first call and kept for the
    lifetime of the dispatcher. A failed resolution is not cached, so a later
    call can pick up an override injected in the meantime.

    Args:
        config: Client configuration; loaded from the environment when omitted.
        host: Host context carrying the injected override and bridge.
        executor: Retry driver; the default uses the constant backoff policy.
        session: Optional aiohttp session reused by the direct transport.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        host: Optional[HostContext] = None,
        executor: Optional[RetryExecutor] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config if config is not None else load_client_config()
        self._resolver = AddressResolver(self._config, host)
        self._executor = executor or RetryExecutor()
        self._session = session
        self._resolution: Optional[Resolution] = None
        self._transport: Optional[Transport] = None

    @property
    def resolution(self) -> Optional[Resolution]:
        return self._resolution

    async def dispatch(
        self, path: str, method: str = "GET", body: Optional[str] = None
    ) -> Any:
        request = RequestDescriptor.build(path, method, body)
        transport = self._active_transport()
        outcome = await self._executor.execute(
            lambda: transport.attempt(request),
            transport.is_retryable,
            label=f"{request.method} {request.path}",
        )
        return decode_response(transport.finish(request, outcome))

    def _active_transport(self) -> Transport:
        # No await here: the first caller resolves before any other call runs
        if self._transport is None:
            resolution = self._resolver.resolve()
            self._transport = self._build_transport(resolution)
            self._resolution = resolution
        return self._transport

    def _build_transport(self, resolution: Resolution) -> Transport:
        if resolution.mode is TransportMode.PROXY:
            bridge = self._resolver.host.bridge
            if bridge is None:
                raise BackendNotReady()
            return ProxyTransport(bridge)
        return DirectTransport(
            resolution.address or self._config.origin,
            session=self._session,
            timeout=self._config.timeout_s,
        )


_dispatcher: Optional[Dispatcher] = None


def get_dispatcher() -> Dispatcher:
    """Get or create the process-wide dispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher()
    return _dispatcher


async def dispatch(path: str, method: str = "GET", body: Optional[str] = None) -> Any:
    """Dispatch through the process-wide dispatcher."""
    return await get_dispatcher().dispatch(path, method, body)


__all__ = ["Dispatcher", "get_dispatcher", "dispatch"]
