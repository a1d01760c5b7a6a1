"""
Backend address resolution.

The desktop host injects an override address (and usually a host bridge)
into the process-wide `HostContext` once the backend port is known. Until then
the resolver falls back to build-time configuration, a loopback development
heuristic, or origin-relative requests.
"""

from __future__ import annotations

from typing import Optional, Protocol
from urllib.parse import urlparse

from .config.config import ClientConfig
from .errors import BackendNotReady
from .logger import logger
from .types import Resolution, TransportMode


LOOPBACK_DEV_HOSTS = ("localhost",)


class HostBridge(Protocol):
    """Trusted host-side intermediary that performs the HTTP call out-of-process.

    Implementations return the raw response text or raise; any raised
    exception is treated as retryable by the proxy transport.
    """

    async def fetch_api(self, path: str, method: str, body: Optional[str]) -> str:
        """Perform `method path` against the backend and return the body text."""


class HostContext:
    """Signals injected by the desktop host at startup.

    Attributes:
        api_base: Override backend address, or None until injected.
        bridge: Host bridge used for proxied requests, if installed.
        desktop_host: True once the process is known to run in the desktop host.
    """

    def __init__(self) -> None:
        self.api_base: Optional[str] = None
        self.bridge: Optional[HostBridge] = None
        self.desktop_host: bool = False

    def set_api_base(self, address: str) -> None:
        self.api_base = address

    def install_bridge(self, bridge: HostBridge) -> None:
        self.bridge = bridge
        self.desktop_host = True

    @property
    def in_desktop_host(self) -> bool:
        return self.desktop_host or self.bridge is not None


_host_context: Optional[HostContext] = None


def get_host_context() -> HostContext:
    """Get or create the process-wide host context."""
    global _host_context
    if _host_context is None:
        _host_context = HostContext()
    return _host_context


def set_api_base(address: str) -> None:
    """Inject the override backend address into the process-wide host context."""
    get_host_context().set_api_base(address)


class AddressResolver:
    """Decide the transport mode and base address from host signals and config."""

    def __init__(self, config: ClientConfig, host: Optional[HostContext] = None) -> None:
        self._config = config
        self._host = host if host is not None else get_host_context()

    @property
    def host(self) -> HostContext:
        return self._host

    def resolve(self) -> Resolution:
        host = self._host
        cfg = self._config

        if host.api_base:
            mode = TransportMode.PROXY if host.bridge is not None else TransportMode.DIRECT
            return self._resolved(mode, host.api_base, "injected override")

        if cfg.api_base:
            return self._resolved(TransportMode.DIRECT, cfg.api_base, "SCRIPT_CONTROLLER_API_BASE")

        if host.in_desktop_host or cfg.desktop_host:
            # Only the injected address is safe to use inside the desktop host
            raise BackendNotReady()

        if _origin_hostname(cfg.origin) in LOOPBACK_DEV_HOSTS:
            return self._resolved(
                TransportMode.DIRECT,
                f"http://127.0.0.1:{cfg.dev_port}",
                "loopback development origin",
            )

        return self._resolved(TransportMode.DIRECT, "", "origin-relative")

    def _resolved(self, mode: TransportMode, address: str, source: str) -> Resolution:
        logger.info(
            f"ℹ️  Script-Controller client: using {mode.value} transport, base={address or '(relative)'} ({source})"
        )
        return Resolution(mode=mode, address=address)


def _origin_hostname(origin: str) -> Optional[str]:
    if not origin:
        return None
    return urlparse(origin).hostname


__all__ = [
    "HostBridge",
    "HostContext",
    "AddressResolver",
    "get_host_context",
    "set_api_base",
]
