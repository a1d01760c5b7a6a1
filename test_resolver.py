"""Tests for backend address resolution."""

import pytest

from script_controller_client.config.config import ClientConfig
from script_controller_client.errors import BackendNotReady
from script_controller_client.resolver import AddressResolver, HostContext
from script_controller_client.types import Resolution, TransportMode


class _NullBridge:
    async def fetch_api(self, path, method, body):
        return ""


def _resolve(config=None, host=None):
    return AddressResolver(config or ClientConfig(), host or HostContext()).resolve()


def test_override_without_bridge_is_direct():
    host = HostContext()
    host.set_api_base("http://127.0.0.1:8770")
    config = ClientConfig(api_base="http://backend.example:9000")
    assert _resolve(config, host) == Resolution(TransportMode.DIRECT, "http://127.0.0.1:8770")


def test_override_with_bridge_uses_proxy():
    host = HostContext()
    host.install_bridge(_NullBridge())
    host.set_api_base("http://127.0.0.1:8765")
    assert _resolve(host=host) == Resolution(TransportMode.PROXY, "http://127.0.0.1:8765")


def test_configured_base_beats_desktop_signal():
    config = ClientConfig(api_base="http://backend.example:9000", desktop_host=True)
    assert _resolve(config) == Resolution(TransportMode.DIRECT, "http://backend.example:9000")


def test_desktop_host_without_override_is_not_ready():
    with pytest.raises(BackendNotReady) as info:
        _resolve(ClientConfig(desktop_host=True, origin="http://localhost:5173"))
    assert info.value.code == "backend_not_ready"


def test_installed_bridge_counts_as_desktop_host():
    host = HostContext()
    host.install_bridge(_NullBridge())
    with pytest.raises(BackendNotReady):
        _resolve(host=host)


def test_localhost_origin_uses_dev_port():
    config = ClientConfig(origin="http://localhost:5173", dev_port=8765)
    assert _resolve(config) == Resolution(TransportMode.DIRECT, "http://127.0.0.1:8765")


def test_other_origin_is_relative():
    config = ClientConfig(origin="https://scripts.example.com")
    assert _resolve(config) == Resolution(TransportMode.DIRECT, "")
    assert _resolve() == Resolution(TransportMode.DIRECT, "")
