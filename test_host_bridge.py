"""Tests for the host bridge, startup injection and port discovery."""

import asyncio

import pytest
from aiohttp import test_utils, web

from script_controller_client.errors import BackendNotReady, TransportError
from script_controller_client.host_bridge import (
    LocalHostBridge,
    StartupStatus,
    apply_startup_status,
    discover_api_port,
)
from script_controller_client.resolver import AddressResolver, HostContext
from script_controller_client.config.config import ClientConfig
from script_controller_client.types import TransportMode


def _backend_app(seen):
    async def scripts(request):
        seen.append((request.method, request.path, await request.text(), request.headers))
        return web.json_response([{"id": "s1"}])

    async def broken(request):
        return web.Response(status=500, text="Traceback: boom")

    async def page(request):
        return web.Response(text="<!doctype html><html><body>frontend</body></html>")

    async def plain(request):
        return web.Response(text="pong")

    async def empty(request):
        return web.Response(status=204)

    app = web.Application()
    app.router.add_route("*", "/api/scripts", scripts)
    app.router.add_get("/api/broken", broken)
    app.router.add_get("/api/page", page)
    app.router.add_get("/api/plain", plain)
    app.router.add_delete("/api/scripts/s1", empty)
    return app


async def _with_backend(seen, action):
    async with test_utils.TestServer(_backend_app(seen)) as server:
        bridge = LocalHostBridge(server.port, port_range=(server.port, server.port))
        return await action(bridge)


def test_fetch_returns_raw_text_and_sends_json_headers():
    seen = []
    text = asyncio.run(
        _with_backend(seen, lambda b: b.fetch_api("api/scripts", "post", '{"name": "x"}'))
    )

    assert text == '[{"id": "s1"}]'
    method, path, body, headers = seen[0]
    assert (method, path, body) == ("POST", "/api/scripts", '{"name": "x"}')
    assert headers["Content-Type"] == "application/json"
    assert headers["Accept"] == "application/json"


def test_empty_success_body_is_returned():
    text = asyncio.run(_with_backend([], lambda b: b.fetch_api("/api/scripts/s1", "DELETE", None)))
    assert text == ""


def test_server_error_becomes_transport_error_with_body():
    with pytest.raises(TransportError) as info:
        asyncio.run(_with_backend([], lambda b: b.fetch_api("/api/broken", "GET", None)))
    assert str(info.value) == "HTTP 500: Traceback: boom"
    assert info.value.status == 500


def test_html_body_is_rejected():
    with pytest.raises(TransportError) as info:
        asyncio.run(_with_backend([], lambda b: b.fetch_api("/api/page", "GET", None)))
    assert info.value.code == "html_body"
    assert "HTML instead of JSON" in str(info.value)


def test_plain_text_body_is_rejected():
    with pytest.raises(TransportError) as info:
        asyncio.run(_with_backend([], lambda b: b.fetch_api("/api/plain", "GET", None)))
    assert info.value.code == "bad_json"
    assert "pong" in str(info.value)


def test_port_outside_range_is_refused_without_a_call():
    bridge = LocalHostBridge(5173)
    with pytest.raises(TransportError) as info:
        asyncio.run(bridge.fetch_api("/api/scripts", "GET", None))
    assert info.value.code == "port_out_of_range"


def test_missing_port_is_not_ready():
    with pytest.raises(BackendNotReady):
        asyncio.run(LocalHostBridge(None).fetch_api("/api/scripts", "GET", None))


def test_unsupported_method_is_refused():
    bridge = LocalHostBridge(8765)
    with pytest.raises(TransportError) as info:
        asyncio.run(bridge.fetch_api("/api/scripts", "OPTIONS", None))
    assert info.value.code == "bad_method"


def test_apply_startup_status_injects_override_and_bridge():
    host = HostContext()
    assert apply_startup_status(StartupStatus(python_ok=True, api_port=8767), host=host)

    assert host.api_base == "http://127.0.0.1:8767"
    assert isinstance(host.bridge, LocalHostBridge)
    assert host.bridge.port == 8767
    resolution = AddressResolver(ClientConfig(), host).resolve()
    assert resolution.mode is TransportMode.PROXY


def test_apply_startup_status_without_port_keeps_backend_not_ready():
    host = HostContext()
    status = StartupStatus(python_ok=False, api_port=None, error="python not found")
    assert not apply_startup_status(status, host=host)

    assert host.api_base is None
    with pytest.raises(BackendNotReady):
        AddressResolver(ClientConfig(origin="http://localhost:5173"), host).resolve()


def test_discover_prefers_reported_port():
    async def health(request):
        return web.json_response({"status": "ok", "port": 8770})

    async def scenario():
        app = web.Application()
        app.router.add_get("/api/health", health)
        async with test_utils.TestServer(app) as server:
            return await discover_api_port(max_wait_s=2.0, ports=[server.port])

    assert asyncio.run(scenario()) == 8770


def test_discover_falls_back_to_probed_port():
    async def health(request):
        return web.json_response({"status": "ok"})

    async def scenario():
        app = web.Application()
        app.router.add_get("/api/health", health)
        async with test_utils.TestServer(app) as server:
            port = server.port
            return port, await discover_api_port(max_wait_s=2.0, ports=[port])

    port, found = asyncio.run(scenario())
    assert found == port


def test_discover_gives_up_when_nothing_answers():
    async def scenario():
        app = web.Application()
        async with test_utils.TestServer(app) as server:
            port = server.port
        # Server is closed now; nothing listens on the port
        return await discover_api_port(max_wait_s=0.5, poll_interval_s=0.1, ports=[port])

    assert asyncio.run(scenario()) is None
