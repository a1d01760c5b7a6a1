"""Tests for configuration loading."""

import pytest

from script_controller_client.config.config import ClientConfig, Config, load_client_config


def test_defaults_when_nothing_is_set():
    cfg = Config.load(env={})
    assert cfg == ClientConfig()
    assert cfg.dev_port == 8765
    assert cfg.timeout_s == 30.0


def test_env_values_are_parsed():
    cfg = Config.load(
        env={
            "SCRIPT_CONTROLLER_API_BASE": " http://127.0.0.1:8766 ",
            "SCRIPT_CONTROLLER_DESKTOP_HOST": "true",
            "SCRIPT_CONTROLLER_ORIGIN": "http://localhost:5173",
            "SCRIPT_CONTROLLER_DEV_PORT": "8770",
            "SCRIPT_CONTROLLER_HTTP_TIMEOUT_SECONDS": "12.5",
            "UNRELATED": "ignored",
        }
    )
    assert cfg.api_base == "http://127.0.0.1:8766"
    assert cfg.desktop_host is True
    assert cfg.origin == "http://localhost:5173"
    assert cfg.dev_port == 8770
    assert cfg.timeout_s == 12.5


def test_env_overrides_json5_file(tmp_path):
    path = tmp_path / "client.json5"
    path.write_text(
        "{\n"
        "  // non-secret defaults\n"
        "  SCRIPT_CONTROLLER_API_BASE: 'http://file.example:1',\n"
        "  SCRIPT_CONTROLLER_DEV_PORT: 8771,\n"
        "}\n",
        encoding="utf-8",
    )
    env = {
        "SCRIPT_CONTROLLER_CONFIG_FILE": str(path),
        "SCRIPT_CONTROLLER_API_BASE": "http://env.example:2",
    }
    cfg = load_client_config(env)
    assert cfg.api_base == "http://env.example:2"
    assert cfg.dev_port == 8771


def test_json5_must_be_an_object(tmp_path):
    path = tmp_path / "client.json5"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        Config.load(env={}, json5_path=str(path))


@pytest.mark.parametrize(
    "env",
    [
        {"SCRIPT_CONTROLLER_API_BASE": "127.0.0.1:8765"},
        {"SCRIPT_CONTROLLER_DEV_PORT": "eighty"},
        {"SCRIPT_CONTROLLER_DEV_PORT": "0"},
        {"SCRIPT_CONTROLLER_HTTP_TIMEOUT_SECONDS": "-1"},
        {"SCRIPT_CONTROLLER_DESKTOP_HOST": "maybe"},
    ],
)
def test_invalid_values_are_rejected(env):
    with pytest.raises(ValueError):
        Config.load(env=env)
