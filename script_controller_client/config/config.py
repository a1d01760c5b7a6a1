"""
Typed configuration for the script-controller client.

Values come from the process environment (optionally seeded from a `.env`
file at package import) and from an optional JSON5 file holding non-secret
defaults. Environment wins over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse

import json5


DEFAULT_DEV_PORT = 8765
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


@dataclass(frozen=True)
class ClientConfig:
    """Configuration consumed by address resolution and the direct transport.

    Args:
        api_base: Build-time configured backend base URL; empty when unset.
        desktop_host: True when the process runs inside the desktop host.
        origin: URL of the current origin; relative requests are sent here.
        dev_port: Backend port assumed when the origin is a loopback dev host.
        timeout_s: Total timeout in seconds for a single direct HTTP call.
    """

    api_base: str = ""
    desktop_host: bool = False
    origin: str = ""
    dev_port: int = DEFAULT_DEV_PORT
    timeout_s: float = DEFAULT_TIMEOUT_SECONDS


class Config:
    """Public configuration loader API for the script-controller client."""

    @staticmethod
    def load(
        env: Mapping[str, str] = os.environ, json5_path: Optional[str] = None
    ) -> ClientConfig:
        """Load and return a typed configuration instance.

        Args:
            env: Mapping of environment variables used for overrides.
            json5_path: Optional path to a JSON5 file containing non-secret defaults.

        Returns:
            ClientConfig: The parsed and validated configuration object.
        """

        file_overrides: Dict[str, object] = {}
        if json5_path and os.path.exists(json5_path):
            try:
                with open(json5_path, "r", encoding="utf-8") as f:
                    loaded = json5.load(f)
            except Exception as exc:
                raise RuntimeError(
                    f"Failed to read JSON5 configuration from '{json5_path}': {type(exc).__name__}: {exc}"
                ) from exc
            if not isinstance(loaded, dict):
                raise ValueError("JSON5 configuration must be a top-level object")
            file_overrides = {str(k): v for k, v in loaded.items()}

        # Precedence: env > file
        effective: Dict[str, object] = dict(file_overrides)
        effective.update(_select_prefixed(env))

        cfg = _parse_client_config(effective)
        _validate_client_config(cfg)
        return cfg


def load_client_config(env: Mapping[str, str] = os.environ) -> ClientConfig:
    """Load configuration, reading the JSON5 path from SCRIPT_CONTROLLER_CONFIG_FILE."""
    return Config.load(env=env, json5_path=env.get("SCRIPT_CONTROLLER_CONFIG_FILE"))


# ---- Internal helpers ----


def _select_prefixed(env: Mapping[str, str]) -> Dict[str, object]:
    return {k: v for k, v in env.items() if k.startswith("SCRIPT_CONTROLLER_")}


def _parse_client_config(values: Dict[str, object]) -> ClientConfig:
    api_base = str(values.get("SCRIPT_CONTROLLER_API_BASE", "") or "").strip()
    origin = str(values.get("SCRIPT_CONTROLLER_ORIGIN", "") or "").strip()
    desktop_host = _parse_bool(
        values.get("SCRIPT_CONTROLLER_DESKTOP_HOST", False),
        "SCRIPT_CONTROLLER_DESKTOP_HOST",
    )

    dev_port_raw = values.get("SCRIPT_CONTROLLER_DEV_PORT", DEFAULT_DEV_PORT)
    try:
        dev_port = int(dev_port_raw)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid integer for SCRIPT_CONTROLLER_DEV_PORT: {dev_port_raw!r}"
        )

    timeout_raw = values.get(
        "SCRIPT_CONTROLLER_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
    )
    try:
        timeout_s = float(timeout_raw)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid number for SCRIPT_CONTROLLER_HTTP_TIMEOUT_SECONDS: {timeout_raw!r}"
        )

    return ClientConfig(
        api_base=api_base,
        desktop_host=desktop_host,
        origin=origin,
        dev_port=dev_port,
        timeout_s=timeout_s,
    )


def _parse_bool(value: object, key_name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {key_name}: {value!r}")


def _validate_client_config(cfg: ClientConfig) -> None:
    if cfg.api_base:
        _require_url_scheme(cfg.api_base, {"http", "https"}, "SCRIPT_CONTROLLER_API_BASE")
    if cfg.origin:
        _require_url_scheme(cfg.origin, {"http", "https"}, "SCRIPT_CONTROLLER_ORIGIN")
    if not 0 < cfg.dev_port < 65536:
        raise ValueError(
            f"SCRIPT_CONTROLLER_DEV_PORT must be within [1, 65535]; got {cfg.dev_port}"
        )
    if cfg.timeout_s <= 0:
        raise ValueError(
            f"SCRIPT_CONTROLLER_HTTP_TIMEOUT_SECONDS must be positive; got {cfg.timeout_s}"
        )


def _require_url_scheme(url: str, allowed: set[str], key_name: str) -> None:
    parsed = urlparse(url)
    if not parsed.scheme or parsed.scheme.lower() not in allowed:
        allowed_str = ", ".join(sorted(allowed))
        raise ValueError(
            f"{key_name} must start with one of [{allowed_str}]; got: {url!r}"
        )
