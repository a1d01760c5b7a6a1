import os
from dotenv import load_dotenv

# --- Script-Controller client ---
# Request-dispatch layer for the script-controller backend. Importing the
# package loads `.env` overrides and applies the log level before any
# configuration is read.


# --- Load Environment Variables ---
current_dir = os.path.dirname(os.path.abspath(__file__))
dotenv_path = os.path.join(current_dir, ".env")
# Shell environment wins over the .env file
load_dotenv(dotenv_path=dotenv_path)


# --- Package Logger ---
from .logger import configure_from_env, logger

configure_from_env()


from .config.config import ClientConfig, Config, load_client_config
from .decoder import decode_response
from .dispatcher import Dispatcher, dispatch, get_dispatcher
from .errors import (
    BackendNotReady,
    DecodeError,
    HTTPStatusError,
    ScriptControllerClientError,
    TransportError,
)
from .host_bridge import (
    LocalHostBridge,
    StartupStatus,
    apply_startup_status,
    discover_api_port,
)
from .resolver import AddressResolver, HostContext, get_host_context, set_api_base
from .retry import RetryExecutor
from .scripts_api import ScriptsApiClient, get_scripts_api_client
from .transports import DirectTransport, ProxyTransport
from .types import DEFAULT_RETRY_POLICY, RequestDescriptor, RetryPolicy, TransportMode

__all__ = [
    "logger",
    "ClientConfig",
    "Config",
    "load_client_config",
    "decode_response",
    "Dispatcher",
    "dispatch",
    "get_dispatcher",
    "ScriptControllerClientError",
    "BackendNotReady",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
    "LocalHostBridge",
    "StartupStatus",
    "apply_startup_status",
    "discover_api_port",
    "AddressResolver",
    "HostContext",
    "get_host_context",
    "set_api_base",
    "RetryExecutor",
    "ScriptsApiClient",
    "get_scripts_api_client",
    "DirectTransport",
    "ProxyTransport",
    "DEFAULT_RETRY_POLICY",
    "RequestDescriptor",
    "RetryPolicy",
    "TransportMode",
]
