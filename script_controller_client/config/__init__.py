from .config import ClientConfig, Config, load_client_config

__all__ = ["ClientConfig", "Config", "load_client_config"]
