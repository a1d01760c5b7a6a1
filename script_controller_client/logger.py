import logging
import os

logger = logging.getLogger("script_controller_client")


def configure_from_env(
    primary_env_var: str = "SCRIPT_CONTROLLER_LOG_LEVEL",
    fallback_env_var: str = "LOG_LEVEL",
) -> None:
    # Prefer SCRIPT_CONTROLLER_LOG_LEVEL; LOG_LEVEL is shared with the backend
    chosen_var = primary_env_var if os.getenv(primary_env_var) else fallback_env_var
    value = os.getenv(chosen_var)

    default_level = logging.INFO
    level = getattr(logging, value.upper(), None) if value else default_level
    if not isinstance(level, int):
        level = default_level
    logger.setLevel(level)

    effective_name = logging.getLevelName(level)
    if value:
        if not isinstance(getattr(logging, value.upper(), None), int):
            logger.warning(
                f"⚠️  Script-Controller client: {chosen_var}='{value}' is invalid; defaulting to {effective_name}"
            )
        else:
            logger.debug(
                f"ℹ️  Script-Controller client: {chosen_var}='{value}' → level set to {effective_name}"
            )


__all__ = ["logger", "configure_from_env"]
