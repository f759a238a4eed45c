"""Startup-time helpers for safe config logging."""

from pydantic_settings import BaseSettings

from agrinotify.common.logging import logger


SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN", "DSN")


def redacted_config(config: BaseSettings, keys: list[str]) -> dict:
    """Pick `keys` from settings, hiding values whose name looks secret."""

    values = {}
    for key in keys:
        value = getattr(config, key, None)
        if value is None:
            values[key] = "<unset>"
        elif any(marker in key.upper() for marker in SECRET_MARKERS):
            values[key] = "<redacted>"
        else:
            values[key] = value
    return values


def log_startup_config(service_name: str, config: BaseSettings, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    logger.info("startup_config=%s", {"service": service_name, **redacted_config(config, keys)})
