"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_SDK_SRC = "chat_engine.sdk.anthropic_sdk"
DEFAULT_SDK_GLOBAL = "sdk"

# Exchange policy
MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = 1.0
STALL_TIMEOUT_SECONDS = 45.0
LOAD_TIMEOUT_SECONDS = 5.0
FALLBACK_TIMEOUT_SECONDS = 30.0
PROBE_INTERVAL_SECONDS = 0.2
DETECTION_WINDOW_SECONDS = 4.0

# Model catalog
CATALOG_TTL_SECONDS = 300.0

DEFAULT_MODEL = "claude-3-5-sonnet"
MAX_SYSTEM_PROMPT_CHARS = 4000


PathLike = Union[str, Path]


def resolve_log_path(env_value: PathLike | None = None) -> Path:
    """Resolve LOG_FILE to an absolute path."""
    if not env_value:
        return DEFAULT_LOG_PATH

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings for the engine and its HTTP adapter."""

    sdk_src: str = DEFAULT_SDK_SRC
    sdk_global: str = DEFAULT_SDK_GLOBAL
    max_retries: int = MAX_RETRIES
    retry_backoff: float = RETRY_BACKOFF_SECONDS
    stall_timeout: float = STALL_TIMEOUT_SECONDS
    load_timeout: float = LOAD_TIMEOUT_SECONDS
    fallback_timeout: float = FALLBACK_TIMEOUT_SECONDS
    probe_interval: float = PROBE_INTERVAL_SECONDS
    detection_window: float = DETECTION_WINDOW_SECONDS
    catalog_ttl: float = CATALOG_TTL_SECONDS
    catalog_refresh_interval: float = CATALOG_TTL_SECONDS
    flag_incomplete: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from CHAT_ENGINE_* environment variables."""
        return cls(
            sdk_src=os.getenv("CHAT_ENGINE_SDK_SRC", DEFAULT_SDK_SRC),
            sdk_global=os.getenv("CHAT_ENGINE_SDK_GLOBAL", DEFAULT_SDK_GLOBAL),
            max_retries=int(_env_float("CHAT_ENGINE_MAX_RETRIES", MAX_RETRIES)),
            retry_backoff=_env_float("CHAT_ENGINE_RETRY_BACKOFF", RETRY_BACKOFF_SECONDS),
            stall_timeout=_env_float("CHAT_ENGINE_STALL_TIMEOUT", STALL_TIMEOUT_SECONDS),
            load_timeout=_env_float("CHAT_ENGINE_LOAD_TIMEOUT", LOAD_TIMEOUT_SECONDS),
            fallback_timeout=_env_float(
                "CHAT_ENGINE_FALLBACK_TIMEOUT", FALLBACK_TIMEOUT_SECONDS
            ),
            probe_interval=_env_float("CHAT_ENGINE_PROBE_INTERVAL", PROBE_INTERVAL_SECONDS),
            detection_window=_env_float(
                "CHAT_ENGINE_DETECTION_WINDOW", DETECTION_WINDOW_SECONDS
            ),
            catalog_ttl=_env_float("CHAT_ENGINE_CATALOG_TTL", CATALOG_TTL_SECONDS),
            catalog_refresh_interval=_env_float(
                "CHAT_ENGINE_CATALOG_REFRESH", CATALOG_TTL_SECONDS
            ),
            flag_incomplete=_env_bool("CHAT_ENGINE_FLAG_INCOMPLETE"),
            debug=_env_bool("CHAT_ENGINE_DEBUG"),
        )
