import os
from datetime import timedelta
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CACHE_BEHAVIOUR = "stale_while_revalidate_skip_offline"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 50

# Freshness windows per cached entity kind, in seconds.
DEFAULT_FRESHNESS_SECONDS: Dict[str, int] = {
    "project": 30 * 60,
    "files": 30 * 60,
    "search": 5 * 60,
    "categories": 24 * 60 * 60,
    "fingerprint": 24 * 60 * 60,
}

_TRUTHY = {"1", "true", "yes", "on"}


def load_env() -> None:
    """
    Load environment variables from the project root `.env`.

    Falls back to the current working directory so that hosts importing the
    package from elsewhere still pick up their own `.env`.
    """
    project_root = Path(__file__).resolve().parents[2]
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
        return

    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(cwd_env, override=False)


def get_log_config() -> dict:
    """
    Logging config is read from environment variables.
    - MODBRIDGE_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default INFO)
    - MODBRIDGE_LOG_FILE: optional path of a log file
    """
    log_file = os.getenv("MODBRIDGE_LOG_FILE", "").strip()
    return {
        "level": os.getenv("MODBRIDGE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL,
        "log_file": Path(log_file) if log_file else None,
    }


def is_offline_env() -> bool:
    """
    Whether the host declared the environment offline.
    - MODBRIDGE_OFFLINE: "1" / "true" / "yes" / "on"
    """
    return os.getenv("MODBRIDGE_OFFLINE", "").strip().lower() in _TRUTHY


def get_cache_behaviour_name() -> str:
    """
    Default cache behaviour name used when a read does not pass one.
    - MODBRIDGE_CACHE_BEHAVIOUR: bypass | must_revalidate |
      stale_while_revalidate | stale_while_revalidate_skip_offline
    """
    return os.getenv("MODBRIDGE_CACHE_BEHAVIOUR", "").strip() or DEFAULT_CACHE_BEHAVIOUR


def get_freshness_windows() -> Dict[str, timedelta]:
    """
    Freshness window per entity kind.
    - MODBRIDGE_TTL_<KIND>: seconds, e.g. MODBRIDGE_TTL_SEARCH=60
    Invalid or negative overrides are ignored.
    """
    windows: Dict[str, timedelta] = {}
    for kind, default_seconds in DEFAULT_FRESHNESS_SECONDS.items():
        seconds = _int_env(f"MODBRIDGE_TTL_{kind.upper()}")
        if seconds is None or seconds < 0:
            seconds = default_seconds
        windows[kind] = timedelta(seconds=seconds)
    return windows


def get_default_page_size() -> int:
    """
    - MODBRIDGE_DEFAULT_PAGE_SIZE: search page size (capped at MAX_PAGE_SIZE)
    """
    size = _int_env("MODBRIDGE_DEFAULT_PAGE_SIZE")
    if size is None or size < 1:
        return DEFAULT_PAGE_SIZE
    return min(size, MAX_PAGE_SIZE)


def _int_env(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
