"""Core module: configuration, logging, error handling, and async helpers."""
from .aio import call_collaborator, maybe_await
from .config import (
    DEFAULT_CACHE_BEHAVIOUR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    get_cache_behaviour_name,
    get_default_page_size,
    get_freshness_windows,
    get_log_config,
    is_offline_env,
    load_env,
)
from .error import (
    ErrorType,
    ModBridgeError,
    NotFoundError,
    PartialDependencyFailureError,
    UnavailableError,
    UnmatchedError,
    classify_error,
    handle_error,
    log_error,
)
from .logger import get_logger, setup_logger

__all__ = [
    # Config
    "DEFAULT_CACHE_BEHAVIOUR",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "get_cache_behaviour_name",
    "get_default_page_size",
    "get_freshness_windows",
    "get_log_config",
    "is_offline_env",
    "load_env",
    # Error handling
    "ErrorType",
    "ModBridgeError",
    "NotFoundError",
    "PartialDependencyFailureError",
    "UnavailableError",
    "UnmatchedError",
    "classify_error",
    "handle_error",
    "log_error",
    # Logging
    "setup_logger",
    "get_logger",
    # Async helpers
    "call_collaborator",
    "maybe_await",
]
