"""
Freshness windows per cached entity kind.
"""
from datetime import timedelta
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from ..core.config import get_freshness_windows


class EntityKind(Enum):
    PROJECT = "project"
    FILES = "files"
    SEARCH = "search"
    CATEGORIES = "categories"
    FINGERPRINT = "fingerprint"


class FreshnessPolicy:
    """
    Maps an entity kind to the max age its cached entries stay fresh.

    Defaults come from ``core.config`` (``MODBRIDGE_TTL_<KIND>`` overrides);
    explicit ``overrides`` win over both.
    """

    def __init__(self, overrides: Optional[Mapping[Union[EntityKind, str], timedelta]] = None):
        configured = get_freshness_windows()
        self._windows: Dict[EntityKind, timedelta] = {kind: configured[kind.value] for kind in EntityKind}
        for kind, window in (overrides or {}).items():
            self._windows[EntityKind(kind) if isinstance(kind, str) else kind] = window

    def max_age(self, kind: Union[EntityKind, str]) -> timedelta:
        return self._windows[EntityKind(kind) if isinstance(kind, str) else kind]
