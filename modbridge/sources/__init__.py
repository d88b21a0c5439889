"""Sources module: content-source contracts, search parameters and the cached wrapper."""
from .base import (
    ContentSource,
    InstalledOracle,
    InstallSink,
    ModSearchParams,
    ProfileInstallSink,
    SortField,
    SortOrder,
)
from .cached import CachedContentSource

__all__ = [
    "CachedContentSource",
    "ContentSource",
    "InstallSink",
    "InstalledOracle",
    "ModSearchParams",
    "ProfileInstallSink",
    "SortField",
    "SortOrder",
]
