"""modbridge - Cross-provider mod metadata normalization, build matching and dependency resolution."""
from .cache import CacheBehaviour, CacheGovernor, MemoryCacheStore
from .core.error import ErrorType, ModBridgeError
from .matching import Selection, SelectionTier, is_compatible, select_preferred, select_preferred_with_tier
from .models import BuildCandidate, ContentSourceTag, NormalizedRecord, Profile
from .normalizers import normalize, normalize_build, normalize_builds, normalize_many, project_url
from .pipeline import InstallReport, install_project
from .resolver import DependencyOutcome, DependencyResult, InstallLedger, resolve_dependencies, resolve_many
from .sources import CachedContentSource, ModSearchParams

__version__ = "0.1.0"

__all__ = [
    "BuildCandidate",
    "CacheBehaviour",
    "CacheGovernor",
    "CachedContentSource",
    "ContentSourceTag",
    "DependencyOutcome",
    "DependencyResult",
    "ErrorType",
    "InstallLedger",
    "InstallReport",
    "MemoryCacheStore",
    "ModBridgeError",
    "ModSearchParams",
    "NormalizedRecord",
    "Profile",
    "Selection",
    "SelectionTier",
    "install_project",
    "is_compatible",
    "normalize",
    "normalize_build",
    "normalize_builds",
    "normalize_many",
    "project_url",
    "resolve_dependencies",
    "resolve_many",
    "select_preferred",
    "select_preferred_with_tier",
]
