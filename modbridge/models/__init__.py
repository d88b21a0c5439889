"""Models module: normalized records, build candidates, and boundary value types."""
from .schema import (
    BuildCandidate,
    CacheEntry,
    ContentSourceTag,
    CurseForgeOrigin,
    DependencyEdge,
    DependencyRelation,
    Loader,
    ModrinthOrigin,
    NormalizedRecord,
    Origin,
    Profile,
    ProjectType,
    ReleaseChannel,
    SearchPage,
    make_record_id,
    split_record_id,
)

__all__ = [
    "BuildCandidate",
    "CacheEntry",
    "ContentSourceTag",
    "CurseForgeOrigin",
    "DependencyEdge",
    "DependencyRelation",
    "Loader",
    "ModrinthOrigin",
    "NormalizedRecord",
    "Origin",
    "Profile",
    "ProjectType",
    "ReleaseChannel",
    "SearchPage",
    "make_record_id",
    "split_record_id",
]
