"""Cache module: behaviour governor, freshness policy and stores."""
from .governor import CacheBehaviour, CacheGovernor
from .policy import EntityKind, FreshnessPolicy
from .store import CacheStore, MemoryCacheStore

__all__ = [
    "CacheBehaviour",
    "CacheGovernor",
    "CacheStore",
    "EntityKind",
    "FreshnessPolicy",
    "MemoryCacheStore",
]
