"""
Content source wrapper that routes every read through the cache governor.
"""
import functools
from typing import Any, Dict, List, Optional, Sequence, Union

from .base import ContentSource, ModSearchParams
from ..cache.governor import CacheBehaviour, CacheGovernor
from ..cache.policy import EntityKind, FreshnessPolicy
from ..cache.store import CacheStore, MemoryCacheStore
from ..core.aio import call_collaborator
from ..models.schema import BuildCandidate, NormalizedRecord, SearchPage

Behaviour = Union[CacheBehaviour, str, None]


def project_key(record_id: str) -> str:
    return f"project:{record_id}"


def files_key(record_id: str, game_version: Optional[str] = None, loader: Optional[str] = None) -> str:
    return f"files:{record_id}:{game_version or ''}:{loader or ''}"


def search_key(params: ModSearchParams) -> str:
    return f"search:{params.to_query_string()}"


def categories_key(class_id: Optional[int] = None) -> str:
    return f"categories:{class_id if class_id is not None else 'all'}"


def fingerprints_key(fingerprints: Sequence[int]) -> str:
    return "fingerprints:" + ",".join(str(f) for f in sorted(fingerprints))


class CachedContentSource:
    """
    ``ContentSource`` whose reads are served under a cache behaviour.

    Every read takes an optional ``behaviour=`` overriding the instance
    default. ``install`` is never cached.
    """

    def __init__(
        self,
        source: ContentSource,
        governor: Optional[CacheGovernor] = None,
        store: Optional[CacheStore] = None,
        behaviour: Behaviour = None,
        policy: Optional[FreshnessPolicy] = None,
    ):
        self.source = source
        self.governor = governor or CacheGovernor()
        self.store = store if store is not None else MemoryCacheStore()
        self.behaviour = CacheBehaviour.parse(behaviour) if behaviour is not None else CacheBehaviour.from_env()
        self.policy = policy or FreshnessPolicy()

    async def _read(self, key: str, kind: EntityKind, fetch_fn: Any, behaviour: Behaviour) -> Any:
        return await self.governor.read(
            key,
            behaviour if behaviour is not None else self.behaviour,
            fetch_fn,
            self.store.get,
            self.store.put,
            max_age=self.policy.max_age(kind),
        )

    async def search_mods(self, params: ModSearchParams, *, behaviour: Behaviour = None) -> Optional[SearchPage]:
        """Search page for ``params``; every fetched hit is also cached as its project."""
        async def fetch() -> Optional[SearchPage]:
            page = await call_collaborator(self.source.search_mods, params)
            if page is not None:
                for record in page.records:
                    await self.governor.prime(project_key(record.id), record, self.store.put)
            return page

        return await self._read(search_key(params), EntityKind.SEARCH, fetch, behaviour)

    async def get_mod(self, record_id: str, *, behaviour: Behaviour = None) -> Optional[NormalizedRecord]:
        return await self._read(
            project_key(record_id),
            EntityKind.PROJECT,
            functools.partial(self.source.get_mod, record_id),
            behaviour,
        )

    async def get_mods(self, record_ids: Sequence[str], *, behaviour: Behaviour = None) -> List[NormalizedRecord]:
        """
        Records for ``record_ids`` in request order.

        Cached ids are served from the store; the ids that have to be fetched
        go upstream in one ``get_mods`` call. Ids nothing could be served for
        are left out.
        """
        ids_by_key = {project_key(rid): rid for rid in record_ids}

        async def fetch_many(keys: List[str]) -> Dict[str, NormalizedRecord]:
            records = await call_collaborator(self.source.get_mods, [ids_by_key[key] for key in keys])
            return {project_key(record.id): record for record in records or [] if record is not None}

        records = await self.governor.read_many(
            [project_key(rid) for rid in record_ids],
            behaviour if behaviour is not None else self.behaviour,
            fetch_many,
            self.store.get,
            self.store.put,
            max_age=self.policy.max_age(EntityKind.PROJECT),
        )
        return [record for record in records if record is not None]

    async def get_mod_files(
        self,
        record_id: str,
        game_version: Optional[str] = None,
        loader: Optional[str] = None,
        *,
        behaviour: Behaviour = None,
    ) -> Optional[List[BuildCandidate]]:
        return await self._read(
            files_key(record_id, game_version, loader),
            EntityKind.FILES,
            functools.partial(self.source.get_mod_files, record_id, game_version, loader),
            behaviour,
        )

    async def get_categories(self, class_id: Optional[int] = None, *, behaviour: Behaviour = None) -> Any:
        return await self._read(
            categories_key(class_id),
            EntityKind.CATEGORIES,
            functools.partial(self.source.get_categories, class_id),
            behaviour,
        )

    async def match_fingerprints(self, fingerprints: Sequence[int], *, behaviour: Behaviour = None) -> Any:
        return await self._read(
            fingerprints_key(fingerprints),
            EntityKind.FINGERPRINT,
            functools.partial(self.source.match_fingerprints, list(fingerprints)),
            behaviour,
        )

    async def install(self, install_target: str, record_id: str, build_id: str) -> Any:
        return await call_collaborator(self.source.install, install_target, record_id, build_id)
