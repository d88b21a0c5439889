"""
Cache behaviour governor.

Decides per read whether a cached provider response is served as-is, served
while a background refresh runs, or refetched before returning. Every fetch
for a key goes through one shared in-flight task, so concurrent readers of a
key never fetch twice.

| behaviour                           | fresh hit | stale hit                | miss                            |
|-------------------------------------|-----------|--------------------------|---------------------------------|
| bypass                              | fetch     | fetch                    | fetch                           |
| must_revalidate                     | fetch     | fetch                    | fetch                           |
| stale_while_revalidate              | cached    | cached + refresh         | fetch                           |
| stale_while_revalidate_skip_offline | cached    | cached, refresh if online| None offline / on fetch failure |
"""
import asyncio
import functools
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Union

from ..core.aio import call_collaborator, maybe_await
from ..core.config import get_cache_behaviour_name, is_offline_env
from ..core.error import ErrorType, ModBridgeError, log_error
from ..models.schema import CacheEntry

logger = logging.getLogger(__name__)


class CacheBehaviour(Enum):
    STALE_WHILE_REVALIDATE_SKIP_OFFLINE = "stale_while_revalidate_skip_offline"
    STALE_WHILE_REVALIDATE = "stale_while_revalidate"
    MUST_REVALIDATE = "must_revalidate"
    BYPASS = "bypass"

    @classmethod
    def default(cls) -> "CacheBehaviour":
        return cls.STALE_WHILE_REVALIDATE_SKIP_OFFLINE

    @classmethod
    def from_env(cls) -> "CacheBehaviour":
        """Behaviour named by ``MODBRIDGE_CACHE_BEHAVIOUR``, else the default."""
        try:
            return cls.parse(get_cache_behaviour_name())
        except ModBridgeError:
            logger.warning("Ignoring unknown cache behaviour %r", get_cache_behaviour_name())
            return cls.default()

    @classmethod
    def parse(cls, value: Union["CacheBehaviour", str, None]) -> "CacheBehaviour":
        if value is None:
            return cls.default()
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            raise ModBridgeError(
                f"Unknown cache behaviour: {value!r}",
                error_type=ErrorType.INVALID_PARAMS,
                details={"behaviour": str(value)},
            ) from None

    @property
    def serves_cached(self) -> bool:
        return self in (CacheBehaviour.STALE_WHILE_REVALIDATE, CacheBehaviour.STALE_WHILE_REVALIDATE_SKIP_OFFLINE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheGovernor:
    def __init__(
        self,
        is_offline: Optional[Callable[[], bool]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._is_offline = is_offline or is_offline_env
        self._clock = clock or _utcnow
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}
        self._background: Set["asyncio.Task[Any]"] = set()

    @property
    def pending_refreshes(self) -> int:
        return len(self._background)

    async def read(
        self,
        key: str,
        behaviour: Union[CacheBehaviour, str, None],
        fetch_fn: Callable[[], Any],
        cache_get: Callable[[str], Any],
        cache_put: Callable[[str, CacheEntry], Any],
        *,
        max_age: Union[timedelta, int, float],
    ) -> Any:
        """
        Read ``key`` under ``behaviour``.

        Args:
            key: Cache key, shared with every other reader of the same entity
            behaviour: CacheBehaviour or its snake-case name (None = default)
            fetch_fn: Zero-argument provider call, sync or async
            cache_get: ``key -> CacheEntry | None``, sync or async
            cache_put: ``(key, CacheEntry) -> None``, sync or async
            max_age: Freshness window (timedelta or seconds)

        Returns:
            The cached or fetched value; None under skip-offline when nothing
            could be served.

        Raises:
            Fetch errors on the blocking paths (not under skip-offline).
        """
        behaviour = CacheBehaviour.parse(behaviour)
        if not isinstance(max_age, timedelta):
            max_age = timedelta(seconds=max_age)

        if not behaviour.serves_cached:
            return await self._fetch_shared(key, fetch_fn, cache_put)

        entry = await maybe_await(cache_get(key))
        skip_offline = behaviour is CacheBehaviour.STALE_WHILE_REVALIDATE_SKIP_OFFLINE

        if entry is None:
            if not skip_offline:
                return await self._fetch_shared(key, fetch_fn, cache_put)
            if self._is_offline():
                logger.debug("Offline cache miss for %s", key)
                return None
            try:
                return await self._fetch_shared(key, fetch_fn, cache_put)
            except Exception as exc:
                log_error(exc, logger, context={"key": key}, level="WARNING")
                return None

        if entry.is_stale(max_age, self._clock()):
            if skip_offline and self._is_offline():
                logger.debug("Serving stale %s while offline", key)
            else:
                self._refresh_in_background(key, fetch_fn, cache_put)
        return entry.value

    async def read_many(
        self,
        keys: Sequence[str],
        behaviour: Union[CacheBehaviour, str, None],
        fetch_many_fn: Callable[[List[str]], Any],
        cache_get: Callable[[str], Any],
        cache_put: Callable[[str, CacheEntry], Any],
        *,
        max_age: Union[timedelta, int, float],
    ) -> List[Any]:
        """
        Read several keys, fetching everything that is due in one batch call.

        Per key the rules of ``read`` apply. Keys that must be fetched go to
        ``fetch_many_fn`` together, and stale keys are refreshed together in
        the background. Keys already in flight join the running fetch instead.

        Args:
            fetch_many_fn: ``keys -> {key: value}``, sync or async. Keys left
                out of the mapping are treated as unknown upstream and not cached.

        Returns:
            One value per requested key, in request order (None where nothing
            could be served).
        """
        behaviour = CacheBehaviour.parse(behaviour)
        if not isinstance(max_age, timedelta):
            max_age = timedelta(seconds=max_age)
        skip_offline = behaviour is CacheBehaviour.STALE_WHILE_REVALIDATE_SKIP_OFFLINE
        unique = list(dict.fromkeys(keys))

        values: Dict[str, Any] = {}
        blocking: List[str] = []
        stale: List[str] = []
        if not behaviour.serves_cached:
            blocking = unique
        else:
            now = self._clock()
            for key in unique:
                entry = await maybe_await(cache_get(key))
                if entry is None:
                    blocking.append(key)
                    continue
                values[key] = entry.value
                if entry.is_stale(max_age, now):
                    stale.append(key)
            if skip_offline and (blocking or stale) and self._is_offline():
                logger.debug("Offline: %d misses unserved, %d stale entries served", len(blocking), len(stale))
                blocking, stale = [], []

        if stale:
            self._refresh_many_in_background(stale, fetch_many_fn, cache_put)

        if blocking:
            tasks = self._start_batch_fetch(blocking, fetch_many_fn, cache_put)
            try:
                fetched = await asyncio.shield(asyncio.gather(*tasks))
            except Exception as exc:
                if not skip_offline:
                    raise
                log_error(exc, logger, context={"keys": blocking}, level="WARNING")
                fetched = [None] * len(blocking)
            values.update(zip(blocking, fetched))

        return [values.get(key) for key in keys]

    async def prime(self, key: str, value: Any, cache_put: Callable[[str, CacheEntry], Any]) -> None:
        """Write through a value that arrived as part of another fetch."""
        await maybe_await(cache_put(key, CacheEntry(key=key, value=value, fetched_at=self._clock())))

    async def drain(self) -> None:
        """Wait for every background refresh started so far (and any they start)."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _fetch_shared(self, key: str, fetch_fn: Callable[[], Any], cache_put: Callable[..., Any]) -> Any:
        task = self._start_fetch(key, fetch_fn, cache_put)
        # The task is shared; cancelling one reader leaves it running for the rest.
        return await asyncio.shield(task)

    def _refresh_in_background(self, key: str, fetch_fn: Callable[[], Any], cache_put: Callable[..., Any]) -> None:
        if key in self._inflight:
            return
        logger.debug("Refreshing stale %s in background", key)
        self._background.add(self._start_fetch(key, fetch_fn, cache_put))

    def _start_fetch(self, key: str, fetch_fn: Callable[[], Any], cache_put: Callable[..., Any]) -> "asyncio.Task[Any]":
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, fetch_fn, cache_put))
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._on_fetch_done, key))
        return task

    async def _fetch_and_store(self, key: str, fetch_fn: Callable[[], Any], cache_put: Callable[..., Any]) -> Any:
        value = await call_collaborator(fetch_fn)
        await maybe_await(cache_put(key, CacheEntry(key=key, value=value, fetched_at=self._clock())))
        return value

    def _refresh_many_in_background(
        self, keys: List[str], fetch_many_fn: Callable[[List[str]], Any], cache_put: Callable[..., Any]
    ) -> None:
        idle = [key for key in keys if key not in self._inflight]
        if not idle:
            return
        logger.debug("Refreshing %d stale entries in background", len(idle))
        self._background.update(self._start_batch_fetch(idle, fetch_many_fn, cache_put))

    def _start_batch_fetch(
        self, keys: List[str], fetch_many_fn: Callable[[List[str]], Any], cache_put: Callable[..., Any]
    ) -> List["asyncio.Task[Any]"]:
        missing = [key for key in keys if key not in self._inflight]
        if missing:
            batch = asyncio.ensure_future(self._fetch_many_and_store(missing, fetch_many_fn, cache_put))
            for key in missing:
                task = asyncio.ensure_future(_pick(batch, key))
                self._inflight[key] = task
                task.add_done_callback(functools.partial(self._on_fetch_done, key))
        return [self._inflight[key] for key in keys]

    async def _fetch_many_and_store(
        self, keys: List[str], fetch_many_fn: Callable[[List[str]], Any], cache_put: Callable[..., Any]
    ) -> Dict[str, Any]:
        fetched = dict(await call_collaborator(fetch_many_fn, list(keys)) or {})
        fetched_at = self._clock()
        for key in keys:
            if fetched.get(key) is not None:
                await maybe_await(cache_put(key, CacheEntry(key=key, value=fetched[key], fetched_at=fetched_at)))
        return fetched

    def _on_fetch_done(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        background = task in self._background
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and background:
            log_error(error, logger, context={"key": key, "background": True}, level="WARNING")


async def _pick(batch: "asyncio.Future[Dict[str, Any]]", key: str) -> Any:
    return (await batch).get(key)
