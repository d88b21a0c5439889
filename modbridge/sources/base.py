"""
Boundary contracts between the core and host-supplied provider clients.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, Union
from urllib.parse import quote

from ..core.aio import call_collaborator
from ..core.config import MAX_PAGE_SIZE, get_default_page_size
from ..core.error import ErrorType, ModBridgeError
from ..models.schema import (
    BuildCandidate,
    ContentSourceTag,
    NormalizedRecord,
    ProjectType,
    SearchPage,
)
from ..normalizers.codes import CLASS_ID_BY_PROJECT_TYPE, MINECRAFT_GAME_ID, loader_code


class ContentSource(Protocol):
    """
    Provider client consumed by the core.

    Methods may be sync or async; callers go through ``call_collaborator``.
    Transport, retries and timeouts are the implementation's business.
    """
    def search_mods(self, params: "ModSearchParams") -> SearchPage:
        ...

    def get_mod(self, record_id: str) -> NormalizedRecord:
        ...

    def get_mods(self, record_ids: Sequence[str]) -> List[NormalizedRecord]:
        ...

    def get_mod_files(
        self,
        record_id: str,
        game_version: Optional[str] = None,
        loader: Optional[str] = None,
    ) -> List[BuildCandidate]:
        """Candidate builds, most-recent-first."""
        ...

    def get_categories(self, class_id: Optional[int] = None) -> List[Any]:
        ...

    def match_fingerprints(self, fingerprints: Sequence[int]) -> Any:
        ...

    def install(self, install_target: str, record_id: str, build_id: str) -> Any:
        ...


class InstallSink(Protocol):
    def install(self, record_id: str, build_id: str) -> Any:
        ...


class InstalledOracle(Protocol):
    def is_installed(self, record_id: str) -> bool:
        ...


class ProfileInstallSink:
    """Install sink bound to one install target (a profile path) of a content source."""

    def __init__(self, source: ContentSource, install_target: str):
        self.source = source
        self.install_target = install_target

    async def install(self, record_id: str, build_id: str) -> Any:
        return await call_collaborator(self.source.install, self.install_target, record_id, build_id)


class SortField(Enum):
    FEATURED = 1
    POPULARITY = 2
    LAST_UPDATED = 3
    NAME = 4
    AUTHOR = 5
    TOTAL_DOWNLOADS = 6
    CATEGORY = 7
    GAME_VERSION = 8
    EARLY_ACCESS = 9
    FEATURED_RELEASED = 10
    RELEASED_DATE = 11
    RATING = 12

    @classmethod
    def parse(cls, value: Union["SortField", str, None]) -> "SortField":
        """Map a sort name or UI alias onto a field; unknown names sort by featured."""
        if isinstance(value, cls):
            return value
        return _SORT_ALIASES.get((value or "").strip().lower(), cls.FEATURED)

    @property
    def label(self) -> str:
        return _SORT_LABELS.get(self, self.name.lower())


_SORT_ALIASES = {
    "featured": SortField.FEATURED,
    "popularity": SortField.POPULARITY,
    "follows": SortField.POPULARITY,
    "updated": SortField.LAST_UPDATED,
    "lastupdated": SortField.LAST_UPDATED,
    "name": SortField.NAME,
    "alphabetical": SortField.NAME,
    "author": SortField.AUTHOR,
    "downloads": SortField.TOTAL_DOWNLOADS,
    "totaldownloads": SortField.TOTAL_DOWNLOADS,
    "category": SortField.CATEGORY,
    "game_version": SortField.GAME_VERSION,
    "gameversion": SortField.GAME_VERSION,
    "rating": SortField.RATING,
    "relevance": SortField.RATING,
    "newest": SortField.RELEASED_DATE,
    "released": SortField.RELEASED_DATE,
}

_SORT_LABELS = {
    SortField.LAST_UPDATED: "updated",
    SortField.TOTAL_DOWNLOADS: "downloads",
    SortField.RELEASED_DATE: "newest",
}


class SortOrder(Enum):
    DESCENDING = "desc"
    ASCENDING = "asc"

    @classmethod
    def parse(cls, value: Union["SortOrder", str]) -> "SortOrder":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ModBridgeError(
                f"Unknown sort order: {value!r}",
                error_type=ErrorType.INVALID_PARAMS,
                details={"sort_order": str(value)},
            ) from None


@dataclass(frozen=True)
class ModSearchParams:
    """
    Search request for one provider.

    ``page_size`` is capped at the provider maximum on construction, so two
    requests that differ only above the cap share a cache key.
    """
    source: ContentSourceTag
    query: str = ""
    project_type: Optional[ProjectType] = None
    game_version: Optional[str] = None
    loader: Optional[str] = None
    category_id: Optional[int] = None
    sort_field: Optional[SortField] = None
    sort_order: Optional[SortOrder] = None
    index: int = 0
    page_size: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "source", ContentSourceTag.parse(self.source))
        if isinstance(self.sort_field, str):
            object.__setattr__(self, "sort_field", SortField.parse(self.sort_field))
        if isinstance(self.sort_order, str):
            object.__setattr__(self, "sort_order", SortOrder.parse(self.sort_order))
        size = self.page_size if self.page_size is not None else get_default_page_size()
        object.__setattr__(self, "page_size", max(1, min(int(size), MAX_PAGE_SIZE)))
        object.__setattr__(self, "index", max(0, int(self.index)))

    def to_query_string(self) -> str:
        """
        Stable query string for the request, also used as its cache key.

        CurseForge parameters use the provider's numeric codes; Modrinth
        parameters keep the names.
        """
        curseforge = self.source is ContentSourceTag.CURSEFORGE
        params = [f"source={self.source.value}"]
        if curseforge:
            params.append(f"gameId={MINECRAFT_GAME_ID}")
        if self.project_type is not None:
            if curseforge and self.project_type in CLASS_ID_BY_PROJECT_TYPE:
                params.append(f"classId={CLASS_ID_BY_PROJECT_TYPE[self.project_type]}")
            else:
                params.append(f"projectType={self.project_type.value}")
        if self.category_id is not None:
            params.append(f"categoryId={self.category_id}")
        if self.game_version:
            params.append(f"gameVersion={quote(self.game_version, safe='')}")
        if self.query:
            params.append(f"searchFilter={quote(self.query, safe='')}")
        if self.sort_field is not None:
            params.append(f"sortField={self.sort_field.value if curseforge else self.sort_field.label}")
        if self.sort_order is not None:
            params.append(f"sortOrder={self.sort_order.value}")
        if self.loader:
            code = loader_code(self.loader) if curseforge else None
            if code is not None:
                params.append(f"modLoaderType={code}")
            else:
                params.append(f"loader={quote(self.loader.lower(), safe='')}")
        params.append(f"index={self.index}")
        params.append(f"pageSize={self.page_size}")
        return "&".join(params)
