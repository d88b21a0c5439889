from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ..core.error import ErrorType, ModBridgeError


class ContentSourceTag(Enum):
    MODRINTH = "modrinth"
    CURSEFORGE = "curseforge"

    @property
    def prefix(self) -> str:
        return _ID_PREFIXES[self]

    @classmethod
    def parse(cls, value: Union["ContentSourceTag", str]) -> "ContentSourceTag":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ModBridgeError(
                f"Unknown content source: {value!r}",
                error_type=ErrorType.INVALID_PARAMS,
                details={"source": str(value)},
            ) from None


_ID_PREFIXES: Dict[ContentSourceTag, str] = {
    ContentSourceTag.MODRINTH: "mr-",
    ContentSourceTag.CURSEFORGE: "cf-",
}


class ProjectType(Enum):
    MOD = "mod"
    MODPACK = "modpack"
    RESOURCEPACK = "resourcepack"
    SHADER = "shader"
    DATAPACK = "datapack"
    PLUGIN = "plugin"
    WORLD = "world"
    UNKNOWN = "unknown"


class Loader(Enum):
    FORGE = "forge"
    CAULDRON = "cauldron"
    LITELOADER = "liteloader"
    FABRIC = "fabric"
    QUILT = "quilt"
    NEOFORGE = "neoforge"
    UNKNOWN = "unknown"


class ReleaseChannel(Enum):
    RELEASE = "release"
    BETA = "beta"
    ALPHA = "alpha"
    UNKNOWN = "unknown"


class DependencyRelation(Enum):
    EMBEDDED = "embedded"
    OPTIONAL = "optional"
    REQUIRED = "required"
    TOOL = "tool"
    INCOMPATIBLE = "incompatible"
    INCLUDE = "include"
    UNKNOWN = "unknown"


def make_record_id(source: ContentSourceTag, native_id: Any) -> str:
    """Namespace a provider-native id so both providers can share one id space."""
    return f"{source.prefix}{native_id}"


def split_record_id(record_id: str) -> Tuple[ContentSourceTag, str]:
    """
    Inverse of ``make_record_id``.

    Raises:
        ModBridgeError: the id carries no known provider prefix
    """
    for source, prefix in _ID_PREFIXES.items():
        if record_id.startswith(prefix) and len(record_id) > len(prefix):
            return source, record_id[len(prefix):]
    raise ModBridgeError(
        f"Record id has no provider prefix: {record_id!r}",
        error_type=ErrorType.INVALID_PARAMS,
        details={"id": record_id},
    )


@dataclass(frozen=True)
class ModrinthOrigin:
    """Provider-native Modrinth payload a normalized value was built from."""
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    native_id: str = ""

    @property
    def source(self) -> ContentSourceTag:
        return ContentSourceTag.MODRINTH


@dataclass(frozen=True)
class CurseForgeOrigin:
    """Provider-native CurseForge payload a normalized value was built from."""
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    native_id: str = ""

    @property
    def source(self) -> ContentSourceTag:
        return ContentSourceTag.CURSEFORGE


Origin = Union[ModrinthOrigin, CurseForgeOrigin]


@dataclass(frozen=True)
class NormalizedRecord:
    id: str
    source: ContentSourceTag
    origin: Origin
    slug: str = ""
    title: str = ""
    description: str = ""
    author: str = "Unknown"
    downloads: int = 0
    followers: int = 0
    project_type: ProjectType = ProjectType.MOD
    categories: FrozenSet[str] = frozenset()
    versions: FrozenSet[str] = frozenset()
    loaders: FrozenSet[str] = frozenset()
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    gallery: Tuple[str, ...] = ()
    icon_url: Optional[str] = None
    unknown_codes: Tuple[str, ...] = ()

    @property
    def featured_gallery(self) -> Optional[str]:
        return self.gallery[0] if self.gallery else None

    @property
    def native_id(self) -> str:
        return self.origin.native_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "author": self.author,
            "downloads": self.downloads,
            "followers": self.followers,
            "project_type": self.project_type.value,
            "categories": sorted(self.categories),
            "versions": sorted(self.versions),
            "loaders": sorted(self.loaders),
            "created_at": _isoformat(self.created_at),
            "modified_at": _isoformat(self.modified_at),
            "gallery": list(self.gallery),
            "featured_gallery": self.featured_gallery,
            "icon_url": self.icon_url,
            "unknown_codes": list(self.unknown_codes),
        }


@dataclass(frozen=True)
class DependencyEdge:
    target_id: str
    relation: DependencyRelation

    @property
    def is_required(self) -> bool:
        return self.relation is DependencyRelation.REQUIRED


@dataclass(frozen=True)
class BuildCandidate:
    id: str
    record_id: str
    display_name: str = ""
    game_versions: FrozenSet[str] = frozenset()
    loaders: FrozenSet[str] = frozenset()
    release_channel: ReleaseChannel = ReleaseChannel.RELEASE
    dependencies: Tuple[DependencyEdge, ...] = ()
    download_reference: Optional[str] = None
    published_at: Optional[datetime] = None
    origin: Optional[Origin] = field(default=None, compare=False)

    @property
    def required_dependencies(self) -> Tuple[DependencyEdge, ...]:
        return tuple(edge for edge in self.dependencies if edge.is_required)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "record_id": self.record_id,
            "display_name": self.display_name,
            "game_versions": sorted(self.game_versions),
            "loaders": sorted(self.loaders),
            "release_channel": self.release_channel.value,
            "dependencies": [
                {"target_id": edge.target_id, "relation": edge.relation.value}
                for edge in self.dependencies
            ],
            "download_reference": self.download_reference,
            "published_at": _isoformat(self.published_at),
        }


@dataclass(frozen=True)
class Profile:
    """Target runtime a build is matched against."""
    loader: str
    game_version: str


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    fetched_at: datetime

    def is_stale(self, max_age: timedelta, now: datetime) -> bool:
        return now - self.fetched_at > max_age


@dataclass(frozen=True)
class SearchPage:
    records: Tuple[NormalizedRecord, ...] = ()
    total_count: int = 0
    index: int = 0
    page_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": [r.to_dict() for r in self.records],
            "total_count": self.total_count,
            "index": self.index,
            "page_size": self.page_size,
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
