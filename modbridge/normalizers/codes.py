"""
Fixed lookup tables for the numeric codes CurseForge uses in its payloads.

Every decoder is total: codes outside the table come back as the enum's
``UNKNOWN`` member so callers can tell "unmapped" apart from a real value.
"""
from typing import Any, Dict, Optional

from ..models.schema import DependencyRelation, Loader, ProjectType, ReleaseChannel

MINECRAFT_GAME_ID = 432

# 0 is the provider's "any loader" marker, not an unmapped code.
ANY_LOADER_CODE = 0

LOADER_BY_ID: Dict[int, Loader] = {
    1: Loader.FORGE,
    2: Loader.CAULDRON,
    3: Loader.LITELOADER,
    4: Loader.FABRIC,
    5: Loader.QUILT,
    6: Loader.NEOFORGE,
}

PROJECT_TYPE_BY_CLASS_ID: Dict[int, ProjectType] = {
    6: ProjectType.MOD,
    4471: ProjectType.MODPACK,
    12: ProjectType.RESOURCEPACK,
    6552: ProjectType.SHADER,
    6945: ProjectType.DATAPACK,
    5: ProjectType.PLUGIN,
    17: ProjectType.WORLD,
}

CLASS_ID_BY_PROJECT_TYPE: Dict[ProjectType, int] = {v: k for k, v in PROJECT_TYPE_BY_CLASS_ID.items()}

RELEASE_CHANNEL_BY_ID: Dict[int, ReleaseChannel] = {
    1: ReleaseChannel.RELEASE,
    2: ReleaseChannel.BETA,
    3: ReleaseChannel.ALPHA,
}

RELATION_BY_ID: Dict[int, DependencyRelation] = {
    1: DependencyRelation.EMBEDDED,
    2: DependencyRelation.OPTIONAL,
    3: DependencyRelation.REQUIRED,
    4: DependencyRelation.TOOL,
    5: DependencyRelation.INCOMPATIBLE,
    6: DependencyRelation.INCLUDE,
}

# Web slugs used by curseforge.com project urls.
CURSEFORGE_CLASS_SLUGS: Dict[ProjectType, str] = {
    ProjectType.MOD: "mc-mods",
    ProjectType.MODPACK: "modpacks",
    ProjectType.RESOURCEPACK: "texture-packs",
    ProjectType.SHADER: "shaders",
    ProjectType.DATAPACK: "data-packs",
    ProjectType.PLUGIN: "bukkit-plugins",
    ProjectType.WORLD: "worlds",
}


def _as_code(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def decode_loader(code: Any) -> Loader:
    return LOADER_BY_ID.get(_as_code(code), Loader.UNKNOWN)


def decode_project_type(class_id: Any) -> ProjectType:
    return PROJECT_TYPE_BY_CLASS_ID.get(_as_code(class_id), ProjectType.UNKNOWN)


def decode_release_channel(code: Any) -> ReleaseChannel:
    return RELEASE_CHANNEL_BY_ID.get(_as_code(code), ReleaseChannel.UNKNOWN)


def decode_relation(code: Any) -> DependencyRelation:
    return RELATION_BY_ID.get(_as_code(code), DependencyRelation.UNKNOWN)


def loader_code(loader: str) -> Optional[int]:
    """Reverse lookup used when filtering files by loader; ``None`` means any."""
    for code, value in LOADER_BY_ID.items():
        if value.value == (loader or "").strip().lower():
            return code
    return None


def parse_enum(enum_cls: Any, value: Any, default: Any) -> Any:
    """Decode a provider string into ``enum_cls``; unrecognized strings map to ``default``."""
    if not isinstance(value, str):
        return default
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return default
