"""
Normalizers: map provider-native payloads onto the shared record shapes.
"""
from typing import Any, Dict, Iterable, List, Mapping, Union

from .base import BaseNormalizer, Normalizer
from .codes import CURSEFORGE_CLASS_SLUGS
from .curseforge import CurseForgeNormalizer
from .modrinth import ModrinthNormalizer
from ..models.schema import BuildCandidate, ContentSourceTag, NormalizedRecord, ProjectType

_NORMALIZERS: Dict[ContentSourceTag, Normalizer] = {
    ContentSourceTag.MODRINTH: ModrinthNormalizer(),
    ContentSourceTag.CURSEFORGE: CurseForgeNormalizer(),
}


def get_normalizer(source_tag: Union[ContentSourceTag, str]) -> Normalizer:
    """
    Get the normalizer for a provider.

    Raises:
        ModBridgeError: unknown provider tag (INVALID_PARAMS)
    """
    return _NORMALIZERS[ContentSourceTag.parse(source_tag)]


def normalize(
    native_record: Mapping[str, Any],
    source_tag: Union[ContentSourceTag, str],
    *,
    unknown_project_type: ProjectType = ProjectType.MOD,
) -> NormalizedRecord:
    """
    Normalize one provider project payload.

    Total over payload contents: missing or malformed fields fall back to
    defaults. Only an unknown ``source_tag`` raises.
    """
    return get_normalizer(source_tag).normalize_record(
        native_record, unknown_project_type=unknown_project_type
    )


def normalize_build(native_file: Mapping[str, Any], source_tag: Union[ContentSourceTag, str]) -> BuildCandidate:
    """Normalize one provider file/version payload into a build candidate."""
    return get_normalizer(source_tag).normalize_build(native_file)


def normalize_many(
    native_records: Iterable[Mapping[str, Any]],
    source_tag: Union[ContentSourceTag, str],
    *,
    unknown_project_type: ProjectType = ProjectType.MOD,
) -> List[NormalizedRecord]:
    normalizer = get_normalizer(source_tag)
    return [
        normalizer.normalize_record(item, unknown_project_type=unknown_project_type)
        for item in native_records
    ]


def normalize_builds(
    native_files: Iterable[Mapping[str, Any]],
    source_tag: Union[ContentSourceTag, str],
) -> List[BuildCandidate]:
    """Normalize a file list, keeping the provider's (most-recent-first) order."""
    normalizer = get_normalizer(source_tag)
    return [normalizer.normalize_build(item) for item in native_files]


def project_url(record: NormalizedRecord) -> str:
    """Web page of the project on its provider's site."""
    if record.source is ContentSourceTag.CURSEFORGE:
        class_slug = CURSEFORGE_CLASS_SLUGS.get(record.project_type, CURSEFORGE_CLASS_SLUGS[ProjectType.MOD])
        return f"https://www.curseforge.com/minecraft/{class_slug}/{record.slug}"
    project_type = record.project_type if record.project_type is not ProjectType.UNKNOWN else ProjectType.MOD
    return f"https://modrinth.com/{project_type.value}/{record.slug or record.native_id}"


__all__ = [
    "BaseNormalizer",
    "CurseForgeNormalizer",
    "ModrinthNormalizer",
    "Normalizer",
    "get_normalizer",
    "normalize",
    "normalize_build",
    "normalize_builds",
    "normalize_many",
    "project_url",
]
