from typing import Any, List, Mapping, Optional

from .base import BaseNormalizer
from .codes import parse_enum
from ..models.schema import (
    BuildCandidate,
    ContentSourceTag,
    DependencyEdge,
    DependencyRelation,
    ModrinthOrigin,
    NormalizedRecord,
    ProjectType,
    ReleaseChannel,
    make_record_id,
)


class ModrinthNormalizer(BaseNormalizer):
    """
    Normalizer for Modrinth payloads.

    Accepts both the search-hit shape (``project_id``, ``author``, ``follows``,
    ``versions``) and the project shape (``id``, ``team``, ``followers``,
    ``game_versions``); whichever keys are present win. On project payloads
    ``versions`` holds version ids, so ``game_versions`` takes precedence.
    """
    source = ContentSourceTag.MODRINTH

    def normalize_record(
        self,
        native: Mapping[str, Any],
        *,
        unknown_project_type: ProjectType = ProjectType.MOD,
    ) -> NormalizedRecord:
        hit = self._as_mapping(native)
        native_id = self._coerce_str(hit.get("project_id")) or self._coerce_str(hit.get("id"))
        unknown_codes: List[str] = []

        raw_type = hit.get("project_type")
        if raw_type is None:
            project_type = ProjectType.MOD
        else:
            project_type = parse_enum(ProjectType, raw_type, ProjectType.UNKNOWN)
            if project_type is ProjectType.UNKNOWN:
                unknown_codes.append(f"type:{raw_type}")
                project_type = unknown_project_type

        followers = hit.get("follows")
        if followers is None:
            followers = hit.get("followers")
        # Project payloads list version ids under "versions"; only search hits
        # use it for game versions.
        versions = hit.get("game_versions")
        if not isinstance(versions, (list, tuple)):
            versions = hit.get("versions")

        return NormalizedRecord(
            id=make_record_id(self.source, native_id),
            source=self.source,
            origin=ModrinthOrigin(raw=hit, native_id=native_id),
            slug=self._coerce_str(hit.get("slug")),
            title=self._coerce_str(hit.get("title")),
            description=self._coerce_str(hit.get("description")),
            author=self._coerce_str(hit.get("author")) or "Unknown",
            downloads=self._coerce_int(hit.get("downloads")),
            followers=self._coerce_int(followers),
            project_type=project_type,
            categories=frozenset(self._coerce_str_list(hit.get("categories"))),
            versions=frozenset(self._coerce_str_list(versions)),
            loaders=frozenset(v.lower() for v in self._coerce_str_list(hit.get("loaders"))),
            created_at=self._parse_datetime(hit.get("date_created") or hit.get("published")),
            modified_at=self._parse_datetime(hit.get("date_modified") or hit.get("updated")),
            gallery=self._gallery(hit),
            icon_url=self._optional_str(hit.get("icon_url")),
            unknown_codes=tuple(unknown_codes),
        )

    def normalize_build(self, native: Mapping[str, Any]) -> BuildCandidate:
        version = self._as_mapping(native)
        version_id = self._coerce_str(version.get("id"))

        dependencies = []
        for dep in self._mappings(version.get("dependencies")):
            target = self._coerce_str(dep.get("project_id"))
            if not target:
                continue
            dependencies.append(
                DependencyEdge(
                    target_id=make_record_id(self.source, target),
                    relation=parse_enum(DependencyRelation, dep.get("dependency_type"), DependencyRelation.UNKNOWN),
                )
            )

        return BuildCandidate(
            id=make_record_id(self.source, version_id),
            record_id=make_record_id(self.source, self._coerce_str(version.get("project_id"))),
            display_name=self._coerce_str(version.get("name")) or self._coerce_str(version.get("version_number")),
            game_versions=frozenset(self._coerce_str_list(version.get("game_versions"))),
            loaders=frozenset(v.lower() for v in self._coerce_str_list(version.get("loaders"))),
            release_channel=parse_enum(ReleaseChannel, version.get("version_type"), ReleaseChannel.UNKNOWN),
            dependencies=tuple(dependencies),
            download_reference=self._primary_file_url(version),
            published_at=self._parse_datetime(version.get("date_published")),
            origin=ModrinthOrigin(raw=version, native_id=version_id),
        )

    def _gallery(self, hit: Mapping[str, Any]) -> tuple:
        raw = hit.get("gallery")
        urls: List[str] = []
        if isinstance(raw, (list, tuple)):
            for item in raw:
                # Project payloads carry gallery objects, search hits plain urls.
                url = self._optional_str(item.get("url")) if isinstance(item, Mapping) else self._optional_str(item)
                if url:
                    urls.append(url)
        featured = self._optional_str(hit.get("featured_gallery"))
        if featured and featured not in urls:
            urls.insert(0, featured)
        return self._dedupe(urls)

    def _primary_file_url(self, version: Mapping[str, Any]) -> Optional[str]:
        files = self._mappings(version.get("files"))
        if not files:
            return None
        primary = next((f for f in files if f.get("primary") is True), files[0])
        return self._optional_str(primary.get("url"))

