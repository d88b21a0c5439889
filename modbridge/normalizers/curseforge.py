import logging
import re
from typing import Any, List, Mapping, Optional, Set

from .base import BaseNormalizer
from .codes import (
    ANY_LOADER_CODE,
    decode_loader,
    decode_project_type,
    decode_relation,
    decode_release_channel,
)
from ..models.schema import (
    BuildCandidate,
    ContentSourceTag,
    CurseForgeOrigin,
    DependencyEdge,
    Loader,
    NormalizedRecord,
    ProjectType,
    make_record_id,
)

# Game-version entries look like "1.20.1"; the same list also carries loader
# and environment tags ("Fabric", "Client").
_GAME_VERSION_RE = re.compile(r"^\d+\.\d+")

# Checked in order: "neoforge" has to win over its "forge" substring.
_LOADER_NAME_HINTS = ("neoforge", "forge", "fabric", "quilt", "liteloader", "cauldron")


class CurseForgeNormalizer(BaseNormalizer):
    source = ContentSourceTag.CURSEFORGE

    def normalize_record(
        self,
        native: Mapping[str, Any],
        *,
        unknown_project_type: ProjectType = ProjectType.MOD,
    ) -> NormalizedRecord:
        mod = self._as_mapping(native)
        native_id = self._coerce_str(mod.get("id"))
        unknown_codes: List[str] = []

        loaders: Set[str] = set()
        versions: Set[str] = set()
        for file_index in self._mappings(mod.get("latestFilesIndexes")):
            code = file_index.get("modLoader")
            if code is not None and code != ANY_LOADER_CODE:
                loader = decode_loader(code)
                if loader is Loader.UNKNOWN:
                    unknown_codes.append(f"loader:{code}")
                else:
                    loaders.add(loader.value)
            game_version = self._optional_str(file_index.get("gameVersion"))
            if game_version:
                versions.add(game_version)

        class_id = mod.get("classId")
        if class_id is None:
            project_type = ProjectType.MOD
        else:
            project_type = decode_project_type(class_id)
            if project_type is ProjectType.UNKNOWN:
                unknown_codes.append(f"class:{class_id}")
                project_type = unknown_project_type

        authors = list(self._mappings(mod.get("authors")))
        author = self._coerce_str(authors[0].get("name")) if authors else ""

        categories = {
            slug
            for slug in (self._optional_str(c.get("slug")) for c in self._mappings(mod.get("categories")))
            if slug
        }
        gallery = self._dedupe(
            url
            for url in (self._optional_str(s.get("url")) for s in self._mappings(mod.get("screenshots")))
            if url
        )
        logo = self._as_mapping(mod.get("logo"))

        if unknown_codes:
            logging.getLogger(__name__).debug(
                "CurseForge mod %s carries unmapped codes: %s", native_id, unknown_codes
            )

        return NormalizedRecord(
            id=make_record_id(self.source, native_id),
            source=self.source,
            origin=CurseForgeOrigin(raw=mod, native_id=native_id),
            slug=self._coerce_str(mod.get("slug")),
            title=self._coerce_str(mod.get("name")),
            description=self._coerce_str(mod.get("summary")),
            author=author or "Unknown",
            downloads=self._coerce_int(mod.get("downloadCount")),
            followers=self._coerce_int(mod.get("thumbsUpCount")),
            project_type=project_type,
            categories=frozenset(categories),
            versions=frozenset(versions),
            loaders=frozenset(loaders),
            created_at=self._parse_datetime(mod.get("dateCreated")),
            modified_at=self._parse_datetime(mod.get("dateModified")),
            gallery=gallery,
            icon_url=self._optional_str(logo.get("url")),
            unknown_codes=self._dedupe(unknown_codes),
        )

    def normalize_build(self, native: Mapping[str, Any]) -> BuildCandidate:
        file = self._as_mapping(native)
        file_id = self._coerce_str(file.get("id"))
        mod_id = self._coerce_str(file.get("modId"))
        raw_versions = self._coerce_str_list(file.get("gameVersions"))

        dependencies = []
        for dep in self._mappings(file.get("dependencies")):
            target = self._coerce_str(dep.get("modId"))
            if not target:
                continue
            dependencies.append(
                DependencyEdge(
                    target_id=make_record_id(self.source, target),
                    relation=decode_relation(dep.get("relationType")),
                )
            )

        return BuildCandidate(
            id=make_record_id(self.source, file_id),
            record_id=make_record_id(self.source, mod_id),
            display_name=self._coerce_str(file.get("displayName")) or self._coerce_str(file.get("fileName")),
            game_versions=frozenset(v for v in raw_versions if _GAME_VERSION_RE.match(v)),
            loaders=frozenset(self._file_loaders(file, raw_versions)),
            release_channel=decode_release_channel(file.get("releaseType")),
            dependencies=tuple(dependencies),
            download_reference=self._optional_str(file.get("downloadUrl")),
            published_at=self._parse_datetime(file.get("fileDate")),
            origin=CurseForgeOrigin(raw=file, native_id=file_id),
        )

    def _file_loaders(self, file: Mapping[str, Any], raw_versions: List[str]) -> Set[str]:
        names = [
            self._coerce_str(v.get("gameVersionName"))
            for v in self._mappings(file.get("sortableGameVersions"))
        ]
        names.extend(v for v in raw_versions if not _GAME_VERSION_RE.match(v))

        loaders: Set[str] = set()
        for name in names:
            hint = _loader_hint(name)
            if hint:
                loaders.add(hint)
        if loaders:
            return loaders

        # Older uploads only mention the loader in the file name.
        file_name = self._coerce_str(file.get("fileName")).lower()
        if "fabric" in file_name:
            loaders.add("fabric")
        if "neoforge" in file_name:
            loaders.add("neoforge")
        elif "forge" in file_name:
            loaders.add("forge")
        if "quilt" in file_name:
            loaders.add("quilt")
        return loaders


def _loader_hint(name: str) -> Optional[str]:
    lowered = (name or "").lower()
    for hint in _LOADER_NAME_HINTS:
        if hint in lowered:
            return hint
    return None
