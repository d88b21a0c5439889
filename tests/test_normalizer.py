from __future__ import annotations

from datetime import datetime, timezone

import pytest

from modbridge.core.error import ErrorType, ModBridgeError
from modbridge.models import ContentSourceTag, DependencyRelation, Loader, ProjectType, ReleaseChannel
from modbridge.models.schema import CurseForgeOrigin, ModrinthOrigin, split_record_id
from modbridge.normalizers import normalize, normalize_build, normalize_builds, normalize_many, project_url
from modbridge.normalizers.codes import decode_loader, decode_project_type, decode_relation, decode_release_channel

CF_MOD = {
    "id": 238222,
    "gameId": 432,
    "name": "Just Enough Items (JEI)",
    "slug": "jei",
    "summary": "View Items and Recipes",
    "downloadCount": 250000000,
    "thumbsUpCount": 1200,
    "classId": 6,
    "authors": [{"id": 1, "name": "mezz"}, {"id": 2, "name": "someone"}],
    "categories": [{"id": 421, "slug": "api"}, {"id": 423, "slug": "map-information"}],
    "logo": {"url": "https://media.forgecdn.net/avatars/jei.png"},
    "screenshots": [
        {"url": "https://media.forgecdn.net/shot1.png"},
        {"url": "https://media.forgecdn.net/shot2.png"},
    ],
    "latestFilesIndexes": [
        {"gameVersion": "1.20.1", "fileId": 1, "modLoader": 1},
        {"gameVersion": "1.20.1", "fileId": 2, "modLoader": 4},
        {"gameVersion": "1.19.2", "fileId": 3, "modLoader": 6},
        {"gameVersion": "1.18.2", "fileId": 4, "modLoader": 0},
    ],
    "dateCreated": "2015-11-23T14:38:40.887Z",
    "dateModified": "2024-05-01T10:00:00Z",
}

MR_HIT = {
    "project_id": "AANobbMI",
    "slug": "sodium",
    "title": "Sodium",
    "description": "The fastest rendering engine",
    "author": "jellysquid3",
    "downloads": 5000000,
    "follows": 30000,
    "project_type": "mod",
    "categories": ["optimization"],
    "versions": ["1.20.1", "1.20.4"],
    "loaders": ["Fabric", "quilt"],
    "icon_url": "https://cdn.modrinth.com/icon.png",
    "gallery": ["https://cdn.modrinth.com/g1.png", "https://cdn.modrinth.com/g2.png"],
    "featured_gallery": "https://cdn.modrinth.com/featured.png",
    "date_created": "2020-11-04T00:00:00Z",
    "date_modified": "2024-01-01T12:30:00+00:00",
}


def test_curseforge_record_fields() -> None:
    record = normalize(CF_MOD, "curseforge")

    assert record.id == "cf-238222"
    assert record.source is ContentSourceTag.CURSEFORGE
    assert isinstance(record.origin, CurseForgeOrigin)
    assert record.native_id == "238222"
    assert record.author == "mezz"
    assert record.followers == 1200
    assert record.downloads == 250000000
    assert record.project_type is ProjectType.MOD
    assert record.categories == {"api", "map-information"}
    assert record.versions == {"1.20.1", "1.19.2", "1.18.2"}
    assert record.loaders == {"forge", "fabric", "neoforge"}
    assert record.gallery == ("https://media.forgecdn.net/shot1.png", "https://media.forgecdn.net/shot2.png")
    assert record.featured_gallery == "https://media.forgecdn.net/shot1.png"
    assert record.icon_url == "https://media.forgecdn.net/avatars/jei.png"
    assert record.created_at == datetime(2015, 11, 23, 14, 38, 40, 887000, tzinfo=timezone.utc)
    assert record.unknown_codes == ()


@pytest.mark.parametrize(
    "code,name",
    [(1, "forge"), (2, "cauldron"), (3, "liteloader"), (4, "fabric"), (5, "quilt"), (6, "neoforge")],
)
def test_loader_codes_map_to_names(code: int, name: str) -> None:
    record = normalize({"id": 1, "latestFilesIndexes": [{"gameVersion": "1.20.1", "modLoader": code}]}, "curseforge")
    assert record.loaders == {name}


def test_unmapped_codes_are_excluded_and_recorded() -> None:
    payload = {
        "id": 7,
        "classId": 4546,
        "latestFilesIndexes": [
            {"gameVersion": "1.20.1", "modLoader": 9},
            {"gameVersion": "1.20.1", "modLoader": 4},
        ],
    }
    record = normalize(payload, "curseforge")

    assert record.loaders == {"fabric"}
    assert record.project_type is ProjectType.MOD
    assert record.unknown_codes == ("loader:9", "class:4546")


def test_unknown_class_policy_is_caller_controlled() -> None:
    record = normalize({"id": 7, "classId": 4546}, "curseforge", unknown_project_type=ProjectType.UNKNOWN)
    assert record.project_type is ProjectType.UNKNOWN


def test_absent_class_id_means_mod() -> None:
    assert normalize({"id": 7}, "curseforge").project_type is ProjectType.MOD


@pytest.mark.parametrize("payload", [None, [], "junk", {}])
def test_malformed_payloads_fall_back_to_defaults(payload) -> None:
    record = normalize(payload, "curseforge")

    assert record.title == ""
    assert record.author == "Unknown"
    assert record.downloads == 0
    assert record.loaders == frozenset()
    assert record.created_at is None
    assert record.gallery == ()


def test_malformed_field_types_do_not_raise() -> None:
    payload = {
        "id": 3,
        "downloadCount": "not a number",
        "authors": "mezz",
        "screenshots": [None, {"url": 5}, {"url": "https://x/ok.png"}],
        "latestFilesIndexes": [{"modLoader": "4"}, "bad"],
        "dateCreated": "yesterday",
    }
    record = normalize(payload, "curseforge")

    assert record.downloads == 0
    assert record.author == "Unknown"
    assert record.gallery == ("https://x/ok.png",)
    assert record.loaders == {"fabric"}
    assert record.created_at is None


def test_unknown_source_tag_is_rejected() -> None:
    with pytest.raises(ModBridgeError) as excinfo:
        normalize(CF_MOD, "planetminecraft")
    assert excinfo.value.error_type is ErrorType.INVALID_PARAMS


def test_modrinth_record_fields() -> None:
    record = normalize(MR_HIT, ContentSourceTag.MODRINTH)

    assert record.id == "mr-AANobbMI"
    assert isinstance(record.origin, ModrinthOrigin)
    assert record.followers == 30000
    assert record.loaders == {"fabric", "quilt"}
    assert record.versions == {"1.20.1", "1.20.4"}
    assert record.gallery[0] == "https://cdn.modrinth.com/featured.png"
    assert record.gallery[1:] == ("https://cdn.modrinth.com/g1.png", "https://cdn.modrinth.com/g2.png")
    assert record.featured_gallery == "https://cdn.modrinth.com/featured.png"
    assert record.modified_at == datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc)


def test_modrinth_featured_already_in_gallery_keeps_order() -> None:
    hit = dict(MR_HIT, featured_gallery="https://cdn.modrinth.com/g2.png")
    record = normalize(hit, "modrinth")
    assert record.gallery == ("https://cdn.modrinth.com/g1.png", "https://cdn.modrinth.com/g2.png")


def test_modrinth_project_payload_prefers_game_versions() -> None:
    # Project payloads carry version ids under "versions"; some start with a digit.
    project = {"id": "AANobbMI", "versions": ["4Xv8bEf1", "tFw0iWAk"], "game_versions": ["1.20.1"]}
    record = normalize(project, "modrinth")
    assert record.versions == {"1.20.1"}


def test_modrinth_search_hit_versions_without_game_versions() -> None:
    hit = {"project_id": "AANobbMI", "versions": ["1.19.2", "1.20.1"]}
    assert normalize(hit, "modrinth").versions == {"1.19.2", "1.20.1"}


def test_ids_never_collide_across_providers() -> None:
    cf = normalize({"id": 1234, "classId": 12}, "curseforge")
    mr = normalize({"project_id": "1234", "project_type": "resourcepack"}, "modrinth")

    assert cf.id != mr.id
    assert split_record_id(cf.id) == (ContentSourceTag.CURSEFORGE, "1234")
    assert split_record_id(mr.id) == (ContentSourceTag.MODRINTH, "1234")
    assert cf.project_type is mr.project_type is ProjectType.RESOURCEPACK


def test_split_record_id_rejects_unprefixed_ids() -> None:
    with pytest.raises(ModBridgeError):
        split_record_id("1234")


def test_curseforge_file_versions_loaders_and_dependencies() -> None:
    build = normalize_build(
        {
            "id": 4001,
            "modId": 238222,
            "displayName": "jei-1.20.1-fabric-15.2.0.jar",
            "fileName": "jei-1.20.1-fabric-15.2.0.jar",
            "releaseType": 2,
            "gameVersions": ["1.20.1", "Fabric", "Client"],
            "sortableGameVersions": [{"gameVersionName": "1.20.1"}, {"gameVersionName": "Fabric"}],
            "dependencies": [
                {"modId": 306612, "relationType": 3},
                {"modId": 32274, "relationType": 2},
                {"relationType": 3},
            ],
            "downloadUrl": "https://edge.forgecdn.net/files/4001/jei.jar",
            "fileDate": "2024-03-01T00:00:00Z",
        },
        "curseforge",
    )

    assert build.id == "cf-4001"
    assert build.record_id == "cf-238222"
    assert build.game_versions == {"1.20.1"}
    assert build.loaders == {"fabric"}
    assert build.release_channel is ReleaseChannel.BETA
    assert [e.target_id for e in build.dependencies] == ["cf-306612", "cf-32274"]
    assert [e.target_id for e in build.required_dependencies] == ["cf-306612"]
    assert build.download_reference == "https://edge.forgecdn.net/files/4001/jei.jar"


def test_curseforge_file_loader_falls_back_to_file_name() -> None:
    build = normalize_build(
        {"id": 1, "modId": 2, "fileName": "create-neoforge-0.5.1.jar", "gameVersions": ["1.21.1"]},
        "curseforge",
    )
    assert build.loaders == {"neoforge"}


def test_neoforge_wins_over_forge_substring() -> None:
    build = normalize_build(
        {"id": 1, "modId": 2, "gameVersions": ["1.21.1", "NeoForge"]},
        "curseforge",
    )
    assert build.loaders == {"neoforge"}


def test_modrinth_version_build() -> None:
    build = normalize_build(
        {
            "id": "OihdIimA",
            "project_id": "AANobbMI",
            "name": "Sodium 0.5.8",
            "version_number": "mc1.20.1-0.5.8",
            "game_versions": ["1.20.1"],
            "loaders": ["fabric"],
            "version_type": "release",
            "dependencies": [
                {"project_id": "P7dR8mSH", "dependency_type": "required"},
                {"version_id": "abc", "dependency_type": "required"},
                {"project_id": "Indium", "dependency_type": "incompatible"},
            ],
            "files": [
                {"url": "https://cdn.modrinth.com/extra.jar", "primary": False},
                {"url": "https://cdn.modrinth.com/sodium.jar", "primary": True},
            ],
            "date_published": "2024-02-01T00:00:00Z",
        },
        "modrinth",
    )

    assert build.id == "mr-OihdIimA"
    assert build.record_id == "mr-AANobbMI"
    assert build.display_name == "Sodium 0.5.8"
    assert [(e.target_id, e.relation) for e in build.dependencies] == [
        ("mr-P7dR8mSH", DependencyRelation.REQUIRED),
        ("mr-Indium", DependencyRelation.INCOMPATIBLE),
    ]
    assert build.download_reference == "https://cdn.modrinth.com/sodium.jar"


def test_list_helpers_keep_source_order() -> None:
    builds = normalize_builds([{"id": 3, "modId": 1}, {"id": 2, "modId": 1}, {"id": 1, "modId": 1}], "curseforge")
    assert [b.id for b in builds] == ["cf-3", "cf-2", "cf-1"]

    records = normalize_many([MR_HIT, {"project_id": "x"}], "modrinth")
    assert [r.id for r in records] == ["mr-AANobbMI", "mr-x"]


def test_project_urls() -> None:
    assert project_url(normalize(CF_MOD, "curseforge")) == "https://www.curseforge.com/minecraft/mc-mods/jei"
    shader = normalize({"id": 5, "slug": "complementary", "classId": 6552}, "curseforge")
    assert project_url(shader) == "https://www.curseforge.com/minecraft/shaders/complementary"
    assert project_url(normalize(MR_HIT, "modrinth")) == "https://modrinth.com/mod/sodium"


def test_decoders_are_total() -> None:
    assert decode_loader(None) is Loader.UNKNOWN
    assert decode_project_type("4471") is ProjectType.MODPACK
    assert decode_release_channel(9) is ReleaseChannel.UNKNOWN
    assert decode_relation(True) is DependencyRelation.UNKNOWN


def test_to_dict_is_json_friendly() -> None:
    data = normalize(CF_MOD, "curseforge").to_dict()

    assert data["source"] == "curseforge"
    assert data["loaders"] == ["fabric", "forge", "neoforge"]
    assert data["created_at"].startswith("2015-11-23T14:38:40")
