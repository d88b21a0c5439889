from __future__ import annotations

import json
from pathlib import Path

import pytest

from scripts.modbridge_cli import normalize_payload, run_cli, select_build

CF_FILES = [
    {"id": 11, "modId": 5, "fileName": "mod-forge-2.0.jar", "gameVersions": ["1.20.1", "Forge"]},
    {"id": 10, "modId": 5, "fileName": "mod-fabric-2.0.jar", "gameVersions": ["1.20.1", "Fabric"]},
]


def test_select_build_reports_tier() -> None:
    out = select_build(CF_FILES, "curseforge", loader="Fabric", game_version="1.20.1")

    assert out["candidate"]["id"] == "cf-10"
    assert out["tier_name"] == "exact"
    assert out["n_candidates"] == 2


def test_normalize_payload_adds_project_url() -> None:
    out = normalize_payload({"id": 5, "slug": "mod", "classId": 6}, "curseforge")

    assert out[0]["project_url"] == "https://www.curseforge.com/minecraft/mc-mods/mod"


def test_run_cli_select(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "files.json"
    path.write_text(json.dumps(CF_FILES), encoding="utf-8")

    code = run_cli(["select", "--source", "curseforge", "--loader", "forge", "--game-version", "1.20.1", str(path)])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["candidate"]["id"] == "cf-11"


def test_run_cli_select_without_candidates(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "files.json"
    path.write_text("[]", encoding="utf-8")

    code = run_cli(["select", "--source", "modrinth", "--loader", "fabric", "--game-version", "1.20.1", str(path)])

    assert code == 2
    assert json.loads(capsys.readouterr().out)["tier"] == 0


def test_run_cli_missing_file(tmp_path: Path) -> None:
    assert run_cli(["normalize", "--source", "modrinth", str(tmp_path / "missing.json")]) == 1
