#!/usr/bin/env python3
"""
modbridge command line: normalize provider payloads and pick a preferred build
from saved JSON, without any network access.

Command line examples:
  python scripts/modbridge_cli.py normalize --source curseforge mod.json
  python scripts/modbridge_cli.py normalize --source modrinth --builds versions.json
  cat files.json | python scripts/modbridge_cli.py select --source curseforge --loader fabric --game-version 1.20.1

Python usage:
  from scripts.modbridge_cli import normalize_payload, select_build
  out = select_build(files, "curseforge", loader="fabric", game_version="1.20.1")
  print(out["tier"], out["candidate"]["id"])
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

# Allow running from a checkout without installing the package
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from modbridge.core.config import load_env
from modbridge.core.error import ModBridgeError
from modbridge.core.logger import setup_logger
from modbridge.matching import select_preferred_with_tier
from modbridge.models import Profile, ProjectType
from modbridge.normalizers import normalize_builds, normalize_many, project_url


def normalize_payload(
    payload: Any,
    source: str,
    *,
    builds: bool = False,
    unknown_project_type: str = "mod",
) -> List[Dict[str, Any]]:
    """
    Normalize one payload object or a list of them.

    Returns:
        List of record (or build, with ``builds=True``) dictionaries
    """
    items = payload if isinstance(payload, list) else [payload]
    if builds:
        return [b.to_dict() for b in normalize_builds(items, source)]

    try:
        policy = ProjectType(unknown_project_type)
    except ValueError:
        raise ModBridgeError(f"Unknown project type: {unknown_project_type!r}") from None
    out = []
    for record in normalize_many(items, source, unknown_project_type=policy):
        data = record.to_dict()
        data["project_url"] = project_url(record)
        out.append(data)
    return out


def select_build(files: Any, source: str, *, loader: str, game_version: str) -> Dict[str, Any]:
    """Normalize a provider file list and return the selection as a dictionary."""
    items = files if isinstance(files, list) else [files]
    candidates = normalize_builds(items, source)
    selection = select_preferred_with_tier(candidates, Profile(loader=loader.lower(), game_version=game_version))
    result = selection.to_dict()
    result["n_candidates"] = len(candidates)
    return result


def _read_json(path: Optional[Path], stdin: TextIO) -> Any:
    if path is None or str(path) == "-":
        return json.load(stdin)
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Normalize Modrinth/CurseForge payloads and select builds for a profile.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--log-level", type=str, default=None, help="Overrides MODBRIDGE_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p_norm = sub.add_parser("normalize", help="Normalize a project (or file) payload")
    p_norm.add_argument("input", type=Path, nargs="?", default=None, help="JSON file (default: stdin)")
    p_norm.add_argument("--source", required=True, choices=["modrinth", "curseforge"])
    p_norm.add_argument("--builds", action="store_true", help="Payload holds files/versions, not projects")
    p_norm.add_argument(
        "--unknown-project-type",
        type=str,
        default="mod",
        help="Project type used for unmapped CurseForge class ids",
    )

    p_sel = sub.add_parser("select", help="Pick the preferred build from a file list")
    p_sel.add_argument("input", type=Path, nargs="?", default=None, help="JSON file (default: stdin)")
    p_sel.add_argument("--source", required=True, choices=["modrinth", "curseforge"])
    p_sel.add_argument("--loader", required=True, help="Profile loader, e.g. fabric")
    p_sel.add_argument("--game-version", required=True, help="Profile game version, e.g. 1.20.1")

    args = parser.parse_args(argv)

    load_env()
    logger = setup_logger(args.log_level)

    try:
        payload = _read_json(args.input, sys.stdin)
        if args.command == "normalize":
            out: Any = normalize_payload(
                payload,
                args.source,
                builds=args.builds,
                unknown_project_type=args.unknown_project_type,
            )
        else:
            out = select_build(payload, args.source, loader=args.loader, game_version=args.game_version)
    except (OSError, json.JSONDecodeError, ModBridgeError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(json.dumps({"code": -1, "message": str(e)}), file=sys.stderr)
        return 1

    print(json.dumps(out, ensure_ascii=False, indent=2))
    if args.command == "select" and out["candidate"] is None:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(run_cli())
