from __future__ import annotations

import asyncio

import pytest

from modbridge.core.error import ErrorType, PartialDependencyFailureError, UnmatchedError
from modbridge.models import Profile
from modbridge.resolver import DependencyOutcome, InstallLedger, resolve_dependencies, resolve_many

from fakes import FakeContentSource, RecordingSink, make_build

PROFILE = Profile(loader="fabric", game_version="1.20.1")


def test_installed_dependency_skipped_and_missing_one_failed() -> None:
    build = make_build("main", deps=["cf-dep1", "cf-dep2"])
    source = FakeContentSource(files={"cf-dep2": []})
    sink = RecordingSink()

    result = asyncio.run(
        resolve_dependencies(build, PROFILE, lambda rid: rid == "cf-dep1", source, sink)
    )

    assert result.outcomes == {"cf-dep1": DependencyOutcome.SKIPPED, "cf-dep2": DependencyOutcome.FAILED}
    assert isinstance(result.errors["cf-dep2"], UnmatchedError)
    assert sink.installed == []
    # loader+version query, then version-only retry
    assert source.calls == [
        ("get_mod_files", "cf-dep2", "1.20.1", "fabric"),
        ("get_mod_files", "cf-dep2", "1.20.1", None),
    ]


def test_installs_first_candidate_of_loader_filtered_query() -> None:
    build = make_build("main", deps=["cf-lib"])
    source = FakeContentSource(
        files={
            "cf-lib": [
                make_build("lib-forge", record_id="cf-lib", game_versions=["1.20.1"], loaders=["forge"]),
                make_build("lib-fabric-new", record_id="cf-lib", game_versions=["1.20.1"], loaders=["fabric"]),
                make_build("lib-fabric-old", record_id="cf-lib", game_versions=["1.20.1"], loaders=["fabric"]),
            ]
        }
    )
    sink = RecordingSink()

    result = asyncio.run(resolve_dependencies(build, PROFILE, lambda rid: False, source, sink))

    assert result.outcomes == {"cf-lib": DependencyOutcome.INSTALLED}
    assert result.installed_builds["cf-lib"].id == "lib-fabric-new"
    assert sink.installed == [("cf-lib", "lib-fabric-new")]


def test_version_only_fallback_installs_first_candidate() -> None:
    build = make_build("main", deps=["cf-lib"])
    source = FakeContentSource(
        files={"cf-lib": [make_build("lib-forge", record_id="cf-lib", game_versions=["1.20.1"], loaders=["forge"])]}
    )
    sink = RecordingSink()

    result = asyncio.run(resolve_dependencies(build, PROFILE, lambda rid: False, source, sink))

    assert sink.installed == [("cf-lib", "lib-forge")]
    assert result.has_failures is False


def test_optional_edges_are_ignored() -> None:
    build = make_build("main", optional_deps=["cf-extra"])
    source = FakeContentSource()

    result = asyncio.run(resolve_dependencies(build, PROFILE, lambda rid: False, source, RecordingSink()))

    assert result.outcomes == {}
    assert source.calls == []


def test_errors_are_isolated_per_edge() -> None:
    build = make_build("main", deps=["cf-down", "cf-broken", "cf-ok"])
    ok = make_build("ok-1", record_id="cf-ok", game_versions=["1.20.1"], loaders=["fabric"])
    broken = make_build("broken-1", record_id="cf-broken", game_versions=["1.20.1"], loaders=["fabric"])
    source = FakeContentSource(files={"cf-ok": [ok], "cf-broken": [broken]}, fail_files=["cf-down"])
    sink = RecordingSink(fail=["cf-broken"])

    result = asyncio.run(resolve_dependencies(build, PROFILE, lambda rid: False, source, sink))

    assert list(result.outcomes.values()) == [
        DependencyOutcome.FAILED,
        DependencyOutcome.FAILED,
        DependencyOutcome.INSTALLED,
    ]
    assert result.failed == ["cf-down", "cf-broken"]
    data = result.to_dict()
    assert data["errors"]["cf-down"]["error_type"] == ErrorType.UNAVAILABLE.value
    assert data["errors"]["cf-broken"]["error_type"] == ErrorType.UNAVAILABLE.value


def test_oracle_errors_fail_the_edge() -> None:
    def oracle(record_id):
        raise RuntimeError("profile database locked")

    result = asyncio.run(
        resolve_dependencies(make_build("main", deps=["cf-a"]), PROFILE, oracle, FakeContentSource(), RecordingSink())
    )

    assert result.outcomes == {"cf-a": DependencyOutcome.FAILED}


def test_duplicate_edges_resolve_once() -> None:
    build = make_build("main", deps=["cf-lib", "cf-lib"])
    source = FakeContentSource(
        files={"cf-lib": [make_build("lib-1", record_id="cf-lib", game_versions=["1.20.1"], loaders=["fabric"])]}
    )
    sink = RecordingSink()

    asyncio.run(resolve_dependencies(build, PROFILE, lambda rid: False, source, sink))

    assert sink.installed == [("cf-lib", "lib-1")]


def test_raise_for_failures_is_opt_in() -> None:
    result = asyncio.run(
        resolve_dependencies(make_build("main", deps=["cf-gone"]), PROFILE, lambda rid: False, FakeContentSource(), RecordingSink())
    )

    with pytest.raises(PartialDependencyFailureError) as excinfo:
        result.raise_for_failures()
    assert excinfo.value.result is result
    assert excinfo.value.details == {"failed": ["cf-gone"]}


def test_ledger_prevents_double_install_across_parallel_resolutions() -> None:
    lib = make_build("lib-1", record_id="cf-lib", game_versions=["1.20.1"], loaders=["fabric"])
    source = FakeContentSource(files={"cf-lib": [lib]})
    sink = RecordingSink(delay=0.05)
    builds = [make_build("a", deps=["cf-lib"]), make_build("b", deps=["cf-lib"])]

    results = asyncio.run(resolve_many(builds, PROFILE, lambda rid: False, source, sink))

    assert sink.installed == [("cf-lib", "lib-1")]
    outcomes = sorted(r.outcomes["cf-lib"].value for r in results)
    assert outcomes == ["installed", "skipped"]


def test_ledger_waiters_fail_when_owner_fails() -> None:
    lib = make_build("lib-1", record_id="cf-lib", game_versions=["1.20.1"], loaders=["fabric"])
    source = FakeContentSource(files={"cf-lib": [lib]})
    sink = RecordingSink(fail=["cf-lib"], delay=0.05)
    builds = [make_build("a", deps=["cf-lib"]), make_build("b", deps=["cf-lib"])]

    results = asyncio.run(resolve_many(builds, PROFILE, lambda rid: False, source, sink))

    assert [r.outcomes["cf-lib"] for r in results] == [DependencyOutcome.FAILED, DependencyOutcome.FAILED]


def test_ledger_releases_claim_after_install() -> None:
    ledger = InstallLedger()

    async def run():
        async def install():
            assert ledger.is_pending("cf-x")
            return "done"

        return await ledger.install("cf-x", install)

    assert asyncio.run(run()) == (True, "done")
    assert ledger.is_pending("cf-x") is False
