"""
Required-dependency resolution for a chosen build.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .ledger import InstallLedger
from ..core.aio import call_collaborator
from ..core.error import PartialDependencyFailureError, UnmatchedError, classify_error, log_error
from ..models.schema import BuildCandidate, Profile
from ..sources.base import ContentSource, InstalledOracle, InstallSink

logger = logging.getLogger(__name__)

IsInstalled = Union[InstalledOracle, Callable[[str], Any]]


class DependencyOutcome(Enum):
    SKIPPED = "skipped"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class DependencyResult:
    """Per-target outcome of one build's required dependencies, in edge order."""
    build_id: str = ""
    outcomes: Dict[str, DependencyOutcome] = field(default_factory=dict)
    installed_builds: Dict[str, BuildCandidate] = field(default_factory=dict)
    errors: Dict[str, Exception] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return [target for target, outcome in self.outcomes.items() if outcome is DependencyOutcome.FAILED]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def record(self, target_id: str, outcome: DependencyOutcome, build: Optional[BuildCandidate] = None) -> None:
        self.outcomes[target_id] = outcome
        if build is not None:
            self.installed_builds[target_id] = build

    def record_failure(self, target_id: str, error: Exception) -> None:
        self.outcomes[target_id] = DependencyOutcome.FAILED
        self.errors[target_id] = error

    def raise_for_failures(self) -> None:
        """
        Raises:
            PartialDependencyFailureError: at least one required dependency failed
        """
        if self.has_failures:
            raise PartialDependencyFailureError(
                f"{len(self.failed)} required dependencies of {self.build_id or 'build'} failed",
                result=self,
                details={"failed": self.failed},
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "build_id": self.build_id,
            "outcomes": {target: outcome.value for target, outcome in self.outcomes.items()},
            "installed_builds": {target: build.id for target, build in self.installed_builds.items()},
            "errors": {
                target: {
                    "error_type": classify_error(error).value,
                    "message": str(error),
                }
                for target, error in self.errors.items()
            },
            "has_failures": self.has_failures,
        }


async def _check_installed(is_installed: IsInstalled, target_id: str) -> bool:
    check = getattr(is_installed, "is_installed", is_installed)
    return bool(await call_collaborator(check, target_id))


async def _install_first_match(
    target_id: str,
    profile: Profile,
    content_source: ContentSource,
    install_sink: Union[InstallSink, Callable[..., Any]],
) -> BuildCandidate:
    files = await call_collaborator(content_source.get_mod_files, target_id, profile.game_version, profile.loader)
    if not files:
        logger.debug("No %s build of %s for %s, retrying without loader", profile.loader, target_id, profile.game_version)
        files = await call_collaborator(content_source.get_mod_files, target_id, profile.game_version, None)
    if not files:
        raise UnmatchedError(
            f"No compatible build for {target_id}",
            details={"target_id": target_id, "game_version": profile.game_version, "loader": profile.loader},
        )

    candidate = files[0]
    install = getattr(install_sink, "install", install_sink)
    await call_collaborator(install, target_id, candidate.id)
    logger.info("Installed dependency %s (%s)", target_id, candidate.id)
    return candidate


async def resolve_dependencies(
    build: BuildCandidate,
    profile: Profile,
    is_installed: IsInstalled,
    content_source: ContentSource,
    install_sink: Union[InstallSink, Callable[..., Any]],
    *,
    ledger: Optional[InstallLedger] = None,
) -> DependencyResult:
    """
    Install the required dependencies of ``build`` that are not installed yet.

    Edges are handled one at a time, in order. A failing edge is recorded and
    resolution moves on, so the call itself only raises on cancellation.
    Only direct dependencies are considered.

    Args:
        build: Chosen build whose dependencies are resolved
        profile: Target runtime profile
        is_installed: ``InstalledOracle`` or predicate on record ids
        content_source: Provides candidate builds per target
        install_sink: ``InstallSink`` or callable ``(record_id, build_id)``
        ledger: Shared with parallel resolutions to avoid double installs

    Returns:
        DependencyResult with one outcome per distinct required target
    """
    result = DependencyResult(build_id=build.id)

    for edge in build.required_dependencies:
        target_id = edge.target_id
        if target_id in result.outcomes:
            continue
        try:
            if await _check_installed(is_installed, target_id):
                result.record(target_id, DependencyOutcome.SKIPPED)
                continue

            if ledger is None:
                candidate = await _install_first_match(target_id, profile, content_source, install_sink)
                result.record(target_id, DependencyOutcome.INSTALLED, candidate)
                continue

            owner, candidate = await ledger.install(
                target_id,
                lambda: _install_first_match(target_id, profile, content_source, install_sink),
            )
            if owner:
                result.record(target_id, DependencyOutcome.INSTALLED, candidate)
            else:
                result.record(target_id, DependencyOutcome.SKIPPED)
        except Exception as exc:
            log_error(exc, logger, context={"build_id": build.id, "target_id": target_id}, level="WARNING")
            result.record_failure(target_id, exc)

    return result


async def resolve_many(
    builds: Iterable[BuildCandidate],
    profile: Profile,
    is_installed: IsInstalled,
    content_source: ContentSource,
    install_sink: Union[InstallSink, Callable[..., Any]],
    *,
    ledger: Optional[InstallLedger] = None,
) -> List[DependencyResult]:
    """Resolve several builds concurrently against one shared install ledger."""
    ledger = ledger or InstallLedger()
    return list(
        await asyncio.gather(
            *(
                resolve_dependencies(build, profile, is_installed, content_source, install_sink, ledger=ledger)
                for build in builds
            )
        )
    )
