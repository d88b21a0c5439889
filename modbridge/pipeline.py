"""
Install pipeline: record -> preferred build -> install -> required dependencies.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from .core.aio import call_collaborator
from .core.error import classify_error, log_error
from .matching.selector import Selection, SelectionTier, select_preferred_with_tier
from .models.schema import Profile
from .resolver.dependencies import DependencyResult, IsInstalled, resolve_dependencies
from .resolver.ledger import InstallLedger
from .sources.base import ContentSource, InstallSink

logger = logging.getLogger(__name__)

CODE_SUCCESS = 0
CODE_PARTIAL = 1
CODE_NO_CANDIDATES = -1
CODE_INSTALL_FAILED = -2


@dataclass
class InstallReport:
    record_id: str
    code: int
    message: str
    selection: Selection = field(default_factory=lambda: Selection(None, SelectionTier.NONE))
    dependencies: Optional[DependencyResult] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.code == CODE_SUCCESS

    @property
    def provisional(self) -> bool:
        return self.selection.provisional

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "code": self.code,
            "message": self.message,
            "build": self.selection.candidate.to_dict() if self.selection.candidate is not None else None,
            "tier": self.selection.tier.value,
            "provisional": self.provisional,
            "dependencies": self.dependencies.to_dict() if self.dependencies is not None else None,
            "errors": self.errors,
        }


def _describe(error: Exception) -> str:
    return f"[{classify_error(error).value}] {error}"


async def install_project(
    record_id: str,
    profile: Profile,
    content_source: ContentSource,
    install_sink: Union[InstallSink, Callable[..., Any]],
    is_installed: IsInstalled,
    *,
    ledger: Optional[InstallLedger] = None,
) -> InstallReport:
    """
    Install the preferred build of ``record_id`` for ``profile`` plus its
    required dependencies.

    Never raises for provider or install failures; the outcome is reported
    through ``code``/``message``:

    - 0: success
    - 1: installed, but some required dependencies failed
    - -1: no candidate builds
    - -2: the main install failed
    """
    errors: Dict[str, str] = {}

    try:
        candidates = await call_collaborator(content_source.get_mod_files, record_id, None, None) or []
    except Exception as exc:
        log_error(exc, logger, context={"record_id": record_id}, level="WARNING")
        errors[record_id] = _describe(exc)
        candidates = []

    selection = select_preferred_with_tier(list(candidates), profile)
    if selection.candidate is None:
        return InstallReport(
            record_id=record_id,
            code=CODE_NO_CANDIDATES,
            message="No candidate builds" if not errors else "No candidate builds (see errors)",
            selection=selection,
            errors=errors,
        )

    build = selection.candidate
    if selection.provisional:
        logger.warning(
            "No build of %s targets %s; installing %s provisionally",
            record_id, profile.game_version, build.id,
        )

    install = getattr(install_sink, "install", install_sink)
    try:
        await call_collaborator(install, record_id, build.id)
    except Exception as exc:
        log_error(exc, logger, context={"record_id": record_id, "build_id": build.id})
        errors[record_id] = _describe(exc)
        return InstallReport(
            record_id=record_id,
            code=CODE_INSTALL_FAILED,
            message="Install failed (see errors)",
            selection=selection,
            errors=errors,
        )
    logger.info("Installed %s (%s, tier %s)", record_id, build.id, selection.tier.name.lower())

    dependencies = await resolve_dependencies(
        build, profile, is_installed, content_source, install_sink, ledger=ledger
    )
    for target_id, error in dependencies.errors.items():
        errors[target_id] = _describe(error)

    if dependencies.has_failures:
        return InstallReport(
            record_id=record_id,
            code=CODE_PARTIAL,
            message="Partial success (see errors)",
            selection=selection,
            dependencies=dependencies,
            errors=errors,
        )
    return InstallReport(
        record_id=record_id,
        code=CODE_SUCCESS,
        message="Success",
        selection=selection,
        dependencies=dependencies,
        errors=errors,
    )
