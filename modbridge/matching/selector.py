"""
Preferred-build selection with tiered fallback.

Tiers, tried in order (candidate order inside a tier is preserved):

1. game version and loader both match
2. game version matches
3. first candidate overall (provisional, the caller may reject it)

An empty candidate list selects nothing.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from .matcher import game_version_match, is_compatible
from ..core.error import UnmatchedError
from ..models.schema import BuildCandidate, Profile

logger = logging.getLogger(__name__)


class SelectionTier(Enum):
    EXACT = 1
    VERSION_ONLY = 2
    FIRST_AVAILABLE = 3
    NONE = 0


@dataclass(frozen=True)
class Selection:
    candidate: Optional[BuildCandidate]
    tier: SelectionTier

    @property
    def provisional(self) -> bool:
        return self.tier is SelectionTier.FIRST_AVAILABLE

    @property
    def compatible(self) -> bool:
        return self.tier is SelectionTier.EXACT

    def require(self) -> BuildCandidate:
        """
        Return the selected candidate.

        Raises:
            UnmatchedError: there was no candidate to select
        """
        if self.candidate is None:
            raise UnmatchedError("No build candidate available")
        return self.candidate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate": self.candidate.to_dict() if self.candidate is not None else None,
            "tier": self.tier.value,
            "tier_name": self.tier.name.lower(),
            "provisional": self.provisional,
        }


def select_preferred_with_tier(candidates: Sequence[BuildCandidate], profile: Profile) -> Selection:
    for candidate in candidates:
        if is_compatible(candidate, profile):
            return Selection(candidate, SelectionTier.EXACT)

    for candidate in candidates:
        if game_version_match(candidate, profile):
            logger.debug(
                "No exact match for %s/%s, falling back to version-only build %s",
                profile.loader, profile.game_version, candidate.id,
            )
            return Selection(candidate, SelectionTier.VERSION_ONLY)

    if candidates:
        logger.debug(
            "No build for game version %s, provisionally picking %s",
            profile.game_version, candidates[0].id,
        )
        return Selection(candidates[0], SelectionTier.FIRST_AVAILABLE)

    return Selection(None, SelectionTier.NONE)


def select_preferred(candidates: Sequence[BuildCandidate], profile: Profile) -> Optional[BuildCandidate]:
    """The preferred build, or None when ``candidates`` is empty."""
    return select_preferred_with_tier(candidates, profile).candidate
