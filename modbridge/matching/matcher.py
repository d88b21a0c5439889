"""
Compatibility predicate between a build candidate and a runtime profile.
"""
from ..models.schema import BuildCandidate, Profile

# Datapacks load on every loader, so a build tagged with it matches any profile.
DATAPACK_LOADER = "datapack"


def game_version_match(candidate: BuildCandidate, profile: Profile) -> bool:
    return profile.game_version in candidate.game_versions


def loader_match(candidate: BuildCandidate, profile: Profile) -> bool:
    """An empty loader set means the build is loader-agnostic."""
    if not candidate.loaders:
        return True
    return profile.loader in candidate.loaders or DATAPACK_LOADER in candidate.loaders


def is_compatible(candidate: BuildCandidate, profile: Profile) -> bool:
    return game_version_match(candidate, profile) and loader_match(candidate, profile)
