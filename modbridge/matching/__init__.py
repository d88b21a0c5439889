"""Matching module: compatibility predicate and preferred-build selection."""
from .matcher import game_version_match, is_compatible, loader_match
from .selector import Selection, SelectionTier, select_preferred, select_preferred_with_tier

__all__ = [
    "Selection",
    "SelectionTier",
    "game_version_match",
    "is_compatible",
    "loader_match",
    "select_preferred",
    "select_preferred_with_tier",
]
