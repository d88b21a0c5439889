"""Resolver module: required-dependency installation."""
from .dependencies import DependencyOutcome, DependencyResult, resolve_dependencies, resolve_many
from .ledger import InstallLedger

__all__ = [
    "DependencyOutcome",
    "DependencyResult",
    "InstallLedger",
    "resolve_dependencies",
    "resolve_many",
]
