"""Version resolution module for the Wally registry resolver."""

from wally_registry.resolver.pool import close_registry_helpers, get_registry_helper
from wally_registry.resolver.registry import WallyRegistry
from wally_registry.resolver.semver import (
    VersionConstraint,
    find_best_match,
    matches,
    parse_specifier,
    parse_version,
    sort_versions,
)

__all__ = [
    "VersionConstraint",
    "find_best_match",
    "matches",
    "parse_specifier",
    "parse_version",
    "sort_versions",
    "WallyRegistry",
    "close_registry_helpers",
    "get_registry_helper",
]
