"""Data models for the Wally registry resolver."""

from wally_registry.models.package import (
    FullPackageInfo,
    PackageVersion,
    Realm,
)
from wally_registry.models.registry import (
    RegistryConfig,
    RegistryLocator,
    RegistryTree,
    TreeEntry,
)

__all__ = [
    # Package models
    "FullPackageInfo",
    "PackageVersion",
    "Realm",
    # Registry models
    "RegistryConfig",
    "RegistryLocator",
    "RegistryTree",
    "TreeEntry",
]
