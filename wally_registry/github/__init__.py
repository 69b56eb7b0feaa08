"""GitHub-backed registry index access."""

from wally_registry.github.cache import RegistryCache
from wally_registry.github.client import RegistryGitClient, build_registry_tree
from wally_registry.github.names import PackageNameIndex

__all__ = [
    "PackageNameIndex",
    "RegistryCache",
    "RegistryGitClient",
    "build_registry_tree",
]
