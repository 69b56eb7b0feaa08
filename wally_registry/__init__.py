"""Resolve Wally package dependencies against GitHub-hosted registry indexes."""

from wally_registry.config import PUBLIC_REGISTRY_URL, Settings, get_settings
from wally_registry.exceptions import (
    InvalidRegistryError,
    RegistryException,
    UnsupportedRegistryError,
)
from wally_registry.github import RegistryGitClient
from wally_registry.models import (
    FullPackageInfo,
    PackageVersion,
    Realm,
    RegistryConfig,
    RegistryLocator,
    RegistryTree,
    TreeEntry,
)
from wally_registry.resolver import (
    WallyRegistry,
    close_registry_helpers,
    get_registry_helper,
)

__version__ = "0.1.0"

__all__ = [
    "PUBLIC_REGISTRY_URL",
    "Settings",
    "get_settings",
    "InvalidRegistryError",
    "RegistryException",
    "UnsupportedRegistryError",
    "RegistryGitClient",
    "FullPackageInfo",
    "PackageVersion",
    "Realm",
    "RegistryConfig",
    "RegistryLocator",
    "RegistryTree",
    "TreeEntry",
    "WallyRegistry",
    "close_registry_helpers",
    "get_registry_helper",
]
