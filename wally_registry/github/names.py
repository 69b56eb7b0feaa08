"""Per-author package name listing on top of the registry tree."""

import logging
from typing import TYPE_CHECKING, Optional

from wally_registry.github.cache import RegistryCache

if TYPE_CHECKING:
    from wally_registry.github.client import RegistryGitClient

logger = logging.getLogger(__name__)

# Ownership metadata stored next to the packages of every author
RESERVED_FILES = frozenset({"owners.json"})


class PackageNameIndex:
    """Lists the packages published under an author.

    Results are cached per lower-cased author name in the client's
    :class:`RegistryCache` and live until the whole cache is invalidated.

    Attributes:
        git: Client used to resolve the registry tree and author listings.
    """

    def __init__(self, git: "RegistryGitClient") -> None:
        self.git = git

    @property
    def cache(self) -> RegistryCache:
        return self.git.cache

    async def get_package_names(self, author: str) -> Optional[list[str]]:
        """Get the package names published under an author.

        Args:
            author: Author name, compared case-insensitively.

        Returns:
            Package names in listing order, None if the author is unknown
            or the registry could not be reached.
        """
        key = author.lower()
        cached = self.cache.names.get(key)
        if cached is not None:
            return list(cached)

        generation = self.cache.generation
        tree = await self.git.get_registry_tree()
        if tree is None:
            return None

        entry = tree.find_author(key)
        if entry is None:
            logger.info(f"Author '{key}' not found in registry {self.git.get_registry()}")
            return None

        logger.info(f"Fetching package names for '{key}'...")
        items = await self.git.list_tree(entry.sha)
        if items is None:
            logger.warning(f"Failed to fetch package names for '{key}'")
            return None

        names = [
            item["path"]
            for item in items
            if item["type"] != "tree" and item["path"] not in RESERVED_FILES
        ]
        self.cache.store_names(key, names, generation)
        return list(names)
