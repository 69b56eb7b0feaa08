"""In-memory caches held by the registry git client."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from wally_registry.models.registry import RegistryConfig, RegistryTree

logger = logging.getLogger(__name__)


@dataclass
class RegistryCache:
    """Replace-on-write cache slots for one registry.

    Tree, config and package names are only ever cleared together through
    :meth:`invalidate_all`. Each invalidation bumps ``generation`` so that a
    response requested before the invalidation can be discarded instead of
    being stored.

    Attributes:
        tree: Cached registry root listing.
        config: Cached registry configuration.
        names: Package names per lower-cased author.
        generation: Incremented on every invalidation.
    """

    tree: Optional[RegistryTree] = None
    config: Optional[RegistryConfig] = None
    names: dict[str, list[str]] = field(default_factory=dict)
    generation: int = 0

    def invalidate_all(self) -> None:
        self.tree = None
        self.config = None
        self.names = {}
        self.generation += 1
        logger.debug(f"Registry cache invalidated (generation {self.generation})")

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def store_tree(self, tree: RegistryTree, generation: int) -> bool:
        if not self.is_current(generation):
            logger.debug("Discarding registry tree fetched before invalidation")
            return False
        self.tree = tree
        return True

    def store_config(self, config: RegistryConfig, generation: int) -> bool:
        if not self.is_current(generation):
            logger.debug("Discarding registry config fetched before invalidation")
            return False
        self.config = config
        return True

    def store_names(self, author: str, names: list[str], generation: int) -> bool:
        if not self.is_current(generation):
            logger.debug(f"Discarding package names for '{author}' fetched before invalidation")
            return False
        self.names[author] = names
        return True
