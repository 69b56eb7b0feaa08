"""
Registry Git Client

Async client for the GitHub git data API, treating a repository as a Wally
package index: one directory per author plus a ``config.json`` at the root.

Provides:
- Registry selection and authentication
- Registry tree and config lookup (cached)
- Author and package name listing (cached)
- Metadata API URL and fallback registries from the config

Every lookup returns None when the network or the data fails. Only an
invalid registry URL raises.
"""

import asyncio
import base64
import logging
from typing import Any, Coroutine, Optional

import httpx

from wally_registry.config import Settings, get_settings
from wally_registry.github.cache import RegistryCache
from wally_registry.github.names import PackageNameIndex
from wally_registry.models.registry import (
    RegistryConfig,
    RegistryLocator,
    RegistryTree,
    TreeEntry,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

GITHUB_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}


def build_registry_tree(items: list[dict[str, str]]) -> RegistryTree:
    """Split a root tree listing into author directories and the config file.

    Args:
        items: Tree entries with ``path``, ``sha`` and ``type``.

    Returns:
        New registry tree.
    """
    authors: list[TreeEntry] = []
    config: Optional[TreeEntry] = None
    for item in items:
        path = item["path"]
        if item["type"] == "tree":
            # Hidden directories (.github) are not authors
            if not path.startswith("."):
                authors.append(TreeEntry(name=path, sha=item["sha"]))
        elif path.endswith(".json"):
            if config is None or path == CONFIG_FILE_NAME:
                config = TreeEntry(name=path, sha=item["sha"])
    return RegistryTree(authors=tuple(authors), config=config)


class RegistryGitClient:
    """
    Async client for a registry index hosted on GitHub.

    Owns the registry locator, the auth token and the :class:`RegistryCache`.
    Changing the registry or the token invalidates every cache and starts a
    config refresh in the background when an event loop is running.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the git client.

        Args:
            settings: Resolver settings, defaults to the global settings
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings or get_settings()
        self.auth_token: Optional[str] = self.settings.github_token
        self.locator: Optional[RegistryLocator] = None
        self.cache = RegistryCache()
        self.names = PackageNameIndex(self)
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        # Clients replaced by a token change, closed in close()
        self._retired: list[httpx.AsyncClient] = []
        self._background: set[asyncio.Task] = set()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = dict(GITHUB_HEADERS)
            if self.auth_token:
                headers["Authorization"] = f"Bearer {self.auth_token}"
            self._client = httpx.AsyncClient(
                base_url=self.settings.github_api_url,
                headers=headers,
                timeout=httpx.Timeout(self.settings.request_timeout),
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        """Wait for background refreshes and close the HTTP clients."""
        await self.wait_for_refresh()
        retired, self._retired = self._retired, []
        for client in retired:
            if not client.is_closed:
                await client.aclose()
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "RegistryGitClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # =================== Background Work ===================

    def _schedule(self, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop, the next lookup fetches lazily instead
            coro.close()
            return
        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def wait_for_refresh(self) -> None:
        """Wait until every scheduled background refresh has finished."""
        while self._background:
            pending = list(self._background)
            await asyncio.gather(*pending)
            self._background.difference_update(pending)

    def _refresh_registry(self) -> None:
        self.cache.invalidate_all()
        if self.locator is not None:
            self._schedule(self.get_registry_config())

    # =================== Registry Selection ===================

    def get_registry(self) -> Optional[str]:
        """Get the active registry as ``owner/repo``, None if unset."""
        if self.locator is None:
            return None
        return str(self.locator)

    def set_registry(self, registry: str, force: bool = False) -> None:
        """
        Select the registry to resolve against.

        Selecting the active registry again is a no-op unless forced.

        Args:
            registry: Canonical registry URL (``https://github.com/<owner>/<repo>``)
            force: Invalidate caches even if the registry did not change

        Raises:
            InvalidRegistryError: If the URL is not a GitHub URL
            UnsupportedRegistryError: If the URL is not an owner/repo path
        """
        locator = RegistryLocator.from_url(registry)
        if locator == self.locator and not force:
            return
        self.locator = locator
        logger.info(f"Using registry {locator}")
        self._refresh_registry()

    def set_auth_token(self, token: Optional[str]) -> None:
        """
        Replace the GitHub token used for all future requests.

        Args:
            token: GitHub token, None for anonymous access
        """
        self.auth_token = token
        previous = self._client
        self._client = None
        if previous is not None:
            self._retired.append(previous)
        self._refresh_registry()

    # =================== Git Data API ===================

    async def _get_json(self, url: str, description: str) -> Optional[dict[str, Any]]:
        try:
            client = await self._get_client()
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {description}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Failed to fetch {description}: HTTP {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON in {description}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Unexpected response for {description}")
            return None
        return data

    async def list_tree(self, sha: str) -> Optional[list[dict[str, str]]]:
        """
        List the entries of a git tree in the registry repository.

        Args:
            sha: Tree sha or any tree-ish (branch name)

        Returns:
            Entries with string ``path``, ``sha`` and ``type``, None on failure
        """
        if self.locator is None:
            return None
        locator = self.locator
        data = await self._get_json(
            f"/repos/{locator.owner}/{locator.repo}/git/trees/{sha}",
            f"tree {sha} of {locator}",
        )
        if data is None:
            return None

        tree = data.get("tree")
        if not isinstance(tree, list):
            logger.warning(f"Tree {sha} of {locator} has no entries list")
            return None
        return [
            {"path": item["path"], "sha": item["sha"], "type": item.get("type", "")}
            for item in tree
            if isinstance(item, dict)
            and isinstance(item.get("path"), str)
            and isinstance(item.get("sha"), str)
        ]

    async def get_registry_tree(self) -> Optional[RegistryTree]:
        """
        Get the registry root listing.

        Returns:
            Cached or freshly fetched tree, None if it cannot be fetched
        """
        if self.locator is None:
            return None
        if self.cache.tree is not None:
            return self.cache.tree

        generation = self.cache.generation
        logger.info("Fetching registry tree...")
        items = await self.list_tree(self.settings.tree_ref)
        if items is None:
            logger.warning("Failed to fetch registry tree")
            return None

        tree = build_registry_tree(items)
        self.cache.store_tree(tree, generation)
        return tree

    async def get_registry_config(self) -> Optional[RegistryConfig]:
        """
        Get the registry configuration.

        The tree is resolved first; without a tree no config is fetched.

        Returns:
            Cached or freshly fetched config, None if it cannot be fetched
        """
        generation = self.cache.generation
        tree = await self.get_registry_tree()
        if tree is None or self.locator is None:
            return None
        if self.cache.config is not None:
            return self.cache.config
        if tree.config is None:
            logger.warning(f"Registry {self.locator} has no config file")
            return None

        locator = self.locator
        logger.info("Fetching registry config...")
        data = await self._get_json(
            f"/repos/{locator.owner}/{locator.repo}/git/blobs/{tree.config.sha}",
            f"config blob of {locator}",
        )
        if data is None:
            return None

        content = data.get("content")
        if not isinstance(content, str):
            logger.warning(f"Config blob of {locator} has no content")
            return None

        try:
            if data.get("encoding", "base64") == "base64":
                raw = base64.b64decode(content)
            else:
                raw = content.encode("utf-8")
            config = RegistryConfig.model_validate_json(raw)
        except ValueError as e:
            logger.warning(f"Invalid registry config in {locator}: {e}")
            return None

        logger.debug(config.model_dump_json(indent=4))
        self.cache.store_config(config, generation)
        return config

    # =================== Lookups ===================

    async def get_author_names(self) -> Optional[list[str]]:
        """Get the names of all authors in the registry."""
        tree = await self.get_registry_tree()
        if tree is None:
            return None
        return tree.author_names

    async def get_package_names(self, author: str) -> Optional[list[str]]:
        """Get the package names published under an author."""
        return await self.names.get_package_names(author)

    async def get_registry_api_url(self) -> Optional[str]:
        """Get the base URL of the registry metadata API."""
        config = await self.get_registry_config()
        if config is None:
            return None
        return config.api_url

    async def get_fallback_registries(self) -> Optional[list[str]]:
        """Get the fallback registries listed in the registry config."""
        config = await self.get_registry_config()
        if config is None:
            return None
        return list(config.fallback_registries or [])
