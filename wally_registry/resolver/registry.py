"""
Wally Registry

Resolves (author, name, constraint) triples against a registry: the metadata
API URL comes from the registry config, the version list from the metadata
API, and compatibility matching happens locally.
"""

import logging
from typing import Any, Optional

import httpx

from wally_registry.config import Settings, get_settings
from wally_registry.exceptions import RegistryException
from wally_registry.github.client import RegistryGitClient
from wally_registry.models.package import FullPackageInfo
from wally_registry.models.registry import RegistryLocator
from wally_registry.resolver.semver import (
    find_best_match,
    parse_specifier,
    same_version,
    sort_versions,
)

logger = logging.getLogger(__name__)


def _entry_version(entry: Any) -> Optional[str]:
    if not isinstance(entry, dict):
        return None
    package = entry.get("package")
    if not isinstance(package, dict):
        return None
    version = package.get("version")
    return version if isinstance(version, str) else None


class WallyRegistry:
    """
    Version resolver for one registry.

    Holds no state besides its HTTP client and the fallback registries it has
    created. Version lists are fetched on every call.

    Attributes:
        git: Client for the registry index the metadata API URL comes from.
        settings: Resolver settings.
    """

    def __init__(
        self,
        git: RegistryGitClient,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the resolver.

        Args:
            git: Registry git client with the registry already selected
            transport: Optional httpx transport, defaults to the git client's
        """
        self.git = git
        self.settings = git.settings
        self.transport = transport or git.transport
        self._client: Optional[httpx.AsyncClient] = None
        self._fallbacks: dict[str, "WallyRegistry"] = {}

    @classmethod
    def for_url(
        cls,
        registry_url: str,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        auth_token: Optional[str] = None,
    ) -> "WallyRegistry":
        """
        Create a resolver with its own git client for a registry URL.

        Args:
            registry_url: Canonical registry URL
            settings: Resolver settings, defaults to the global settings
            transport: Optional httpx transport
            auth_token: GitHub token overriding the one from settings

        Raises:
            InvalidRegistryError: If the URL is not a GitHub URL
            UnsupportedRegistryError: If the URL is not an owner/repo path
        """
        git = RegistryGitClient(settings or get_settings(), transport=transport)
        if auth_token is not None:
            git.auth_token = auth_token
        git.set_registry(registry_url)
        return cls(git)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client for the metadata API."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.request_timeout),
                transport=self.transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP clients of this resolver and its fallbacks."""
        for fallback in self._fallbacks.values():
            await fallback.close()
        self._fallbacks = {}
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
        await self.git.close()

    async def __aenter__(self) -> "WallyRegistry":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # =================== Registry Index ===================

    def get_registry(self) -> Optional[str]:
        return self.git.get_registry()

    def set_registry(self, registry: str, force: bool = False) -> None:
        self.git.set_registry(registry, force=force)

    async def get_package_authors(self) -> Optional[list[str]]:
        return await self.git.get_author_names()

    async def get_package_names(self, author: str) -> Optional[list[str]]:
        return await self.git.get_package_names(author)

    # =================== Metadata API ===================

    async def _fetch_metadata(self, author: str, name: str) -> Optional[list[Any]]:
        url = await self.git.get_registry_api_url()
        if url is None:
            return None

        full_url = f"{url}/v1/package-metadata/{author}/{name}"
        logger.info(f"Looking for packages at {full_url}")
        try:
            client = await self._get_client()
            response = await client.get(full_url)
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch metadata for {author}/{name}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(
                f"Failed to fetch metadata for {author}/{name}: HTTP {response.status_code}"
            )
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON in metadata for {author}/{name}: {e}")
            return None

        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list):
            logger.warning(f"Metadata for {author}/{name} has no versions list")
            return None
        return versions

    async def get_package_versions(self, author: str, name: str) -> Optional[list[str]]:
        """
        Get all published versions of a package, newest first.

        Args:
            author: Package author
            name: Package name

        Returns:
            Version strings sorted by semantic-version precedence, newest
            first, None if the metadata could not be fetched
        """
        # TODO: Cache version lists with a short TTL once yanked releases are reported by the API
        entries = await self._fetch_metadata(author, name)
        if entries is None:
            return None

        versions: list[str] = []
        for entry in entries:
            version = _entry_version(entry)
            if version is None:
                logger.warning(f"Skipping malformed version entry for {author}/{name}")
                continue
            versions.append(version)
        return sort_versions(versions)

    async def get_latest_semver_compatible_version(
        self,
        author: str,
        name: str,
        constraint: str,
    ) -> Optional[str]:
        """
        Get the newest published version satisfying a constraint.

        Args:
            author: Package author
            name: Package name
            constraint: Version constraint, e.g. "^1.2.0"

        Returns:
            Newest compatible version, None if nothing matches
        """
        try:
            specifier = parse_specifier(constraint)
        except ValueError as e:
            logger.warning(f"Invalid version constraint '{constraint}': {e}")
            return None

        versions = await self.get_package_versions(author, name)
        if not versions:
            return None

        version = find_best_match(versions, specifier)
        if version is None:
            logger.info(f"No version of {author}/{name} satisfies '{constraint}'")
        return version

    async def get_full_package_info(
        self,
        author: str,
        name: str,
        version: str,
    ) -> Optional[FullPackageInfo]:
        """
        Get the full metadata of one published version.

        Only the entry for the requested version is decoded.

        Args:
            author: Package author
            name: Package name
            version: Exact version, e.g. "1.4.0"

        Returns:
            Full package info, None if the version cannot be found
        """
        entries = await self._fetch_metadata(author, name)
        if entries is None:
            return None

        for entry in entries:
            entry_version = _entry_version(entry)
            if entry_version is None or not same_version(entry_version, version):
                continue
            try:
                return FullPackageInfo.from_api(entry, name=f"{author}/{name}")
            except ValueError as e:
                logger.warning(f"Invalid metadata for {author}/{name}@{version}: {e}")
                return None

        logger.info(f"Version {version} of {author}/{name} not found")
        return None

    # =================== Resolution ===================

    def _get_fallback(self, registry_url: str) -> Optional["WallyRegistry"]:
        try:
            locator = RegistryLocator.from_url(registry_url)
        except RegistryException as e:
            logger.warning(f"Skipping fallback registry: {e.message}")
            return None
        if locator == self.git.locator:
            return None

        key = locator.url.lower()
        fallback = self._fallbacks.get(key)
        if fallback is None:
            fallback = WallyRegistry.for_url(
                locator.url, self.settings, self.transport, auth_token=self.git.auth_token
            )
            self._fallbacks[key] = fallback
        return fallback

    async def resolve(
        self,
        author: str,
        name: str,
        constraint: str,
    ) -> Optional[FullPackageInfo]:
        """
        Resolve a dependency to the full info of its newest compatible version.

        Falls back to the registries listed in the registry config when
        nothing compatible is found here and fallbacks are enabled.

        Args:
            author: Package author
            name: Package name
            constraint: Version constraint

        Returns:
            Full package info of the resolved version, None if unresolved
        """
        version = await self.get_latest_semver_compatible_version(author, name, constraint)
        if version is not None:
            return await self.get_full_package_info(author, name, version)

        if not self.settings.use_fallback_registries:
            return None

        for registry_url in await self.git.get_fallback_registries() or []:
            fallback = self._get_fallback(registry_url)
            if fallback is None:
                continue
            logger.info(f"Trying fallback registry {fallback.get_registry()}")
            version = await fallback.get_latest_semver_compatible_version(author, name, constraint)
            if version is not None:
                return await fallback.get_full_package_info(author, name, version)
        return None
