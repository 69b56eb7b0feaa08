"""Registry-related data models."""

import re
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from wally_registry.config import GITHUB_BASE_URL
from wally_registry.exceptions import InvalidRegistryError, UnsupportedRegistryError

_USER_REPO_REGEX = re.compile(r"^([A-Za-z0-9_.\-]+)/([A-Za-z0-9_.\-]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class RegistryLocator:
    """GitHub owner and repository that host a registry index.

    Attributes:
        owner: GitHub user or organization name.
        repo: Repository name.
    """

    owner: str
    repo: str

    def __post_init__(self) -> None:
        if not self.owner or not self.repo:
            raise UnsupportedRegistryError(f"{self.owner}/{self.repo}")

    @classmethod
    def from_url(cls, registry: str) -> "RegistryLocator":
        """Parse a canonical ``https://github.com/<owner>/<repo>`` URL.

        Args:
            registry: Registry URL.

        Returns:
            Parsed locator.

        Raises:
            InvalidRegistryError: If the URL is not a GitHub URL.
            UnsupportedRegistryError: If the path is not exactly owner/repo.
        """
        cleaned = registry.strip()
        if not cleaned.startswith(GITHUB_BASE_URL):
            raise InvalidRegistryError(registry)
        matched = _USER_REPO_REGEX.match(cleaned[len(GITHUB_BASE_URL):])
        if not matched:
            raise UnsupportedRegistryError(registry)
        return cls(owner=matched.group(1), repo=matched.group(2))

    @property
    def url(self) -> str:
        """Canonical registry URL."""
        return f"{GITHUB_BASE_URL}{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class TreeEntry:
    """Named content address inside a registry tree.

    Attributes:
        name: Path of the entry relative to the registry root.
        sha: Git object id used to fetch the entry directly.
    """

    name: str
    sha: str


@dataclass(frozen=True)
class RegistryTree:
    """Snapshot of the registry root: author directories and the config file.

    Attributes:
        authors: One entry per author directory, in listing order.
        config: The registry configuration file, if the root has one.
    """

    authors: tuple[TreeEntry, ...] = field(default_factory=tuple)
    config: Optional[TreeEntry] = None

    @property
    def author_names(self) -> list[str]:
        return [author.name for author in self.authors]

    def find_author(self, author: str) -> Optional[TreeEntry]:
        """Find an author directory by case-insensitive name."""
        lowered = author.lower()
        for entry in self.authors:
            if entry.name.lower() == lowered:
                return entry
        return None


class RegistryConfig(BaseModel):
    """Registry configuration stored as ``config.json`` at the index root.

    Attributes:
        api: Base URL of the registry metadata API.
        github_oauth_id: OAuth client id used by the registry for logins.
        fallback_registries: Registries consulted when a package is missing.
    """

    api: str = Field(..., min_length=1)
    github_oauth_id: str = ""
    fallback_registries: Optional[list[str]] = None

    @property
    def api_url(self) -> str:
        return self.api.rstrip("/")
