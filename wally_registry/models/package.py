"""Package-related data models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from wally_registry.config import PUBLIC_REGISTRY_URL

WALLY_WEB_URL = "https://wally.run/package"

DEPENDENCY_SECTIONS = ("dependencies", "server-dependencies", "dev-dependencies")


class Realm(str, Enum):
    """Usage context a package version is published for."""

    SHARED = "shared"
    SERVER = "server"
    DEV = "dev"


def flatten_entry(entry: dict[str, Any]) -> dict[str, Any]:
    """Merge the ``package`` section of a metadata entry with its dependency maps.

    Args:
        entry: One element of the metadata ``versions`` array.

    Returns:
        Flat mapping suitable for model validation.

    Raises:
        ValueError: If the entry has no usable package section.
    """
    package = entry.get("package")
    if not isinstance(package, dict):
        raise ValueError("package section must be an object")
    data = dict(package)
    for key in DEPENDENCY_SECTIONS:
        data[key] = entry.get(key) or {}
    return data


class PackageVersion(BaseModel):
    """One published release of a package.

    Attributes:
        version: Semantic version string.
        realm: Realm the release is published for.
        registry: Registry URL the release was published to.
        dependencies: Shared dependencies, alias to constraint.
        server_dependencies: Server-only dependencies, alias to constraint.
        dev_dependencies: Development dependencies, alias to constraint.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    realm: Realm = Realm.SHARED
    registry: str = ""
    dependencies: dict[str, str] = Field(default_factory=dict)
    server_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="server-dependencies"
    )
    dev_dependencies: dict[str, str] = Field(
        default_factory=dict, alias="dev-dependencies"
    )

    @classmethod
    def from_api(cls, entry: dict[str, Any], **extra: Any):
        """Build a model from one element of the metadata ``versions`` array.

        Args:
            entry: Metadata entry.
            **extra: Fields not carried by the entry itself (``name``).

        Raises:
            ValueError: If the entry is malformed.
        """
        return cls.model_validate({**flatten_entry(entry), **extra})


class FullPackageInfo(PackageVersion):
    """A package version together with its descriptive metadata.

    Attributes:
        name: Full package name (``author/name``).
        authors: Author strings as written in the package manifest.
        description: Short package description.
        license: License identifier.
        homepage: Homepage URL.
        repository: Source repository URL.
    """

    name: str
    authors: Optional[list[str]] = None
    description: Optional[str] = None
    license: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None

    @property
    def is_public_registry(self) -> bool:
        return self.registry.rstrip("/").lower() == PUBLIC_REGISTRY_URL.lower()

    @property
    def web_url(self) -> Optional[str]:
        """Link to the package page, only known for the public registry."""
        if self.is_public_registry:
            return f"{WALLY_WEB_URL}/{self.name}"
        return None
