"""Configuration module using Pydantic Settings."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GITHUB_BASE_URL = "https://github.com/"

PUBLIC_REGISTRY_USER_AND_REPO = "UpliftGames/wally-index"

PUBLIC_REGISTRY_URL = GITHUB_BASE_URL + PUBLIC_REGISTRY_USER_AND_REPO


class Settings(BaseSettings):
    """Resolver settings loaded from ``WALLY_*`` environment variables and .env file.

    Attributes:
        registry_url: Registry used when no registry is given explicitly.
        github_token: Optional GitHub token used for the tree and blob API.
        github_api_url: Base URL of the GitHub REST API.
        tree_ref: Branch (or any tree-ish) listed as the registry root.
        request_timeout: Per-request timeout in seconds, None waits forever.
        use_fallback_registries: Consult the fallback registries of the config.
        log_level: Logging level for the CLI.
        log_json: Emit JSON lines instead of plain text.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    registry_url: str = Field(
        default=PUBLIC_REGISTRY_URL,
        description="Default registry URL",
    )
    github_token: Optional[str] = Field(
        default=None,
        description="GitHub token for authenticated tree/blob requests",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    tree_ref: str = Field(
        default="main",
        description="Tree-ish listed as the registry root",
    )
    request_timeout: Optional[float] = Field(
        default=None,
        description="Request timeout in seconds (None disables timeouts)",
    )
    use_fallback_registries: bool = Field(
        default=True,
        description="Try fallback registries when a package is not found",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("github_api_url", "registry_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if not v or not isinstance(v, str):
            return v
        return v.strip().rstrip("/")

    @field_validator("github_token", mode="before")
    @classmethod
    def empty_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        # An empty WALLY_GITHUB_TOKEN means anonymous access
        if isinstance(v, str) and not v.strip():
            return None
        return v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
