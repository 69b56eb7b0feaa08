"""Shared resolvers, one per registry URL."""

import logging
from typing import Optional

import httpx

from wally_registry.config import Settings, get_settings
from wally_registry.models.registry import RegistryLocator
from wally_registry.resolver.registry import WallyRegistry

logger = logging.getLogger(__name__)

_helpers: dict[str, WallyRegistry] = {}


def get_registry_helper(
    registry_url: Optional[str] = None,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WallyRegistry:
    """Get the shared resolver for a registry, creating it on first use.

    Args:
        registry_url: Canonical registry URL, defaults to the configured registry.
        settings: Resolver settings used when a resolver is created.
        transport: Optional httpx transport used when a resolver is created.

    Returns:
        Resolver for the registry.

    Raises:
        InvalidRegistryError: If the URL is not a GitHub URL.
        UnsupportedRegistryError: If the URL is not an owner/repo path.
    """
    settings = settings or get_settings()
    locator = RegistryLocator.from_url(registry_url or settings.registry_url)
    key = locator.url.lower()
    helper = _helpers.get(key)
    if helper is None:
        logger.debug(f"Creating resolver for {locator}")
        helper = WallyRegistry.for_url(locator.url, settings, transport)
        _helpers[key] = helper
    return helper


async def close_registry_helpers() -> None:
    """Close and forget every shared resolver."""
    helpers = list(_helpers.values())
    _helpers.clear()
    for helper in helpers:
        await helper.close()
