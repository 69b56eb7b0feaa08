"""Pytest fixtures for the wally_registry test suite."""

import pytest

from fakes import REGISTRY_URL, FakeRegistryServer
from wally_registry.config import Settings
from wally_registry.github.client import RegistryGitClient
from wally_registry.resolver.registry import WallyRegistry


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        registry_url=REGISTRY_URL,
        github_token=None,
        use_fallback_registries=True,
    )


@pytest.fixture
def server() -> FakeRegistryServer:
    """Fake server with the public registry and a few packages."""
    fake = FakeRegistryServer()
    fake.add_registry(
        "UpliftGames",
        "wally-index",
        {
            "roblox": ["roact", "rodux", "testez"],
            "evaera": ["promise"],
        },
    )
    fake.add_versions("roblox", "roact", ["1.2.0", "1.5.0", "2.0.0"])
    fake.add_versions("evaera", "promise", ["0.1.0", "0.2.0"])
    return fake


@pytest.fixture
def git(settings: Settings, server: FakeRegistryServer) -> RegistryGitClient:
    """Git client with the public registry selected (no background refresh)."""
    client = RegistryGitClient(settings, transport=server.transport())
    client.set_registry(REGISTRY_URL)
    return client


@pytest.fixture
def registry(git: RegistryGitClient) -> WallyRegistry:
    """Resolver on top of the git client fixture."""
    return WallyRegistry(git)
