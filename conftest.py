"""
Pytest configuration for the wally_registry test suite.

Tests talk to a fake GitHub and a fake metadata API through
httpx.MockTransport. Tests marked ``integration`` hit the real public
registry and only run when enabled explicitly.

Environment Variables:
    WALLY_RUN_INTEGRATION: Set to 'true' to run integration tests
"""

import os

import pytest

RUN_INTEGRATION = os.getenv("WALLY_RUN_INTEGRATION", "false").lower() == "true"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: test needs network access to GitHub")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless enabled."""
    if RUN_INTEGRATION:
        return
    skip_integration = pytest.mark.skip(reason="set WALLY_RUN_INTEGRATION=true to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
