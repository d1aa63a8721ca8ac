"""
E2E test fixtures for the Orchestrate SDK.

These tests talk to a real Orchestrate endpoint and write data into a
throwaway collection.
"""

import os
import uuid

import pytest

from orchestrate_sdk import ClientConfig

# Skip E2E tests if not in E2E mode
E2E_ENABLED = os.environ.get("ORCHESTRATE_E2E_TESTS", "0") == "1"

pytestmark = pytest.mark.skipif(
    not E2E_ENABLED,
    reason="E2E tests disabled. Set ORCHESTRATE_E2E_TESTS=1 to enable."
)


@pytest.fixture
def live_config() -> ClientConfig:
    """Client configuration from ORCHESTRATE_* environment variables."""
    if not E2E_ENABLED:
        pytest.skip("E2E tests disabled")
    return ClientConfig.from_env()


@pytest.fixture
def test_collection() -> str:
    """Generate a unique collection name for test isolation."""
    return f"sdk_e2e_{uuid.uuid4().hex[:8]}"
