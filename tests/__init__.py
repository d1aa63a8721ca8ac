"""
Orchestrate SDK Test Suite.

This package contains:
- unit/: Unit tests (no network, no HTTP client)
- integration/: Client tests against httpx.MockTransport
- e2e/: End-to-end tests against a live endpoint (ORCHESTRATE_E2E_TESTS=1)
"""
