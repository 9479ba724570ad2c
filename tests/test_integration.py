"""Integration tests against the live CircleCI API.

These tests create, read and delete a real environment variable on a
CircleCI project you own.

Requirements:
- Environment variables:
  - CIRCLECI_TOKEN: Personal API token
  - CIRCLECI_USERNAME: User or organization owning the project
  - CIRCLECI_PROJECT: Project name
  - CIRCLECI_VCS_TYPE: VCS type (default: github)
  - CIRCLECI_API_URL: API base URL (optional)

Run with:
    CIRCLECI_TOKEN=... CIRCLECI_USERNAME=acme CIRCLECI_PROJECT=sandbox \
    pytest tests/test_integration.py -v
"""

import os
import time

import pytest

from circleci_env import CircleCI, KeyNotFoundError

REQUIRED = ("CIRCLECI_TOKEN", "CIRCLECI_USERNAME", "CIRCLECI_PROJECT")

# Skip all tests in this module unless a live project is configured
pytestmark = pytest.mark.skipif(
    not all(os.environ.get(name) for name in REQUIRED),
    reason="Integration tests require CIRCLECI_TOKEN, CIRCLECI_USERNAME and CIRCLECI_PROJECT",
)


def get_unique_key(prefix: str = "CIRCLECI_ENV_TEST") -> str:
    """Generate a unique key with timestamp to avoid conflicts."""
    return f"{prefix}_{int(time.time() * 1000)}"


@pytest.fixture(scope="module")
def client():
    client = CircleCI(token=os.environ["CIRCLECI_TOKEN"])
    yield client
    client.close()


@pytest.fixture(scope="module")
def target():
    return (
        os.environ.get("CIRCLECI_VCS_TYPE", "github"),
        os.environ["CIRCLECI_USERNAME"],
        os.environ["CIRCLECI_PROJECT"],
    )


class TestEnvironmentVariableLifecycle:
    """Create, read, list and delete a variable."""

    def test_lifecycle(self, client, target):
        key = get_unique_key()
        value = "integration-value-1234"

        client.set_env(*target, key, value)
        try:
            env = client.get_env(*target, key)
            assert env.key == key
            # CircleCI only returns the obfuscated value
            assert env.value.endswith("1234")

            keys = [e.key for e in client.list_env(*target)]
            assert key in keys
        finally:
            client.delete_env(*target, key)

        with pytest.raises(KeyNotFoundError):
            client.get_env(*target, key)

    def test_get_missing_key(self, client, target):
        with pytest.raises(KeyNotFoundError):
            client.get_env(*target, get_unique_key("CIRCLECI_ENV_MISSING"))
