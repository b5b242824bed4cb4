"""Pytest configuration and fixtures for nimure tests.

CRITICAL: Protects production configuration from test modifications.
"""

import os
from pathlib import Path

import pytest


@pytest.fixture(scope="session", autouse=True)
def prevent_real_azure_operations():
    """Mark the process as running under test.

    Tests that need a real Azure CLI should explicitly check for
    RUN_E2E_TESTS=true.
    """
    os.environ["NIMURE_TEST_MODE"] = "true"

    yield

    if "NIMURE_TEST_MODE" in os.environ:
        del os.environ["NIMURE_TEST_MODE"]


@pytest.fixture(autouse=True)
def clear_nimure_environment(monkeypatch):
    """Keep NIMURE_* overrides from the developer's shell out of tests."""
    for name in ("NIMURE_SUBSCRIPTION_ID", "NIMURE_CACHE_TTL", "NIMURE_RATE_LIMITING", "NIMURE_DEBUG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def isolated_config(tmp_path):
    """Provide isolated config directory for tests.

    Use this fixture instead of modifying ~/.nimure/config.toml.
    """
    config_dir = tmp_path / ".nimure"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def mock_config_path(isolated_config, monkeypatch):
    """Point ConfigManager at the isolated config instead of ~/.nimure.

    Example:
        def test_something(mock_config_path):
            ConfigManager.save_config(config)  # Safe!
    """
    config_file = isolated_config / "config.toml"

    from nimure.config_manager import ConfigManager

    def mock_get_path(custom_path=None):
        if custom_path:
            return Path(custom_path)
        return config_file

    monkeypatch.setattr(ConfigManager, "get_config_path", mock_get_path)

    return config_file
