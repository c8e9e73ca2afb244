"""
Unit tests for env file loading.
"""

import os

import pytest

from wpbridge.adapters.config import load_env

pytestmark = pytest.mark.unit


class TestLoadEnv:
    def test_loads_env_file(self, tmp_path, monkeypatch):
        """Test variables are loaded from the file named by ENV_FILE."""
        env_file = tmp_path / "test.env"
        env_file.write_text("WP_BASE_URL=https://from-file.example.com\n")
        monkeypatch.setenv("ENV_FILE", str(env_file))
        # recorded so teardown restores the original value
        monkeypatch.setenv("WP_BASE_URL", "placeholder")
        monkeypatch.delenv("WP_BASE_URL")

        assert load_env() is True
        assert os.environ["WP_BASE_URL"] == "https://from-file.example.com"

    def test_does_not_override_by_default(self, tmp_path, monkeypatch):
        """Test existing variables win over the file."""
        env_file = tmp_path / "test.env"
        env_file.write_text("WP_USERNAME=from-file\n")
        monkeypatch.setenv("ENV_FILE", str(env_file))
        monkeypatch.setenv("WP_USERNAME", "from-env")

        load_env()

        assert os.environ["WP_USERNAME"] == "from-env"

    def test_missing_file(self, tmp_path, monkeypatch):
        """Test a missing env file reports False."""
        monkeypatch.setenv("ENV_FILE", str(tmp_path / "missing.env"))

        assert load_env() is False
