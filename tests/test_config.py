"""
Tests for the configuration loader.

Run with: pytest tests/test_config.py -v
"""

from unittest.mock import patch

import pytest
import yaml

from core import config as config_module
from core.config import (
    CONFIG_PATH_ENV,
    ENVIRONMENT_ENV,
    get_project_root,
    get_server_config,
    load_config,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "environment": "staging",
        "password": {"scrypt_n": 2048},
        "token": {"secret": "file-secret"},
        "face_matching": {"threshold": 0.5},
        "storage": {"backend": "memory"},
        "api": {"base_url": "http://localhost:9000"},
    }))
    return path


@pytest.fixture(autouse=True)
def reset_singleton():
    """Never leak a test config into other tests."""
    saved = config_module._config_instance
    yield
    config_module._config_instance = saved


class TestLoadConfig:

    def test_project_config_loads(self):
        config = load_config(str(get_project_root() / "config.yaml"))

        for section in ("password", "token", "face_matching", "storage", "api"):
            assert section in config
        assert config["face_matching"]["threshold"] == 0.6
        assert config["token"]["expires_in_seconds"] == 86400

    def test_explicit_path(self, config_file, monkeypatch):
        monkeypatch.delenv(ENVIRONMENT_ENV, raising=False)
        config = load_config(str(config_file))

        assert config["environment"] == "staging"
        assert config["password"]["scrypt_n"] == 2048

    def test_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(config_file))
        assert load_config()["token"]["secret"] == "file-secret"

    def test_env_overrides_environment(self, config_file, monkeypatch):
        monkeypatch.setenv(ENVIRONMENT_ENV, "production")
        assert load_config(str(config_file))["environment"] == "production"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(ENVIRONMENT_ENV, raising=False)
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}


class TestSections:

    def test_get_section(self, config_file, monkeypatch):
        monkeypatch.delenv(ENVIRONMENT_ENV, raising=False)
        config_module._config_instance = load_config(str(config_file))

        assert config_module.get_section("storage") == {"backend": "memory"}
        assert config_module.get_environment() == "staging"
        assert config_module.is_production() is False

    def test_missing_section(self, config_file):
        config_module._config_instance = load_config(str(config_file))

        with pytest.raises(KeyError, match="not found"):
            config_module.get_section("nonexistent")


class TestServerConfig:

    @pytest.mark.parametrize("base_url,expected", [
        ("http://localhost:8000", {"host": "0.0.0.0", "port": 8000}),
        ("http://localhost:9000/", {"host": "0.0.0.0", "port": 9000}),
        ("http://10.0.0.5:8080", {"host": "10.0.0.5", "port": 8080}),
        ("http://example", {"host": "0.0.0.0", "port": 8000}),
    ])
    def test_parse_base_url(self, base_url, expected):
        with patch("core.config.get_api_config", return_value={"base_url": base_url}):
            assert get_server_config() == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
