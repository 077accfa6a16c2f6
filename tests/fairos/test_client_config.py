"""Tests for client configuration loading."""

import logging

import pytest

from fairos.config import ClientConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("FAIROS_CONFIG", "FAIROS_BASE_URL", "FAIROS_COOKIE_NAME", "FAIROS_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)


class TestClientConfig:

    def test_defaults(self):
        config = ClientConfig()
        assert config.base_url == "http://localhost:9090/v1"
        assert config.cookie_name == "fairOS-dfs"
        assert config.timeout_seconds == 60
        assert config.verify_ssl is True
        config.validate()

    def test_validate_lists_every_error(self):
        config = ClientConfig(base_url="localhost", cookie_name="", timeout_seconds=0)

        with pytest.raises(ValueError) as exc_info:
            config.validate()

        message = str(exc_info.value)
        assert "base_url" in message
        assert "cookie_name" in message
        assert "timeout_seconds" in message

    def test_from_dict_coerces_types(self):
        config = ClientConfig.from_dict(
            {"timeout_seconds": "30", "max_idle_per_host": "5", "verify_ssl": "false"}
        )
        assert config.timeout_seconds == 30.0
        assert config.max_idle_per_host == 5
        assert config.verify_ssl is False

    def test_from_dict_ignores_unknown_keys(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fairos.config"):
            config = ClientConfig.from_dict({"base_url": "http://h/v1", "bogus": 1})

        assert config.base_url == "http://h/v1"
        assert any("unknown config keys" in r.getMessage() for r in caplog.records)


class TestLoadConfig:

    def test_defaults_without_file(self):
        assert load_config() == ClientConfig()

    def test_yaml_section(self, tmp_path):
        path = tmp_path / "fairos.yaml"
        path.write_text("fairos:\n  base_url: https://dfs.example.com/v1\n  timeout_seconds: 15\n")

        config = load_config(path)

        assert config.base_url == "https://dfs.example.com/v1"
        assert config.timeout_seconds == 15.0

    def test_yaml_top_level(self, tmp_path):
        path = tmp_path / "fairos.yaml"
        path.write_text("cookie_name: custom\n")

        assert load_config(path).cookie_name == "custom"

    def test_empty_section(self, tmp_path):
        path = tmp_path / "fairos.yaml"
        path.write_text("fairos:\n")

        assert load_config(path) == ClientConfig()

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DFS_HOST", "dfs.internal")
        path = tmp_path / "fairos.yaml"
        path.write_text(
            "fairos:\n"
            "  base_url: http://${DFS_HOST}:9090/v1\n"
            "  cookie_name: ${DFS_COOKIE:-fairOS-dfs}\n"
        )

        config = load_config(path)

        assert config.base_url == "http://dfs.internal:9090/v1"
        assert config.cookie_name == "fairOS-dfs"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "fairos.yaml"
        path.write_text("fairos:\n  cookie_name: from-file\n")
        monkeypatch.setenv("FAIROS_CONFIG", str(path))

        assert load_config().cookie_name == "from-file"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / "fairos.yaml"
        path.write_text("fairos:\n  base_url: http://file/v1\n  timeout_seconds: 10\n  cookie_name: file\n")
        monkeypatch.setenv("FAIROS_BASE_URL", "http://env/v1")
        monkeypatch.setenv("FAIROS_TIMEOUT_SECONDS", "20")

        config = load_config(path, overrides={"timeout_seconds": 30})

        assert config.cookie_name == "file"
        assert config.base_url == "http://env/v1"
        assert config.timeout_seconds == 30.0

    def test_invalid_values_rejected(self):
        with pytest.raises(ValueError, match="timeout_seconds"):
            load_config(overrides={"timeout_seconds": -1})
