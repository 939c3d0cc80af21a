"""Unit tests for harvestlib.config module."""

import json
import os
import tempfile

from harvestlib import config


class TestConfigDefaults:
    """Test default configuration values."""

    def test_defaults_exist(self):
        """Test that DEFAULTS dictionary exists and has expected keys."""
        assert isinstance(config.DEFAULTS, dict)
        for key in ("FTP_HOST", "FTP_USER", "FTP_PASS", "FTP_ACCT", "ROOT_DOWNLOAD_PATH", "ROOT_OUTPUT_PATH"):
            assert key in config.DEFAULTS

    def test_retry_defaults(self):
        """Test retry-related default values."""
        assert config.DEFAULTS["RETRY_MAX_ATTEMPTS"] == 3
        assert config.DEFAULTS["RETRY_BASE_DELAY"] == 1.0
        assert config.DEFAULTS["RETRY_MAX_DELAY"] == 60.0
        assert config.DEFAULTS["RECOVERY_MAX_ATTEMPTS"] == 2

    def test_http_cache_default(self):
        """Test the default lifetime of cached HTTP responses."""
        assert config.DEFAULTS["HTTP_CACHE_EXPIRES_IN"] == 3600.0

    def test_path_defaults_are_strings(self):
        """Test that path defaults are strings."""
        assert isinstance(config.DEFAULTS["ROOT_DOWNLOAD_PATH"], str)
        assert isinstance(config.DEFAULTS["ROOT_OUTPUT_PATH"], str)


class TestConfigGet:
    """Test config.get() function."""

    def test_get_with_default(self):
        """Test getting a non-existing key with default value."""
        value = config.get("NON_EXISTING_KEY", "default_value")
        assert value == "default_value"

    def test_get_without_default(self):
        """Test getting a non-existing key without default returns None."""
        assert config.get("NON_EXISTING_KEY") is None


class TestTryLoadFile:
    """Test _try_load_file() function."""

    def test_load_valid_json_file(self):
        """Test loading a valid JSON configuration file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump({"FTP_HOST": "ftp.test.org", "RETRY_MAX_ATTEMPTS": 9}, f)
            temp_path = f.name

        try:
            config._config = config.DEFAULTS.copy()
            result = config._try_load_file(temp_path)
            assert result is True
            assert config._config["FTP_HOST"] == "ftp.test.org"
            assert config._config["RETRY_MAX_ATTEMPTS"] == 9
        finally:
            os.unlink(temp_path)
            config.reload()

    def test_load_nonexistent_file(self):
        """Test loading a non-existent file returns False."""
        assert config._try_load_file("/nonexistent/path/to/file.json") is False

    def test_load_invalid_json(self, tmp_path):
        """Test that malformed JSON is ignored."""
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        assert config._try_load_file(str(bad)) is False

    def test_load_non_dict_json(self, tmp_path):
        """Test that a JSON list is not merged."""
        listing = tmp_path / "list.json"
        listing.write_text("[1, 2, 3]")
        assert config._try_load_file(str(listing)) is False


class TestEnvironmentOverrides:
    """Test environment variable overrides and reload()."""

    def test_env_overrides_keep_types(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "7")
        monkeypatch.setenv("FTP_TIMEOUT", "12.5")
        monkeypatch.setenv("FTP_HOST", "ftp.env.org")
        try:
            config.reload()
            assert config.get("RETRY_MAX_ATTEMPTS") == 7
            assert config.get("FTP_TIMEOUT") == 12.5
            assert config.get("FTP_HOST") == "ftp.env.org"
        finally:
            monkeypatch.undo()
            config.reload()

    def test_env_override_bad_number_is_ignored(self, monkeypatch):
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "many")
        try:
            config.reload()
            assert config.get("RETRY_MAX_ATTEMPTS") == 3
        finally:
            monkeypatch.undo()
            config.reload()

    def test_config_file_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "harvest.json"
        path.write_text(json.dumps({"FTP_USER": "harvester"}))
        monkeypatch.setenv("HARVESTLIB_CONFIG", str(path))
        try:
            config.reload()
            assert config.get("FTP_USER") == "harvester"
        finally:
            monkeypatch.undo()
            config.reload()

    def test_reload_with_path(self, tmp_path):
        path = tmp_path / "harvest.json"
        path.write_text(json.dumps({"LOG_LEVEL": "DEBUG"}))
        try:
            config.reload(str(path))
            assert config.get("LOG_LEVEL") == "DEBUG"
        finally:
            config.reload()


class TestIsDevelopment:
    def test_development(self, monkeypatch):
        monkeypatch.setenv("HARVESTLIB_ENV", "development")
        assert config.is_development() is True

    def test_production(self, monkeypatch):
        monkeypatch.setenv("HARVESTLIB_ENV", "production")
        assert config.is_development() is False

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("HARVESTLIB_ENV", raising=False)
        assert config.is_development() is False
