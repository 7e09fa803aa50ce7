"""Tests for config module."""

import json

import pytest

from hevy_cli.config import (
    MISSING_KEY_MESSAGE,
    clear_api_key,
    get_config_file,
    read_config,
    require_api_key,
    resolve_api_key,
    set_api_key,
    write_config,
)
from hevy_cli.exceptions import MissingAPIKeyError
from hevy_cli.models import Config, CredentialSource


class TestConfigStore:
    """Tests for reading and writing the config file."""

    def test_config_file_under_home(self, isolated_home):
        """Test config path is derived from the home directory."""
        assert get_config_file() == isolated_home / ".config" / "hevy-cli" / "config.json"

    def test_read_missing_file_returns_empty_config(self):
        """Test a missing config file is not an error."""
        config = read_config()
        assert config.api_key is None

    def test_set_then_read_round_trip(self):
        """Test stored key is read back."""
        set_api_key("abc123")
        assert read_config().api_key == "abc123"

    def test_set_creates_directory_and_pretty_json(self):
        """Test set writes indented JSON under the apiKey field."""
        path = set_api_key("abc123")

        assert path == get_config_file()
        raw = path.read_text()
        assert json.loads(raw) == {"apiKey": "abc123"}
        assert '\n  "apiKey"' in raw

    def test_set_overwrites_previous_key(self):
        """Test set replaces an existing key."""
        set_api_key("first")
        set_api_key("second")
        assert read_config().api_key == "second"

    def test_set_preserves_other_fields(self):
        """Test read-modify-write keeps unknown fields."""
        path = get_config_file()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"apiKey": "old", "theme": "dark"}))

        set_api_key("new")

        assert json.loads(path.read_text()) == {"apiKey": "new", "theme": "dark"}

    def test_set_preserves_null_fields(self):
        """Test other fields holding null survive a key update."""
        path = get_config_file()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"apiKey": "old", "profile": None}))

        set_api_key("new")

        assert json.loads(path.read_text()) == {"apiKey": "new", "profile": None}

    def test_clear_then_read_has_no_key(self):
        """Test clear empties the config."""
        set_api_key("abc123")
        path = clear_api_key()

        assert json.loads(path.read_text()) == {}
        assert read_config().api_key is None

    def test_write_leaves_no_temp_files(self):
        """Test write replaces the file without leftovers."""
        write_config(Config(api_key="abc"))
        assert [p.name for p in get_config_file().parent.iterdir()] == ["config.json"]

    def test_unreadable_config_propagates(self):
        """Test I/O errors other than a missing file are raised."""
        path = get_config_file()
        path.mkdir(parents=True)  # a directory where the file should be

        with pytest.raises(OSError):
            read_config()


class TestResolveApiKey:
    """Tests for API key resolution."""

    def test_missing(self):
        """Test no env var and no config file."""
        credential = resolve_api_key()
        assert credential.api_key is None
        assert credential.source == CredentialSource.MISSING

    def test_from_config(self):
        """Test key stored in config file."""
        set_api_key("from-file")
        credential = resolve_api_key()
        assert credential.api_key == "from-file"
        assert credential.source == CredentialSource.CONFIG

    def test_env_takes_precedence(self, monkeypatch):
        """Test environment variable wins over the config file."""
        set_api_key("from-file")
        monkeypatch.setenv("HEVY_API_KEY", "from-env")

        credential = resolve_api_key()
        assert credential.api_key == "from-env"
        assert credential.source == CredentialSource.ENV
        assert credential.source.value == "env"

    def test_empty_env_falls_back_to_config(self, monkeypatch):
        """Test an empty env var does not count as a key."""
        set_api_key("from-file")
        monkeypatch.setenv("HEVY_API_KEY", "")
        assert resolve_api_key().source == CredentialSource.CONFIG

    def test_require_raises_with_remediation(self):
        """Test missing key error names both ways to fix it."""
        with pytest.raises(MissingAPIKeyError) as exc_info:
            require_api_key()

        message = str(exc_info.value)
        assert message == MISSING_KEY_MESSAGE
        assert "hevy auth set" in message
        assert "HEVY_API_KEY" in message

    def test_require_returns_credential(self, api_key):
        """Test require passes through a resolved key."""
        assert require_api_key().api_key == api_key
