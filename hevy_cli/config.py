"""Persisted configuration and API key resolution."""

import json
import logging
import os
import tempfile
from pathlib import Path

from hevy_cli.exceptions import MissingAPIKeyError
from hevy_cli.models import Config, Credential, CredentialSource

API_KEY_ENV = "HEVY_API_KEY"
MISSING_KEY_MESSAGE = f"No API key configured. Run `hevy auth set <api-key>` or set {API_KEY_ENV}."

_LOGGER = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Per-user configuration directory."""
    return Path.home() / ".config" / "hevy-cli"


def get_config_file() -> Path:
    return get_config_dir() / "config.json"


def read_config() -> Config:
    """Load the config file, or an empty config if it does not exist yet."""
    path = get_config_file()
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _LOGGER.debug("No config file at %s", path)
        return Config()
    return Config.model_validate(json.loads(raw))


def write_config(config: Config) -> Path:
    """Replace the config file with ``config`` and return its path."""
    path = get_config_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    # Only an unset key is left out; other fields are written back as they are
    exclude = {"api_key"} if config.api_key is None else None
    payload = json.dumps(config.model_dump(by_alias=True, exclude=exclude), indent=2)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".config-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    _LOGGER.debug("Wrote config to %s", path)
    return path


def set_api_key(api_key: str) -> Path:
    """Store ``api_key``, keeping any other fields in the file."""
    config = read_config()
    config.api_key = api_key
    return write_config(config)


def clear_api_key() -> Path:
    """Empty the config file."""
    return write_config(Config())


def resolve_api_key() -> Credential:
    """Find the API key: environment first, then the config file."""
    env_key = os.getenv(API_KEY_ENV)
    if env_key:
        return Credential(api_key=env_key, source=CredentialSource.ENV)

    config = read_config()
    if config.api_key:
        return Credential(api_key=config.api_key, source=CredentialSource.CONFIG)

    return Credential(api_key=None, source=CredentialSource.MISSING)


def require_api_key() -> Credential:
    """Like :func:`resolve_api_key` but raise when no key is configured."""
    credential = resolve_api_key()
    if not credential.api_key:
        raise MissingAPIKeyError(MISSING_KEY_MESSAGE)
    return credential
