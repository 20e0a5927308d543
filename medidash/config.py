"""Configuration file management for medidash."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from medidash.errors import ConfigError

DEFAULT_BASE_URL = "https://api.medibill.co.za/api/v1"
DEFAULT_TIMEOUT = 30.0

EMAIL_ENV = "API_EMAIL"
PASSWORD_ENV = "API_PASSWORD"
BASE_URL_ENV = "MEDIBILL_BASE_URL"


@dataclass(frozen=True)
class Credentials:
    """Medibill login credentials."""

    email: str
    password: str


@dataclass(frozen=True)
class Settings:
    """Connection settings for the Medibill API."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int | None = None


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "medidash" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Credentials are left empty; fill them in or set API_EMAIL and API_PASSWORD.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config: dict[str, Any] = {
        "medibill": {
            "email": "",
            "password": "",
            "base_url": DEFAULT_BASE_URL,
        },
        "fetch": {
            "timeout": DEFAULT_TIMEOUT,
            "max_workers": 0,
        },
    }

    save_config(default_config, config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e


def load_config_or_empty(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration, treating a missing file as empty."""
    try:
        return load_config(config_path)
    except FileNotFoundError:
        return {}


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def load_credentials(config_path: Path | None = None) -> Credentials:
    """Resolve Medibill credentials from the environment, then the config file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Credentials with both values set.

    Raises:
        ConfigError: If either credential is missing.
    """
    section = load_config_or_empty(config_path).get("medibill", {})

    email = os.environ.get(EMAIL_ENV) or section.get("email") or ""
    password = os.environ.get(PASSWORD_ENV) or section.get("password") or ""

    if not email or not password:
        raise ConfigError(
            f"API credentials not set. Set {EMAIL_ENV} and {PASSWORD_ENV} or fill in [medibill] in the config file."
        )

    return Credentials(email=email, password=password)


def load_settings(config_path: Path | None = None) -> Settings:
    """Resolve connection settings from the environment and config file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Settings, with defaults for anything not configured.

    Raises:
        ConfigError: If a fetch setting has the wrong type or is out of range.
    """
    config = load_config_or_empty(config_path)
    medibill = config.get("medibill", {})
    fetch = config.get("fetch", {})

    base_url = os.environ.get(BASE_URL_ENV) or medibill.get("base_url") or DEFAULT_BASE_URL

    try:
        timeout = float(fetch.get("timeout", DEFAULT_TIMEOUT))
        max_workers = int(fetch.get("max_workers", 0)) or None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid [fetch] settings: {e}") from e

    if timeout <= 0:
        raise ConfigError(f"Invalid [fetch] settings: timeout must be positive, got {timeout}")
    if max_workers is not None and max_workers < 0:
        raise ConfigError(f"Invalid [fetch] settings: max_workers must be 0 or more, got {max_workers}")

    return Settings(base_url=base_url.rstrip("/"), timeout=timeout, max_workers=max_workers)
