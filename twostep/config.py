"""Configuration management for twostep.

This module handles loading configuration from multiple sources with the following priority:
1. CLI arguments (handled by caller)
2. Environment variables (TWOSTEP_BASE_URL, TWOSTEP_REQUEST_TIMEOUT)
3. TOML configuration file
4. Default values (production environment)

Configuration files are loaded from:
- twostep.toml in current working directory
- ~/.twostep/config.toml

Environment selection via TWOSTEP_ENV (development, staging, production).
Defaults to production if not set.

Example file:

    [environments.development]
    base_url = "http://localhost:8000/api"
    request_timeout = 10

    [forms]
    preserve_inactive_scheme = true
    surface_login_errors = false

    [code_entry]
    post_verify_target = "dashboard"
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from loguru import logger


@dataclass
class FormsConfig:
    """Configuration for the credential form.

    Attributes:
        preserve_inactive_scheme: Keep field values of the tab being left.
        surface_login_errors: Show a message when login fails instead of only
            logging it.
    """

    preserve_inactive_scheme: bool = True
    surface_login_errors: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "FormsConfig":
        """Create FormsConfig from the TOML [forms] section."""
        config = cls()
        for key in ("preserve_inactive_scheme", "surface_login_errors"):
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, bool):
                logger.warning(f"Ignoring non-boolean forms.{key}: {value!r}")
                continue
            setattr(config, key, value)
        return config


@dataclass
class CodeEntryConfig:
    """Configuration for the code entry surface.

    Attributes:
        post_verify_target: Destination reported once a code is accepted.
    """

    post_verify_target: str = "dashboard"

    @classmethod
    def from_dict(cls, data: dict) -> "CodeEntryConfig":
        """Create CodeEntryConfig from the TOML [code_entry] section."""
        target = data.get("post_verify_target")
        if target is None:
            return cls()
        if not isinstance(target, str) or not target:
            logger.warning(
                f"Ignoring invalid code_entry.post_verify_target: {target!r}"
            )
            return cls()
        return cls(post_verify_target=target)


# Default production backend URL
DEFAULT_BASE_URL = "http://localhost:8000"

# Valid environment names
VALID_ENVIRONMENTS = {"development", "staging", "production"}


def _parse_timeout(value) -> Optional[float]:
    """Parse a request timeout; non-positive values disable the timeout."""
    timeout = float(value)
    if timeout <= 0:
        return None
    return timeout


class Config:
    """Configuration manager for twostep."""

    def __init__(self):
        """Initialize configuration with defaults."""
        self.base_url: str = DEFAULT_BASE_URL
        self.request_timeout: Optional[float] = None
        self.environment: str = "production"
        self.forms: FormsConfig = FormsConfig()
        self.code_entry: CodeEntryConfig = CodeEntryConfig()
        self.config_file: Optional[Path] = None
        self._config_data: dict = {}

    def load(self) -> None:
        """Load configuration from all sources.

        Priority order:
        1. Environment variables (TWOSTEP_BASE_URL, TWOSTEP_REQUEST_TIMEOUT)
        2. TOML configuration file
        3. Default values
        """
        self.environment = self._get_environment()

        config_file = self._find_config_file()
        if config_file:
            self._load_config_file(config_file)

        self._apply_env_overrides()

    def _get_environment(self) -> str:
        """Get the current environment from TWOSTEP_ENV.

        Returns:
            Environment name (development, staging, or production).
            Defaults to production if not set or invalid.
        """
        env = os.getenv("TWOSTEP_ENV", "production").lower()
        if env not in VALID_ENVIRONMENTS:
            logger.warning(
                f"Invalid TWOSTEP_ENV value '{env}'. "
                f"Valid values are: {', '.join(sorted(VALID_ENVIRONMENTS))}. "
                f"Defaulting to 'production'."
            )
            env = "production"
        return env

    def _find_config_file(self) -> Optional[Path]:
        """Find the configuration file.

        Searches in order:
        1. twostep.toml in current working directory
        2. ~/.twostep/config.toml

        Returns:
            Path to config file if found, None otherwise.
        """
        cwd_config = Path.cwd() / "twostep.toml"
        if cwd_config.exists():
            logger.info(f"Loading config from {cwd_config}")
            return cwd_config

        home_config = Path.home() / ".twostep" / "config.toml"
        if home_config.exists():
            logger.info(f"Loading config from {home_config}")
            return home_config

        logger.debug("No config file found, using defaults")
        return None

    def _load_config_file(self, config_file: Path) -> None:
        """Load configuration from TOML file.

        Args:
            config_file: Path to the TOML configuration file.
        """
        try:
            with open(config_file, "rb") as f:
                self._config_data = tomllib.load(f)
        except (OSError, ValueError) as e:
            logger.warning(
                f"Failed to load config file {config_file}: {e}. Using defaults."
            )
            return

        self.config_file = config_file
        self.forms = FormsConfig.from_dict(self._config_data.get("forms", {}))
        self.code_entry = CodeEntryConfig.from_dict(
            self._config_data.get("code_entry", {})
        )

        environments = self._config_data.get("environments", {})
        env_config = environments.get(self.environment, {})

        if not env_config:
            logger.debug(
                f"No configuration found for environment '{self.environment}' "
                f"in {config_file}, using defaults"
            )
            return

        if "base_url" in env_config:
            self.base_url = env_config["base_url"]
            logger.debug(f"Loaded base_url from config: {self.base_url}")

        if "request_timeout" in env_config:
            try:
                self.request_timeout = _parse_timeout(env_config["request_timeout"])
            except (TypeError, ValueError):
                logger.warning(
                    f"Ignoring invalid request_timeout: {env_config['request_timeout']!r}"
                )

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides.

        Environment variables take precedence over config file settings
        but are overridden by CLI arguments (handled by caller).
        """
        url_override = os.getenv("TWOSTEP_BASE_URL")
        if url_override:
            self.base_url = url_override
            logger.info(f"Overriding base_url from env: {self.base_url}")

        timeout_override = os.getenv("TWOSTEP_REQUEST_TIMEOUT")
        if timeout_override:
            try:
                self.request_timeout = _parse_timeout(timeout_override)
                logger.info(
                    f"Overriding request_timeout from env: {self.request_timeout}"
                )
            except ValueError:
                logger.warning(
                    f"Ignoring invalid TWOSTEP_REQUEST_TIMEOUT: {timeout_override!r}"
                )

    def to_dict(self) -> dict:
        """Effective configuration as a plain dictionary."""
        return {
            "environment": self.environment,
            "config_file": str(self.config_file) if self.config_file else None,
            "base_url": self.base_url,
            "request_timeout": self.request_timeout,
            "forms": {
                "preserve_inactive_scheme": self.forms.preserve_inactive_scheme,
                "surface_login_errors": self.forms.surface_login_errors,
            },
            "code_entry": {
                "post_verify_target": self.code_entry.post_verify_target,
            },
        }


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads configuration on first call.

    Returns:
        Global Config instance.
    """
    global _config
    if _config is None:
        _config = Config()
        _config.load()
    return _config


def reload_config() -> Config:
    """Reload configuration from sources.

    Useful for testing or runtime reconfiguration.

    Returns:
        Reloaded Config instance.
    """
    global _config
    _config = Config()
    _config.load()
    return _config
