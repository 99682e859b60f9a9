"""YAML configuration for kpasscli.

Every key is optional; command-line flags and environment variables take
precedence over anything set here.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from kpasscli.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "KPASSCLI_CONFIG"
DEFAULT_CONFIG_PATH = "~/.config/kpasscli/config.yaml"

EXAMPLE_CONFIG = """\
# kpasscli configuration
database_path: ~/secrets/passwords.kdbx
# stdout or clipboard
default_output: stdout
# Read the master password from a file ...
# password_file: ~/.config/kpasscli/master-password
# ... or from the output of a command
# password_executable: pass show keepass/master
# Seconds before a copied value is cleared from the clipboard (0 disables)
clipboard_timeout: 15
"""


@dataclass
class Config:
    database_path: Optional[str] = None
    default_output: Optional[str] = None
    password_file: Optional[str] = None
    password_executable: Optional[str] = None
    clipboard_timeout: Optional[int] = None
    config_file_path: str = ""

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load configuration from *path*.

        Without *path*, ``KPASSCLI_CONFIG`` is consulted and then the default
        location; a missing file there simply yields an empty config.

        Raises:
            ConfigError: If an explicitly named file is missing, or any file
                cannot be parsed.
        """
        explicit = path or os.environ.get(CONFIG_ENV)
        config_path = Path(explicit or DEFAULT_CONFIG_PATH).expanduser()

        if not config_path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {config_path}")
            logger.debug("No config file at %s, using defaults", config_path)
            return cls()

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to read config {config_path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping")

        timeout = data.get("clipboard_timeout")
        if timeout is not None:
            try:
                timeout = int(timeout)
            except (TypeError, ValueError):
                raise ConfigError(
                    f"clipboard_timeout must be an integer, got {timeout!r}"
                )

        logger.debug("Loaded config from %s", config_path)
        return cls(
            database_path=_optional_str(data.get("database_path")),
            default_output=_optional_str(data.get("default_output")),
            password_file=_optional_str(data.get("password_file")),
            password_executable=_optional_str(data.get("password_executable")),
            clipboard_timeout=timeout,
            config_file_path=str(config_path),
        )

    @staticmethod
    def create_example(path: str = "config.yaml") -> Path:
        """Write an example config to *path*, refusing to overwrite."""
        target = Path(path)
        if target.exists():
            raise ConfigError(f"Refusing to overwrite existing file: {target}")
        target.write_text(EXAMPLE_CONFIG, encoding="utf-8")
        return target

    def describe(self) -> str:
        """Human-readable dump of the effective settings."""
        source = self.config_file_path or "(none, defaults)"
        rule = "-" * 42
        return "\n".join(
            [
                f"Current used Configuration: {source}",
                rule,
                f"Database Path: {self.database_path}",
                f"Default Output: {self.default_output}",
                f"Password File: {self.password_file}",
                f"Password Executable: {self.password_executable}",
                f"Clipboard Timeout: {self.clipboard_timeout}",
                rule,
            ]
        )


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)
