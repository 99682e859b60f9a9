"""Opening KDBX databases and resolving the settings needed to do so.

This module handles:
  - Locating the database (flag, KPASSCLI_KDBPATH, config file)
  - Obtaining the master password (flag, KPASSCLI_kdbpassword, password
    file, password executable, interactive prompt)
  - Opening the database with pykeepass
"""

import getpass
import logging
import os
import subprocess
import time
from pathlib import Path
from typing import Callable, Optional

from pykeepass import PyKeePass
from pykeepass.exceptions import CredentialsError

from kpasscli.config import Config
from kpasscli.exceptions import (
    AuthenticationError,
    ConfigError,
    DatabaseNotFoundError,
    KpassError,
)

logger = logging.getLogger(__name__)

DATABASE_PATH_ENV = "KPASSCLI_KDBPATH"
PASSWORD_ENV = "KPASSCLI_kdbpassword"


def resolve_database_path(cli_path: Optional[str], config: Config) -> str:
    """Pick the database path from the flag, environment, or config.

    Raises:
        ConfigError: If none of them provides a path.
    """
    db_path = cli_path or os.environ.get(DATABASE_PATH_ENV) or config.database_path
    if not db_path:
        raise ConfigError(
            f"No KeePass database path provided. Use --kdb-path, set "
            f"{DATABASE_PATH_ENV} or add database_path to the config file."
        )
    return db_path


def _read_password_file(path: str) -> str:
    try:
        content = Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read password file {path}: {exc}") from exc
    return content.rstrip("\r\n")


def _run_password_executable(command: str) -> str:
    try:
        proc = subprocess.run(
            command, shell=True, capture_output=True, text=True, check=False
        )
    except OSError as exc:
        raise ConfigError(f"Failed to run password executable: {exc}") from exc
    if proc.returncode != 0:
        # stderr of the helper may echo secrets; only report the exit status
        raise ConfigError(
            f"Password executable exited with status {proc.returncode}"
        )
    return proc.stdout.strip()


def resolve_password(
    cli_password: Optional[str],
    config: Config,
    env_password: Optional[str] = None,
    prompt: Optional[Callable[[str], str]] = None,
) -> str:
    """Return the master password from the first source that provides one.

    Order: *cli_password*, *env_password* (normally ``KPASSCLI_kdbpassword``),
    the config's ``password_file``, its ``password_executable``, and finally
    an interactive *prompt* (``getpass.getpass`` by default). Never logs
    the password itself.
    """
    if cli_password:
        logger.debug("Using master password from command line")
        return cli_password
    if env_password:
        logger.debug("Using master password from %s", PASSWORD_ENV)
        return env_password
    if config.password_file:
        logger.debug("Reading master password from %s", config.password_file)
        return _read_password_file(config.password_file)
    if config.password_executable:
        logger.debug("Obtaining master password from password executable")
        return _run_password_executable(config.password_executable)

    prompt = prompt or getpass.getpass
    try:
        return prompt("Enter master password: ")
    except EOFError:
        raise ConfigError("Could not read master password")


def open_database(
    database_path: str,
    password: Optional[str] = None,
    keyfile: Optional[str] = None,
) -> PyKeePass:
    """Open a KeePass database.

    Args:
        database_path: Path to the .kdbx file.
        password: Master password.
        keyfile: Optional path to a key file.

    Returns:
        An opened PyKeePass database instance.

    Raises:
        DatabaseNotFoundError: If the database file does not exist.
        AuthenticationError: If the credentials are invalid.
        KpassError: For other database errors.
    """
    db_path = Path(database_path).expanduser().resolve()
    if not db_path.is_file():
        raise DatabaseNotFoundError(f"Database not found: {db_path}")

    start = time.perf_counter()
    try:
        kp = PyKeePass(str(db_path), password=password, keyfile=keyfile)
    except CredentialsError:
        # Intentionally vague -- do NOT leak password or pykeepass internals
        raise AuthenticationError(
            "Failed to open database (wrong password or corrupted file?)"
        )
    except Exception as exc:
        raise KpassError(f"Failed to open database: {exc}") from exc

    logger.debug(
        "Database %s opened in %.3fs", db_path, time.perf_counter() - start
    )
    return kp
