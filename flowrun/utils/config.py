"""Configuration utilities for loading environment variables."""

import hashlib
import logging
import os
from typing import Optional

from dotenv import load_dotenv

from flowrun.utils.errors import ConfigurationError

ENCRYPTION_KEY_ENV = "CREDENTIAL_ENCRYPTION_KEY"
LOG_LEVEL_ENV = "FLOWRUN_LOG_LEVEL"
CREDENTIALS_DB_ENV = "FLOWRUN_CREDENTIALS_DB"

DEFAULT_CREDENTIALS_DB = "flowrun_credentials.db"
_DEV_KEY_PASSPHRASE = "dev-encryption-key-change-in-production"


def load_env(env_file: Optional[str] = None) -> None:
    """Load environment variables from .env file.

    Searches the current directory and its parents for a ``.env`` file when
    no path is given. Variables already present in the environment win.

    Args:
        env_file: Optional path to .env file.

    Example:
        >>> from flowrun.utils.config import load_env
        >>> load_env()
        >>> key = get_config("CREDENTIAL_ENCRYPTION_KEY")
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get configuration value from environment.

    Args:
        key: Configuration key
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    return os.getenv(key, default)


def get_encryption_key() -> bytes:
    """Return the 32-byte AES key used for credential data.

    ``CREDENTIAL_ENCRYPTION_KEY`` may hold 64 hex characters or a raw
    32-character string. When unset, a development key is derived from a
    fixed passphrase.

    Raises:
        ConfigurationError: If the configured key has the wrong length
    """
    raw = get_config(ENCRYPTION_KEY_ENV)
    if not raw:
        return hashlib.sha256(_DEV_KEY_PASSPHRASE.encode("utf-8")).digest()

    if len(raw) == 64:
        try:
            return bytes.fromhex(raw)
        except ValueError:
            pass

    key = raw.encode("utf-8")
    if len(key) != 32:
        raise ConfigurationError(
            f"{ENCRYPTION_KEY_ENV} must be 64 hex characters or a 32-byte string "
            f"(got {len(key)} bytes)"
        )
    return key


def get_credentials_db_path() -> str:
    """Path of the SQLite credential database."""
    return get_config(CREDENTIALS_DB_ENV, DEFAULT_CREDENTIALS_DB)


def configure_logging(level: Optional[str] = None) -> None:
    """Set the log level of the ``flowrun`` logger hierarchy.

    Args:
        level: Level name such as "DEBUG". Falls back to ``FLOWRUN_LOG_LEVEL``,
            then WARNING.
    """
    level_name = (level or get_config(LOG_LEVEL_ENV, "WARNING")).upper()
    logger = logging.getLogger("flowrun")
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
