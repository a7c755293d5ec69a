"""Configuration for the mtree parser and CLI.

All env-var reading is centralised here.  load_dotenv() runs at import time
so the class attrs below pick up values from a .env file if present.

Variables:
  MTREE_STRICT_DOTDOT: "true" makes ".." at the root an error
  MTREE_STRICT_DEVICE_FORMAT: "true" rejects unknown device formats
  MTREE_LOG_LEVEL: logging level name for the CLI (WARNING)
"""

import logging
import os

from dotenv import find_dotenv, load_dotenv

# Load .env on import.  Calling this multiple times is harmless.
load_dotenv(find_dotenv(usecwd=True))

_TRUE_VALUES = ("true", "1", "yes")


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean environment variable ("true", "1" or "yes" is True)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


class MTreeConfig:
    # ------------------------------------------------------------ Parsing
    STRICT_DOTDOT = env_flag("MTREE_STRICT_DOTDOT")
    STRICT_DEVICE_FORMAT = env_flag("MTREE_STRICT_DEVICE_FORMAT")

    # ------------------------------------------------------------ Logging
    LOG_LEVEL = os.getenv("MTREE_LOG_LEVEL", "WARNING").upper()

    @classmethod
    def reload(cls):
        """Re-read the environment (used after the environment changes)."""
        cls.STRICT_DOTDOT = env_flag("MTREE_STRICT_DOTDOT")
        cls.STRICT_DEVICE_FORMAT = env_flag("MTREE_STRICT_DEVICE_FORMAT")
        cls.LOG_LEVEL = os.getenv("MTREE_LOG_LEVEL", "WARNING").upper()

    # ------------------------------------------------------------ Validate
    @classmethod
    def validate(cls):
        """Fail fast if the configured log level is not a known level name."""
        if not isinstance(logging.getLevelName(cls.LOG_LEVEL), int):
            raise ValueError(
                f"Invalid MTREE_LOG_LEVEL: {cls.LOG_LEVEL!r} "
                "(expected DEBUG, INFO, WARNING, ERROR or CRITICAL)"
            )

    @classmethod
    def log_level(cls) -> int:
        """Return the configured log level as a logging constant."""
        cls.validate()
        return logging.getLevelName(cls.LOG_LEVEL)
