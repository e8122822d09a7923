"""Configuration management and environment variable utilities."""

import os
from pathlib import Path

from dotenv import load_dotenv

from genesis_builder.helpers.constants import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_STATE_DIR,
    MIGRATION_HEIGHT,
)


# Load environment variables from .env file
load_dotenv()

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_migration_height(height: int | None = None) -> int:
    """Get the legacy block height the snapshot was taken at.

    Args:
        height: Optional height to use directly

    Returns:
        Migration block height

    Raises:
        ValueError: If GENESIS_MIGRATION_HEIGHT is not a non-negative integer

    Example:
        ```python
        from genesis_builder.helpers.config import get_migration_height

        # From GENESIS_MIGRATION_HEIGHT, falling back to the canonical height
        height = get_migration_height()
        ```
    """
    if height is not None:
        return height

    raw = get_optional_env("GENESIS_MIGRATION_HEIGHT")
    if not raw:
        return MIGRATION_HEIGHT

    if not raw.isdigit():
        msg = f"GENESIS_MIGRATION_HEIGHT must be a non-negative integer, got {raw!r}"
        raise ValueError(msg)
    return int(raw)


def get_state_dir(state_dir: str | None = None) -> Path:
    """Get the root directory holding the legacy snapshots.

    Args:
        state_dir: Optional directory to use directly

    Returns:
        Snapshot root directory (one sub-directory per migration height)
    """
    if state_dir:
        return Path(state_dir)
    return Path(get_optional_env("GENESIS_STATE_DIR") or DEFAULT_STATE_DIR)


def get_output_dir(output_dir: str | None = None) -> Path:
    """Get the directory the genesis documents are written to.

    Args:
        output_dir: Optional directory to use directly

    Returns:
        Output root directory
    """
    if output_dir:
        return Path(output_dir)
    return Path(get_optional_env("GENESIS_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR)


def get_log_level(log_level: str | None = None) -> str:
    """Get the log level from parameter or environment (default INFO)."""
    if log_level:
        return log_level.upper()
    return (get_optional_env("GENESIS_LOG_LEVEL") or "INFO").upper()


def get_strict_weights(*, strict: bool | None = None) -> bool:
    """Whether an active validator without a weight record aborts the build.

    Args:
        strict: Optional explicit value, overrides GENESIS_STRICT_WEIGHTS

    Returns:
        True if missing validator weights are fatal
    """
    if strict is not None:
        return strict
    raw = get_optional_env("GENESIS_STRICT_WEIGHTS", "")
    return (raw or "").strip().lower() in TRUTHY_VALUES


__all__ = [
    "get_log_level",
    "get_migration_height",
    "get_optional_env",
    "get_output_dir",
    "get_state_dir",
    "get_strict_weights",
]
