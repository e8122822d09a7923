"""Exceptions raised by the genesis builder.

Every failure that must abort a migration run derives from
``GenesisBuilderError`` so the CLI can report it and exit non-zero.
"""

from pathlib import Path


class GenesisBuilderError(Exception):
    """Base class for fatal migration errors."""


class InputReadError(GenesisBuilderError):
    """A snapshot file is missing, unreadable or does not match its schema."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to read {self.path}: {reason}")


class OutputWriteError(GenesisBuilderError):
    """A document could not be persisted."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to write {self.path}: {reason}")


class IntegrityError(GenesisBuilderError):
    """The snapshot violates an invariant the migration cannot paper over."""


__all__ = [
    "GenesisBuilderError",
    "InputReadError",
    "IntegrityError",
    "OutputWriteError",
]
