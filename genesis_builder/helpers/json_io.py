"""JSON document reading and writing."""

import json
import os
import tempfile
from pathlib import Path

from typing import Any

from pydantic import TypeAdapter, ValidationError

from genesis_builder.helpers.exceptions import InputReadError, OutputWriteError
from genesis_builder.helpers.logging import get_logger


# JSON value type - using Any for the recursive case
type JsonDocument = dict[str, Any] | list[Any]

logger = get_logger("json_io")


def load_typed[T](path: Path | str, schema: type[T] | Any) -> T:
    """Read a JSON file and validate it against a pydantic-compatible type.

    Args:
        path: File to read
        schema: Type accepted by ``TypeAdapter`` (e.g. ``list[LegacyAccount]``)

    Returns:
        The validated value

    Raises:
        InputReadError: If the file cannot be read or does not match the schema
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise InputReadError(path, e.strerror or str(e)) from e

    try:
        return TypeAdapter(schema).validate_json(raw)
    except ValidationError as e:
        # Keep the message short, snapshots contain hundreds of thousands of rows
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        reason = f"{e.error_count()} validation error(s), first at {location}: {first['msg']}"
        raise InputReadError(path, reason) from e


def write_json(path: Path | str, obj: JsonDocument, *, atomic: bool = False) -> Path:
    """Serialize ``obj`` as pretty-printed JSON, creating parent directories.

    Args:
        path: Destination file
        obj: JSON-serializable value
        atomic: Write to a temporary file first and rename it into place so a
            failed run never leaves a truncated document behind

    Returns:
        The written path

    Raises:
        OutputWriteError: If the directory or file cannot be written
    """
    path = Path(path)
    try:
        content = json.dumps(obj, indent=2)
    except (TypeError, ValueError) as e:
        raise OutputWriteError(path, f"not serializable: {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not atomic:
            path.write_text(content, encoding="utf-8")
        else:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e

    logger.info(f"Saved data to file: {path}")
    return path


__all__ = ["JsonDocument", "load_typed", "write_json"]
