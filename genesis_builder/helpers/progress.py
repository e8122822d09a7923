"""Shared progress bar utilities for Rich console displays."""

from collections.abc import Iterable, Iterator, Sized
from contextlib import contextmanager

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)


def create_standard_progress(
    console: Console | None = None, *, expand: bool = False
) -> Progress:
    """Create a standard progress bar with time remaining estimation.

    Args:
        console: Rich console instance (optional)
        expand: Whether to expand the progress bar to full width

    Returns:
        Configured Progress instance with:
        - Spinner
        - Task description
        - Progress bar
        - M of N counter
        - Time elapsed
        - Time remaining
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        expand=expand,
    )


@contextmanager
def track_progress(
    description: str,
    total: int | None,
    console: Console | None = None,
) -> Iterator[tuple[Progress, TaskID]]:
    """Context manager for tracking progress with automatic cleanup.

    Args:
        description: Task description to display
        total: Total number of items to process (None if unknown)
        console: Rich console instance (optional)

    Yields:
        Tuple of (Progress instance, TaskID) for updating progress
    """
    progress = create_standard_progress(console)
    with progress:
        task_id = progress.add_task(description, total=total)
        yield progress, task_id


def track_items[T](
    items: Iterable[T],
    description: str,
    console: Console | None = None,
    *,
    total: int | None = None,
) -> Iterator[T]:
    """Yield ``items`` unchanged while advancing a progress bar.

    Lets a pure fold over the snapshot report progress without knowing about
    the console.

    Example:
        ```python
        from genesis_builder.helpers.progress import track_items

        for account in track_items(accounts, "Reconciling balances"):
            ...
        ```
    """
    if total is None and isinstance(items, Sized):
        total = len(items)
    with track_progress(description, total=total, console=console) as (
        progress,
        task_id,
    ):
        for item in items:
            yield item
            progress.update(task_id, advance=1)


__all__ = [
    "TaskID",
    "create_standard_progress",
    "track_items",
    "track_progress",
]
