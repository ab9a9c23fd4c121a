"""Progress indication for endpoint collection using the Rich library.

In interactive terminals a Rich progress bar tracks how many endpoints have
finished. In non-interactive terminals (cron, CI, redirected output) each
completion is logged instead.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

if TYPE_CHECKING:
    from logging import Logger

AdvanceFunc = Callable[[Optional[str]], None]


def is_interactive_terminal() -> bool:
    """Detect if running in an interactive terminal.

    Returns:
        True if output is to an interactive terminal, False otherwise.
    """
    console = Console()
    return console.is_terminal


@contextmanager
def completion_progress(
    description: str,
    total: int,
    logger: Optional["Logger"] = None,
    transient: bool = True,
) -> Iterator[AdvanceFunc]:
    """Context manager tracking completed endpoints.

    Args:
        description: Text shown next to the progress bar.
        total: Number of completions expected.
        logger: Logger used in non-interactive mode. If None, nothing is
            reported in non-interactive mode.
        transient: If True, the bar is cleared when the context exits.

    Yields:
        advance(name=None): marks one more completion; name identifies the
        endpoint that finished.

    Example:
        >>> with completion_progress("Collecting", total=3) as advance:
        ...     for name in ("vc01", "vc02", "vc03"):
        ...         advance(name)
    """
    if total <= 0 or not is_interactive_terminal():
        completed = 0

        def advance_noninteractive(name: Optional[str] = None) -> None:
            nonlocal completed
            completed += 1
            if logger is not None:
                suffix = f" ({name})" if name else ""
                logger.status(f"{description}: {completed}/{total} endpoints finished{suffix}")

        yield advance_noninteractive
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        transient=transient,
    )
    task_id: TaskID = TaskID(0)

    try:
        progress.start()
        task_id = progress.add_task(description, total=total)

        def advance_interactive(name: Optional[str] = None) -> None:
            if name:
                progress.update(task_id, advance=1, description=f"{description} ({name})")
            else:
                progress.update(task_id, advance=1)

        yield advance_interactive
    finally:
        progress.stop()


__all__ = [
    "is_interactive_terminal",
    "completion_progress",
]
