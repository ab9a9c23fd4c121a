"""Per-endpoint run summary rendered as a Rich table."""

from typing import Optional

from rich.console import Console
from rich.table import Table

from hoststats.coordinator import RunSummary
from hoststats.jobs import JobStatus


STATUS_STYLES = {
    JobStatus.SUCCEEDED: "green",
    JobStatus.FAILED: "bold red",
    JobStatus.CANCELLED: "yellow",
    JobStatus.PENDING: "dim",
}


def build_summary_table(summary: RunSummary) -> Table:
    """Build a table with one line per endpoint, in configuration order."""
    table = Table(title=f"Host statistics: {summary.output_path}")
    table.add_column("#", justify="right")
    table.add_column("Endpoint")
    table.add_column("Worker", justify="right")
    table.add_column("Status")
    table.add_column("Hosts", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Error", overflow="fold")

    for job in summary.jobs:
        style = STATUS_STYLES.get(job.status, "")
        table.add_row(
            str(job.index),
            job.name,
            "" if job.worker_id is None else str(job.worker_id),
            f"[{style}]{job.status.value}[/{style}]" if style else job.status.value,
            str(job.row_count),
            f"{job.duration_seconds:.1f}s",
            job.error or "",
        )

    table.caption = (
        f"{summary.succeeded_count}/{summary.endpoint_count} endpoints succeeded, "
        f"{summary.rows_written} rows written"
    )
    return table


def print_summary(summary: RunSummary, console: Optional[Console] = None) -> None:
    """Print the summary table to the console (stdout by default)."""
    console = console or Console()
    console.print(build_summary_table(summary))
