"""Console rendering and progress helpers for the boodibox-post CLI."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import UploadStatusResult
from .utils.events import STATUS, SUBMITTED, UPLOAD_RETRY, UPLOADED

console = Console()

_STATUS_STYLES = {
    "PROCESSED": "green",
    "DELETED": "red",
    "ATTACHED": "yellow",
    "MISSING": "red",
}


def render_configuration_summary(rows: Dict[str, Any]) -> None:
    """Show what the post is about to be sent with."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("setting", style="bold cyan", no_wrap=True)
    table.add_column("value")
    for name, value in rows.items():
        table.add_row(name, "-" if value is None else str(value))

    console.print(Panel.fit(table, title="boodibox-post", border_style="cyan"))


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    if not value:
        return "(missing)"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


class PostProgressDisplay:
    """Prints client progress events as they happen."""

    def __init__(self):
        self._last_status: Dict[str, str] = {}

    def on_upload_retry(self, attempt: int, error: Exception, delay: float) -> None:
        console.print(
            f"[yellow]Upload attempt {attempt} failed:[/yellow] {error} "
            f"[dim](retrying in {delay:.1f}s)[/dim]"
        )

    def on_uploaded(self, upload_ids) -> None:
        console.print(f"[cyan]Uploaded {len(upload_ids)} file(s)[/cyan]")

    def on_status(self, upload_id: str, status: UploadStatusResult) -> None:
        value = status.status.value
        # Only print transitions
        if self._last_status.get(upload_id) == value:
            return
        self._last_status[upload_id] = value
        style = _STATUS_STYLES.get(value, "dim")
        console.print(f"  {upload_id}: [{style}]{value}[/{style}]")

    def on_submitted(self, post: Any) -> None:
        console.print("[bold green]Post submitted[/bold green]")

    def attach(self, client) -> "PostProgressDisplay":
        client.on(UPLOAD_RETRY, self.on_upload_retry)
        client.on(UPLOADED, self.on_uploaded)
        client.on(STATUS, self.on_status)
        client.on(SUBMITTED, self.on_submitted)
        return self


def render_post(post: Any) -> None:
    """Print the service's post representation."""
    console.print_json(json.dumps(post, default=str))


def render_error(error: Exception) -> None:
    console.print(f"[bold red]ERROR:[/bold red] {error}")
    body = getattr(error, "body", None)
    if body is not None:
        console.print_json(json.dumps(body, default=str))
