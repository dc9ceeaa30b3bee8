"""Console rendering helpers for the provisioner CLI."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import BatchOutcome, BatchResult, FileMetadata, FolderTreeSpec, RemoteFolder


console = Console()
err_console = Console(stderr=True)

_OUTCOME_STYLES = {
    BatchOutcome.ALL_SUCCEEDED: "bold green",
    BatchOutcome.PARTIAL_SUCCESS: "bold yellow",
    BatchOutcome.ALL_FAILED: "bold red",
}


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    console.print(
        Panel(
            table,
            title="[bold green]drive-provision[/bold green]",
            subtitle="[dim]provisioner CLI[/dim]",
            border_style="blue",
        )
    )


def render_error(message: str) -> None:
    err_console.print(f"[bold red]ERROR:[/bold red] {message}", highlight=False)


def render_folder(folder_id: str, name: str, parent_id: Optional[str] = None) -> None:
    line = f"[bold]{name}[/bold] -> [cyan]{folder_id}[/cyan]"
    if parent_id:
        line += f" [dim](parent {parent_id})[/dim]"
    console.print(line)


def render_tree(spec: FolderTreeSpec, root_id: str, created: Sequence[Tuple[str, RemoteFolder]]) -> None:
    """Render every resolved tree node with its id."""
    table = Table(title=f"Folder tree '{spec.name}' ({spec.count()} folders)")
    table.add_column("Path", style="bold")
    table.add_column("Folder ID", style="cyan")
    table.add_column("Parent ID", style="dim")
    for path, folder in created:
        table.add_row(path, folder.id, folder.parent_id)
    console.print(table)
    console.print(f"Root: [cyan]{root_id}[/cyan]")


def render_batch_result(result: BatchResult) -> None:
    """Render a batch summary plus one row per uploaded or failed file."""
    style = _OUTCOME_STYLES.get(result.outcome, "bold")
    console.print(f"[{style}]{result.message}[/{style}] ({result.outcome.value})")

    if result.succeeded:
        table = Table(title="Uploaded")
        table.add_column("File", style="bold")
        table.add_column("ID", style="cyan")
        table.add_column("Folder")
        table.add_column("Link", style="dim", overflow="fold")
        for summary in result.succeeded:
            table.add_row(
                summary.name,
                summary.id,
                summary.folder_name or summary.folder_id or "-",
                summary.view_link or "-",
            )
        console.print(table)

    if result.failed:
        table = Table(title="Failed")
        table.add_column("File", style="bold")
        table.add_column("Error", style="red")
        for failure in result.failed:
            table.add_row(failure.source_name, failure.error_message)
        console.print(table)

    for failure in result.permission_failures:
        console.print(
            f"[yellow]Public access not granted[/yellow] for {failure.source_name}: "
            f"{failure.error_message}"
        )


def render_metadata(metadata: FileMetadata) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")
    for key, value in metadata.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(key, "-" if value is None else str(value))
    kind = "folder" if metadata.is_folder else "file"
    console.print(Panel(table, title=f"[bold]{metadata.name}[/bold] [dim]({kind})[/dim]", border_style="blue"))
