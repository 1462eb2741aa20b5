"""Command-line interface for inspecting session files."""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from edbsession import __version__

if TYPE_CHECKING:
    from edbsession.document import SessionDocument

console = Console()
err_console = Console(stderr=True)


def _read_document(path: str) -> "SessionDocument":
    """Parse a session file, exiting with status 1 on error."""
    from edbsession.document import SessionDocument
    from edbsession.errors import SessionError

    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[red]Failed to open session file. {e}[/red]")
        sys.exit(1)

    try:
        return SessionDocument.from_json(text)
    except SessionError as e:
        err_console.print(f"[red]{e.kind.name}: {e.message}[/red]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """edbsession - debugger session file tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("session", type=click.Path(exists=True))
def info(session: str) -> None:
    """Display session file header and contents summary."""
    doc = _read_document(session)

    console.print(Panel.fit(f"[bold]{Path(session).name}[/bold]", title="Session Info"))

    counts: dict[str, int] = {}
    for record in doc.objects.values():
        if isinstance(record, dict):
            type_name = str(record.get("type", "?"))
            counts[type_name] = counts.get(type_name, 0) + 1

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Id", doc.format_id)
    table.add_row("Version", str(doc.version))
    table.add_row("Timestamp", doc.timestamp or "N/A")
    table.add_row("Objects", str(len(doc.objects)))
    for type_name in sorted(counts):
        table.add_row(f"  {type_name}", str(counts[type_name]))
    table.add_row("Plugins", ", ".join(sorted(doc.plugin_data)) or "none")

    console.print(table)


@main.command()
@click.argument("session", type=click.Path(exists=True))
@click.option("-t", "--type", "type_name", help="Only show this object type")
def objects(session: str, type_name: str | None) -> None:
    """List saved comments and labels."""
    doc = _read_document(session)

    table = Table(title="Objects")
    table.add_column("Offset", style="green")
    table.add_column("Type", style="cyan")
    table.add_column("Module")
    table.add_column("Text")

    shown = 0
    for key in sorted(doc.objects):
        record = doc.objects[key]
        if not isinstance(record, dict):
            continue
        record_type = str(record.get("type", ""))
        if type_name and record_type != type_name:
            continue
        table.add_row(
            key,
            record_type,
            str(record.get("module", "")),
            str(record.get(record_type, "")),
        )
        shown += 1

    console.print(table)
    console.print(f"\nTotal: {shown} objects")


@main.command()
@click.argument("session", type=click.Path(exists=True))
def check(session: str) -> None:
    """Validate a session file."""
    doc = _read_document(session)
    console.print(
        f"[green]OK[/green] {session} (version {doc.version}, {len(doc.objects)} objects)"
    )


if __name__ == "__main__":
    main()
