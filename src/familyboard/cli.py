"""Typer-based CLI for Family Board."""

import json
import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .bridge import BoardBridge
from .config import BoardConfig
from .device import device_identity
from .history import GitHistoryBackend
from .ledger import LedgerWriter, read_ledger_tail
from .models.artifact import Artifact, ArtifactKind
from .models.sync import SyncOutcome
from .paths import BoardPaths
from .store import ArtifactStore
from .sync import SyncPoller

app = typer.Typer(
    name="familyboard",
    help="Family Board - a shared household message board synced with git",
    add_completion=False,
)

console = Console()

HOME_HELP = "Board home directory (default: FAMILYBOARD_HOME env or ~/Desktop/FamilyHomepage)"


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Family Board command line."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config(home: str | None) -> BoardConfig:
    try:
        return BoardConfig.from_env(cli_home=home)
    except ValueError as e:
        console.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)


def _open_board(config: BoardConfig) -> tuple[BoardPaths, BoardBridge, SyncPoller]:
    """Wire store, poller and bridge for one board home."""
    paths = BoardPaths.from_config(config)
    ledger_writer = LedgerWriter(paths.ledger_file)
    backend = GitHistoryBackend(
        paths.notes,
        git_binary=config.git_binary,
        remote=config.remote_name,
        default_branch=config.remote_branches[0] if config.remote_branches else "main",
        timeout=config.git_timeout_seconds,
    )
    store = ArtifactStore(
        paths.notes,
        backend,
        ledger_writer=ledger_writer,
        lfs_patterns=config.lfs_patterns,
        auto_push=config.auto_push,
    )
    store.ensure_initialized()
    poller = SyncPoller(
        backend,
        remote_branches=config.remote_branches,
        interval_seconds=config.poll_interval_seconds,
        ledger_writer=ledger_writer,
        attention=console.bell,
    )
    bridge = BoardBridge(store, device_identity(override=config.device_name), poller=poller)
    return paths, bridge, poller


def _describe(artifact: Artifact, full: bool = False) -> str:
    if artifact.kind is ArtifactKind.NOTE:
        text = artifact.content or artifact.name
        if not full and len(text) > 60:
            text = text[:57] + "..."
        return text
    return str(artifact.path)


def _print_artifacts(artifacts: list[Artifact], title: str, full: bool = False) -> None:
    if not artifacts:
        console.print("[dim]No notes yet. Start creating some![/dim]")
        return

    table = Table(title=title)
    table.add_column("Updated (UTC)", style="cyan", no_wrap=True)
    table.add_column("Kind", style="magenta")
    table.add_column("Size", style="yellow", justify="right")
    table.add_column("Content", overflow="fold")

    for artifact in artifacts:
        table.add_row(
            artifact.updated.strftime("%Y-%m-%d %H:%M:%S"),
            artifact.kind.value,
            str(artifact.size_bytes),
            _describe(artifact, full=full),
        )

    console.print(table)


@app.command()
def init(
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Create the artifact store and its git repository if missing.

    This command is idempotent - an existing store is left untouched.
    """
    config = _load_config(home)
    paths = BoardPaths.from_config(config)

    existed = paths.notes.exists()
    _open_board(config)

    if existed:
        console.print(f"[yellow]Board already exists at:[/yellow] {paths.notes}")
    else:
        console.print(f"[green]Initialized new board at:[/green] {paths.notes}")
    console.print(f"[dim]Ledger:[/dim] {paths.ledger_file}")


@app.command()
def note(
    text: str = typer.Argument(..., help="Message text"),
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Post a text note to the board."""
    _, bridge, _ = _open_board(_load_config(home))

    result = bridge.send_text(text)
    if result is None:
        console.print("[red]Error: Note text is empty[/red]")
        raise typer.Exit(code=1)
    if not result.success:
        console.print(f"[red]Failed to save note: {result.error}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]Note posted[/green]")


@app.command()
def attach(
    file: Path = typer.Argument(..., help="Image, audio or video file to post"),
    kind: str = typer.Option(
        None,
        "--kind",
        "-k",
        help="Media kind: 'image', 'audio' or 'video' (default: inferred from extension)",
    ),
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Post a media file to the board."""
    media_kind = None
    if kind:
        valid_kinds = [k.value for k in ArtifactKind if k is not ArtifactKind.NOTE]
        if kind not in valid_kinds:
            console.print(f"[red]Error: Invalid kind '{kind}'. Must be one of: {', '.join(valid_kinds)}[/red]")
            raise typer.Exit(code=1)
        media_kind = ArtifactKind(kind)

    if not file.is_file():
        console.print(f"[red]Error: File not found: {file}[/red]")
        raise typer.Exit(code=1)

    _, bridge, _ = _open_board(_load_config(home))

    result = bridge.send_media_file(file, kind=media_kind)
    if not result.success:
        console.print(f"[red]Failed to save: {result.error}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]Media posted:[/green]")
    console.print(f"  {result.path}")


@app.command("list")
def list_board(
    full: bool = typer.Option(False, "--full", help="Show full note text"),
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Show every artifact on the board, oldest first."""
    _, bridge, _ = _open_board(_load_config(home))

    result = bridge.load_artifacts()
    _print_artifacts(result.artifacts, title="Family Board", full=full)


@app.command()
def sync(
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Run a single sync cycle against the remote."""
    _, _, poller = _open_board(_load_config(home))

    poller.initialize()
    result = poller.run_cycle()

    if not result.fetch_ok:
        console.print("[dim]Remote not reachable (expected if no remote is configured)[/dim]")

    if result.outcome is SyncOutcome.PULLED:
        console.print(f"[green]Pulled new messages[/green] ({result.pointer_after[:8]})")
    elif result.outcome is SyncOutcome.PULL_FAILED:
        console.print("[yellow]New messages found but pull failed; will retry next time[/yellow]")
    else:
        console.print("[dim]Already up to date[/dim]")


@app.command()
def watch(
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between sync checks (default: from config, 60)",
    ),
):
    """Keep the board in sync and announce new messages until Ctrl-C."""
    config = _load_config(home)
    if interval is not None:
        if interval <= 0:
            console.print("[red]Error: --interval must be positive[/red]")
            raise typer.Exit(code=1)
        config.poll_interval_seconds = interval

    _, bridge, poller = _open_board(config)

    seen = {a.filename for a in bridge.load_artifacts().artifacts}

    def _on_new_messages() -> None:
        artifacts = bridge.load_artifacts().artifacts
        fresh = [a for a in artifacts if a.filename not in seen]
        if not fresh:
            return
        seen.update(a.filename for a in fresh)
        console.print("[bold green]New messages![/bold green]")
        _print_artifacts(fresh, title="New on the board")

    bridge.subscribe(_on_new_messages)

    console.print(
        f"[dim]Watching {config.home_path} as {bridge.device_name} "
        f"(every {config.poll_interval_seconds:g}s, Ctrl-C to stop)[/dim]"
    )
    poller.start()
    try:
        while poller.running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping...[/dim]")
    finally:
        poller.stop(timeout=5.0)


@app.command()
def device(
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Show the device identity used in media filenames."""
    config = _load_config(home)
    console.print(device_identity(override=config.device_name))


ledger_app = typer.Typer(help="Ledger commands")
app.add_typer(ledger_app, name="ledger")


@ledger_app.command("tail")
def ledger_tail(
    n: int = typer.Option(20, "--n", help="Number of recent events to display"),
    full: bool = typer.Option(False, "--full", help="Show full payloads with JSON pretty-print"),
    home: str = typer.Option(None, "--home", "-H", help=HOME_HELP),
):
    """Display the last N events from the ledger."""
    paths = BoardPaths.from_config(_load_config(home))

    tail = read_ledger_tail(paths.ledger_file, n=n)
    if tail.malformed:
        console.print(f"[yellow]Skipped {tail.malformed} malformed ledger line(s)[/yellow]")

    events = tail.events
    if not events:
        console.print("[dim]No events in ledger[/dim]")
        return

    if full:
        for i, event in enumerate(events, 1):
            console.print(f"[cyan]Event {i}/{len(events)}[/cyan]")
            console.print(f"  [dim]Timestamp:[/dim]  {event.ts.strftime('%Y-%m-%d %H:%M:%S')} UTC")
            console.print(f"  [dim]Event Type:[/dim] [magenta]{event.event_type}[/magenta]")
            console.print(f"  [dim]Artifact:[/dim]   {event.artifact or '-'}")
            for line in json.dumps(event.payload, indent=2).split("\n"):
                console.print(f"    {line}")
            console.print()
        return

    table = Table(title=f"Last {len(events)} Ledger Event(s)")
    table.add_column("Timestamp (UTC)", style="cyan", no_wrap=True)
    table.add_column("Event Type", style="magenta")
    table.add_column("Artifact", style="yellow")
    table.add_column("Payload", style="dim")

    for event in events:
        payload_str = str(event.payload)
        if len(payload_str) > 60:
            payload_str = payload_str[:57] + "..."
        table.add_row(event.ts.strftime("%Y-%m-%d %H:%M:%S"), event.event_type, event.artifact or "-", payload_str)

    console.print(table)


@app.command()
def version():
    """Show Family Board version."""
    from . import __version__
    console.print(f"Family Board v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
