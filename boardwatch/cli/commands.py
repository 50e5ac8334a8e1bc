"""CLI commands for boardwatch."""

import asyncio
import json
import os
import signal
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from boardwatch import __logo__, __version__

app = typer.Typer(
    name="boardwatch",
    help=f"{__logo__} boardwatch - identify boards attached to this host",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} boardwatch v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """boardwatch - identify boards attached to this host."""
    pass


def _set_logging(logs: bool) -> None:
    if logs:
        logger.enable("boardwatch")
    else:
        logger.disable("boardwatch")


def _load(config: Path | None):
    from boardwatch.config.loader import get_config_path, load_config

    config_path = (config or get_config_path()).expanduser()
    if config is not None and not config_path.exists():
        console.print(f"[red]Config file not found:[/red] {config_path}")
        raise typer.Exit(2)
    return load_config(config_path)


# ============================================================================
# Config Commands
# ============================================================================

config_app = typer.Typer(help="Manage boardwatch config")
app.add_typer(config_app, name="config")


@config_app.command("check")
def config_check(
    config: Path | None = typer.Option(None, "--config", help="Config path to validate"),
):
    """Validate config JSON structure and schema."""
    from boardwatch.config.loader import convert_keys, get_config_path
    from boardwatch.config.schema import Config

    config_path = (config or get_config_path()).expanduser()
    if not config_path.exists():
        console.print(f"[red]Config file not found:[/red] {config_path}")
        raise typer.Exit(2)

    try:
        with config_path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON:[/red] {exc}")
        raise typer.Exit(2) from exc

    try:
        cfg = Config.model_validate(convert_keys(raw))
    except Exception as exc:
        console.print(f"[red]Schema validation failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    console.print("[green]✓[/green] Config validation passed")
    console.print(f"path={config_path}")
    console.print(f"lookup={cfg.lookup.base_url} timeout={cfg.lookup.timeout_seconds}s")
    console.print(f"discovery={','.join(cfg.discovery.backends) or 'none'}")
    console.print(f"platforms={cfg.platforms.database_path}")


# ============================================================================
# Board Commands
# ============================================================================

board_app = typer.Typer(help="List and watch connected boards")
app.add_typer(board_app, name="board")


@board_app.command("list")
def board_list(
    timeout: int | None = typer.Option(
        None, "--timeout", "-t", help="Milliseconds to wait for discovery before listing"
    ),
    config: Path | None = typer.Option(None, "--config", help="Config path"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """List ports and the boards identified on them."""
    from boardwatch.api import BoardListRequest, list_boards
    from boardwatch.errors import BoardWatchError
    from boardwatch.instance import InstanceRegistry, create_instance

    cfg = _load(config)
    _set_logging(logs)
    timeout_ms = cfg.board_list.default_timeout_ms if timeout is None else timeout

    async def run():
        registry = InstanceRegistry()
        instance_id = registry.create(create_instance(cfg))
        try:
            return await list_boards(registry, BoardListRequest(instance_id, timeout_ms))
        finally:
            await registry.destroy(instance_id)

    try:
        ports, start_errors = asyncio.run(run())
    except (BoardWatchError, ValueError, OSError) as e:
        for err in getattr(e, "discovery_errors", []):
            console.print(f"[yellow]{err}[/yellow]")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    for err in start_errors:
        console.print(f"[yellow]{err}[/yellow]")

    if as_json:
        console.print_json(json.dumps([p.to_dict() for p in ports]))
        return

    if not ports:
        console.print("No boards found.")
        return

    table = Table(title="Detected ports")
    table.add_column("Port", style="cyan")
    table.add_column("Protocol")
    table.add_column("Board name", style="green")
    table.add_column("FQBN")
    for detected in ports:
        port = detected.port
        if not detected.matching_boards:
            table.add_row(port.address, port.protocol_label or port.protocol, "Unknown", "")
            continue
        for board in detected.matching_boards:
            table.add_row(port.address, port.protocol_label or port.protocol, board.name, board.fqbn)
    console.print(table)


@board_app.command("watch")
def board_watch(
    config: Path | None = typer.Option(None, "--config", help="Config path"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show runtime logs"),
):
    """Print board connection and disconnection events as JSON lines."""
    from boardwatch.api import BoardListWatchRequest, watch_boards
    from boardwatch.errors import BoardWatchError
    from boardwatch.instance import InstanceRegistry, create_instance

    cfg = _load(config)
    _set_logging(logs)

    async def run() -> None:
        registry = InstanceRegistry()
        instance_id = registry.create(create_instance(cfg))
        try:
            stream, cancel = await watch_boards(registry, BoardListWatchRequest(instance_id))
            if os.name != "nt":
                loop = asyncio.get_running_loop()
                loop.add_signal_handler(signal.SIGINT, cancel)
                loop.add_signal_handler(signal.SIGTERM, cancel)
            async for event in stream:
                console.print(json.dumps(event.to_dict()), soft_wrap=True)
        finally:
            await registry.destroy(instance_id)

    try:
        asyncio.run(run())
    except (BoardWatchError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
