"""
reg-inspector Command Line Interface

Main entry point for the reg-inspector CLI.

Examples:
    reg-inspector add-key HKEY_LOCAL_MACHINE SOFTWARE\\TEST
    reg-inspector add-value HKEY_LOCAL_MACHINE SOFTWARE\\TEST TEST REG_SZ TEST
    reg-inspector view-flags HKEY_LOCAL_MACHINE SOFTWARE\\TEST
    reg-inspector search-key HKEY_LOCAL_MACHINE SOFTWARE TEST
    reg-inspector notify HKEY_LOCAL_MACHINE SOFTWARE
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import click
from rich.console import Console
from rich.markup import escape

from reg_inspector import commands
from reg_inspector.config import Settings, load_settings
from reg_inspector.exceptions import RegInspectorError, get_error_code
from reg_inspector.logging_config import get_logger, setup_logging
from reg_inspector.store import MemoryStore, NodeStore, open_store

console = Console(soft_wrap=True)
logger = get_logger("cli")

FAIL_MESSAGE = "Error!"
SUCCESS_MESSAGE = "Ok!"


class CommandGroup(click.Group):
    """Group that also accepts the upper-case command names (ADD_KEY, ...)."""

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        command = super().get_command(ctx, cmd_name)
        if command is None:
            command = super().get_command(ctx, cmd_name.lower().replace("_", "-"))
        return command


class CliState:
    """Per-invocation state shared by commands."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._store: Optional[NodeStore] = None

    @property
    def snapshot(self) -> Optional[Path]:
        return Path(self.settings.store_file) if self.settings.store_file else None

    @property
    def store(self) -> NodeStore:
        if self._store is None:
            self._store = open_store(self.snapshot)
        return self._store

    def persist(self) -> None:
        """Write snapshot stores back after a change."""
        if isinstance(self._store, MemoryStore) and self.snapshot:
            self._store.save(self.snapshot)


def _report_error(error: RegInspectorError, on_error: Optional[str] = None) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    if on_error:
        console.print(on_error)
    console.print(f"[red]{FAIL_MESSAGE}[/red]")
    sys.exit(get_error_code(error))


def _run(action: Callable[[], commands.CommandResult], on_error: Optional[str] = None) -> None:
    """Run a command and render its result."""
    try:
        result = action()
    except RegInspectorError as e:
        logger.debug("Command failed", exc_info=True)
        _report_error(e, on_error)
        return

    if result.title:
        console.print(escape(result.title))
    for line in result.lines:
        console.print(escape(line))
    if result.message:
        console.print(f"[dim]{escape(result.message)}[/dim]")

    if result.success:
        console.print(f"[green]{SUCCESS_MESSAGE}[/green]")
    else:
        console.print(f"[red]{FAIL_MESSAGE}[/red]")
        sys.exit(1)


@click.group(cls=CommandGroup)
@click.version_option(package_name="reg-inspector")
@click.option("--store-file", type=click.Path(), help="YAML registry snapshot to use instead of the live registry")
@click.option("--config", "config_path", type=click.Path(), help="Config file (default: ~/.reg-inspector/config.yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, store_file: Optional[str], config_path: Optional[str], verbose: bool):
    """reg-inspector: create, search and watch registry keys"""
    setup_logging(logging.DEBUG if verbose else None)
    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except RegInspectorError as e:
        _report_error(e)
        return
    if store_file:
        settings.store_file = store_file
    ctx.obj = CliState(settings)


@main.command("add-key")
@click.argument("hive")
@click.argument("path")
@click.pass_obj
def add_key(state: CliState, hive: str, path: str):
    """Create key PATH under HIVE."""
    def action():
        result = commands.add_key(state.store, hive, path)
        if result.success:
            state.persist()
        return result
    _run(action)


@main.command("add-value")
@click.argument("hive")
@click.argument("path")
@click.argument("name")
@click.argument("value_type", metavar="TYPE")
@click.argument("data")
@click.pass_obj
def add_value(state: CliState, hive: str, path: str, name: str, value_type: str, data: str):
    """Set value NAME of TYPE (REG_SZ, REG_BINARY, REG_DWORD, REG_LINK) on a key."""
    def action():
        result = commands.add_value(state.store, hive, path, name, value_type, data)
        state.persist()
        return result
    _run(action)


@main.command("view-flags")
@click.argument("hive")
@click.argument("path")
@click.pass_obj
def view_flags(state: CliState, hive: str, path: str):
    """Show the virtualization flags of a key (runs REG FLAGS ... QUERY)."""
    _run(lambda: commands.view_flags(hive, path, state.settings))


@main.command("search-key")
@click.argument("hive")
@click.argument("path")
@click.argument("term")
@click.pass_obj
def search_key(state: CliState, hive: str, path: str, term: str):
    """Find keys under HIVE\\PATH whose path matches TERM."""
    _run(
        lambda: commands.search_key(state.store, hive, path, term, state.settings),
        on_error="No keys found!",
    )


@main.command()
@click.argument("hive")
@click.argument("path")
@click.option("--no-subtree", is_flag=True, help="Only watch the key itself, not its subkeys")
@click.option("--timeout", type=float, help="Seconds to wait for a change (default: forever)")
@click.pass_obj
def notify(state: CliState, hive: str, path: str, no_subtree: bool, timeout: Optional[float]):
    """Wait for a change to a key or its subkeys."""
    _run(lambda: commands.notify(state.store, hive, path, not no_subtree, timeout))


if __name__ == "__main__":
    main()
