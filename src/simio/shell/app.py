"""Interactive shell: command loop with Rich console output."""

from __future__ import annotations

import readline  # noqa: F401  # pyright: ignore[reportUnusedImport]

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..core.bus import SimioBus
from .commands import ShellState, process_command


def render_message(state: ShellState) -> Panel:
    """Wrap the latest command output in a panel."""
    return Panel(escape(state.message), title="simio")


def run_script(state: ShellState, lines: list[str], console: Console) -> bool:
    """Run commands from a script, echoing each one.

    Blank lines and lines starting with '#' are skipped.

    Returns:
        False if the script issued ``quit``, True otherwise.
    """
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        console.print(f"[bold]simio>[/bold] {escape(line)}")
        should_continue = process_command(state, line)
        console.print(render_message(state))
        if not should_continue:
            return False
    return True


def run_shell(script: str | None = None, console: Console | None = None) -> None:
    """Run the simio shell.

    With a script path, the commands in the file are executed first;
    the interactive loop only starts if the script did not quit.

    Args:
        script: Optional path to a file of shell commands.
        console: Console for output (defaults to stdout).
    """
    console = console if console is not None else Console()
    state = ShellState(bus=SimioBus(console=console))

    try:
        if script is not None:
            with open(script) as f:
                if not run_script(state, f.readlines(), console):
                    return

        console.print(render_message(state))
        while True:
            try:
                cmd = input("simio> ")
            except (EOFError, KeyboardInterrupt):
                console.print("\nExiting.")
                break

            if not process_command(state, cmd):
                console.print("Exiting.")
                break

            console.print(render_message(state))
    finally:
        state.bus.close()
