"""Shell command processing: device management and bus access commands."""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from ..core.bus import SimioBus
from ..core.device import HANDLED
from ..core.expr import ExprError, expr_eval
from ..core.registry import device_classes
from ..core.sfr import SFR_NAMES
from ..transport.channel import TransportError

# Names usable in address/value expressions
SYMBOLS: dict[str, int] = {name: i for i, name in enumerate(SFR_NAMES)}


@dataclass
class ShellState:
    """Mutable state for a shell session: the bus and the last message."""

    bus: SimioBus
    message: str = "Ready. Type 'help' for a list of commands."


HELP_TEXT = (
    "classes                          -- list device classes\n"
    "add <class> <name> [args...]     -- attach a new device\n"
    "del <name>                       -- detach a device\n"
    "devices                          -- list attached devices\n"
    "config <name> <param> [args...]  -- configure a device\n"
    "info <name>                      -- show device state\n"
    "reset                            -- reset SFRs and all devices\n"
    "mw <addr> <byte>                 -- write a byte on the bus\n"
    "md <addr>                        -- read a byte from the bus\n"
    "sfr                              -- show interrupt registers\n"
    "h, help                          -- show this help\n"
    "q, quit                          -- exit"
)


def _eval(state: ShellState, text: str, what: str) -> int | None:
    try:
        return expr_eval(text, SYMBOLS)
    except ExprError as e:
        state.message = f"Invalid {what}: {text} ({e})"
        return None


def _cmd_classes(state: ShellState) -> None:
    lines = []
    for device_class in device_classes():
        lines.append(f"{device_class.name}:")
        lines.extend(f"    {line}" for line in device_class.help.splitlines())
    state.message = "\n".join(lines) if lines else "No device classes."


def _cmd_devices(state: ShellState) -> None:
    names = list(state.bus.devices)
    state.message = "\n".join(names) if names else "No devices attached."


def _cmd_sfr(state: ShellState) -> None:
    sfr = state.bus.sfr
    state.message = "  ".join(
        f"{name}=0x{sfr.get(i):02x}" for i, name in enumerate(SFR_NAMES)
    )


def _cmd_mw(state: ShellState, args: list[str]) -> None:
    if len(args) < 2:
        state.message = "Usage: mw <addr> <byte>"
        return
    addr = _eval(state, args[0], "address")
    if addr is None:
        return
    value = _eval(state, args[1], "value")
    if value is None:
        return
    try:
        state.bus.write_b(addr, value & 0xFF)
    except TransportError as e:
        state.message = f"Transport error: {e}"
        return
    state.message = f"Wrote 0x{value & 0xFF:02x} to 0x{addr:04x}"


def _cmd_md(state: ShellState, args: list[str]) -> None:
    if len(args) < 1:
        state.message = "Usage: md <addr>"
        return
    addr = _eval(state, args[0], "address")
    if addr is None:
        return
    try:
        code, value = state.bus.read_b(addr)
    except TransportError as e:
        state.message = f"Transport error: {e}"
        return
    if code == HANDLED:
        state.message = f"0x{addr:04x}: 0x{value:02x}"
    else:
        state.message = f"0x{addr:04x}: not mapped"


def process_command(state: ShellState, cmd: str) -> bool:
    """Parse and execute a shell command.

    Device command errors are printed by the bus on its console; the
    state message only records the outcome.

    Args:
        state: The current shell state (modified in place).
        cmd: The raw command line.

    Returns:
        True to continue the shell loop, False to quit.
    """
    try:
        parts = shlex.split(cmd)
    except ValueError as e:
        state.message = f"Parse error: {e}"
        return True
    if not parts:
        state.message = HELP_TEXT
        return True

    verb = parts[0].lower()
    args = parts[1:]

    if verb == "classes":
        _cmd_classes(state)

    elif verb == "add":
        if len(args) < 2:
            state.message = "Usage: add <class> <name> [args...]"
            return True
        ok = state.bus.add(args[0], args[1], args[2:])
        state.message = f"Added {args[1]}" if ok else f"Failed to add {args[1]}"

    elif verb == "del":
        if len(args) < 1:
            state.message = "Usage: del <name>"
            return True
        ok = state.bus.remove(args[0])
        state.message = f"Removed {args[0]}" if ok else f"Failed to remove {args[0]}"

    elif verb == "devices":
        _cmd_devices(state)

    elif verb == "config":
        if len(args) < 2:
            state.message = "Usage: config <name> <param> [args...]"
            return True
        ok = state.bus.config(args[0], args[1], args[2:])
        state.message = (
            f"Configured {args[0]}.{args[1]}" if ok
            else f"Failed to configure {args[0]}.{args[1]}"
        )

    elif verb == "info":
        if len(args) < 1:
            state.message = "Usage: info <name>"
            return True
        report = state.bus.info(args[0])
        state.message = report if report is not None else f"No such device: {args[0]}"

    elif verb == "reset":
        state.bus.reset()
        state.message = "Reset SFRs and all devices."

    elif verb == "mw":
        _cmd_mw(state, args)

    elif verb == "md":
        _cmd_md(state, args)

    elif verb == "sfr":
        _cmd_sfr(state)

    elif verb in ("h", "help"):
        state.message = HELP_TEXT

    elif verb in ("q", "quit"):
        return False

    else:
        state.message = f"Unknown command: {verb}\n\n{HELP_TEXT}"

    return True
