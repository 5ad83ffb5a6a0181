"""Command-line interface for the simio device shell and reference peer."""

import argparse
import sys

import zmq
from rich.console import Console

from .peer import echo, invert, run_peer, scripted
from .transport.channel import DEFAULT_CHANNEL, default_endpoint


def _parse_hex_bytes(value: str) -> bytes:
    """Parse a --reply HEX argument such as "5a,ff" or "5aff".

    Raises:
        argparse.ArgumentTypeError: If the text is not valid hex.
    """
    try:
        data = bytes.fromhex(value.replace(",", " "))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid hex bytes '{value}'"
        ) from None
    if not data:
        raise argparse.ArgumentTypeError("expected at least one reply byte")
    return data


def main() -> None:
    """Entry point for the simio CLI."""
    parser = argparse.ArgumentParser(description="Simulated IO device shell")
    sub = parser.add_subparsers(dest="command")

    shell_parser = sub.add_parser("shell", help="Run the interactive device shell")
    shell_parser.add_argument(
        "--script", metavar="FILE",
        help="Run commands from FILE before the interactive prompt",
    )

    peer_parser = sub.add_parser("peer", help="Run a reference SPI peer")
    peer_parser.add_argument(
        "endpoint", nargs="?", default=default_endpoint(DEFAULT_CHANNEL),
        help="ZeroMQ endpoint to bind (default: %(default)s)",
    )
    peer_parser.add_argument(
        "--mode", choices=("echo", "invert"), default="echo",
        help="How to answer each byte (default: echo)",
    )
    peer_parser.add_argument(
        "--reply", type=_parse_hex_bytes, metavar="HEX",
        help="Answer with these bytes in turn, overriding --mode",
    )
    peer_parser.add_argument(
        "--count", type=int, default=None,
        help="Exit after this many exchanges",
    )

    args = parser.parse_args()

    if args.command == "shell":
        from .shell.app import run_shell
        run_shell(args.script)
    elif args.command == "peer":
        if args.reply is not None:
            responder = scripted(args.reply)
        else:
            responder = invert if args.mode == "invert" else echo
        console = Console(file=sys.stderr)
        try:
            served = run_peer(args.endpoint, responder, args.count, console)
        except (zmq.ZMQError, ValueError) as e:
            print(f"Error: cannot serve on '{args.endpoint}': {e}", file=sys.stderr)
            sys.exit(1)
        except KeyboardInterrupt:
            sys.exit(0)
        print(f"Served {served} exchanges.", file=sys.stderr)
    else:
        parser.print_help()
        sys.exit(1)
