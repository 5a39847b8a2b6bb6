"""Command-line entry point."""

from __future__ import annotations

import os
import signal
import socket
import sys
from collections.abc import Sequence

from pytraceroute.tracer import Tracer, TracerouteError

PROG = "pytraceroute"
VERSION = "1.0.0"


class _Terminated(Exception):
    """Raised from the SIGTERM handler to unwind the trace."""


def usage_text() -> str:
    """Return the short usage message."""
    return f"Usage: {PROG} <options> <destination>\nUse --help for more info\n"


def help_text() -> str:
    """Return the full help message."""
    return (
        f"Usage: {PROG} <options> <destination>\n"
        "Options:\n"
        "\t  -h, --help       Show this help message\n"
        "\t  -v, --version    Show version information\n"
    )


def parse_args(argv: Sequence[str]) -> str | None:
    """Handle informational options, or return the destination to trace.

    Returns None when help or version information was printed instead.
    """
    if not argv:
        raise ValueError("a destination is required")
    first = argv[0]
    if first in ("--help", "-h"):
        sys.stderr.write(help_text())
        return None
    if first in ("--version", "-v"):
        sys.stdout.write(f"{PROG} version {VERSION}\n")
        return None
    return first


def resolve_target(target: str) -> str:
    """Return the first IPv4 address of ``target`` as dotted text."""
    try:
        entries = socket.getaddrinfo(
            target, None, socket.AF_INET, socket.SOCK_RAW, 0, socket.AI_CANONNAME
        )
    except socket.gaierror as exc:
        raise TracerouteError(f"getaddrinfo: {target}: {exc.strerror}") from exc
    for family, _, _, _, address in entries:
        if family == socket.AF_INET:
            return address[0]
    raise TracerouteError("Invalid target IP or hostname.")


def _on_sigterm(signum, frame):
    raise _Terminated


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not 1 <= len(args) <= 2:
        sys.stderr.write(usage_text())
        return 0

    target = parse_args(args)
    if target is None:
        return 0

    if os.getuid() != 0:
        sys.stderr.write(
            f"{PROG}: This program must be run as root to enable SOCK_RAW creation.\n"
        )
        return 1

    previous = signal.signal(signal.SIGTERM, _on_sigterm)
    try:
        ip = resolve_target(target)
        with Tracer(ip) as tracer:
            tracer.run(target, sys.stdout)
    except TracerouteError as exc:
        sys.stderr.write(f"{PROG}: {exc}\n")
        return 1
    except (KeyboardInterrupt, _Terminated):
        sys.stdout.write("Exiting...\n")
        return 0
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
    return 0


if __name__ == "__main__":
    sys.exit(main())