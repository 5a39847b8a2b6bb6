"""Formatting of traceroute output lines."""

from __future__ import annotations

import socket
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pytraceroute.packets import MAX_TTL, PACKET_SIZE


@dataclass(frozen=True)
class HopResult:
    """The outcome of one probe: the answering address and round trip in ms."""

    ip: str | None = None
    rtt: float | None = None

    @property
    def timed_out(self) -> bool:
        return self.ip is None


def reverse_lookup(ip: str) -> str | None:
    """Return the host name for an IPv4 address, or None if it cannot be found."""
    try:
        socket.inet_pton(socket.AF_INET, ip)
    except OSError:
        return None
    try:
        host, _ = socket.getnameinfo((ip, 0), 0)
    except OSError:
        return None
    return host


def format_header(target: str, ip: str) -> str:
    """Return the opening line of a trace."""
    return (
        f"traceroute to {target} ({ip}), {MAX_TTL} hops max, "
        f"{PACKET_SIZE} byte packets\n"
    )


def format_hop(
    ttl: int,
    results: Sequence[HopResult],
    resolver: Callable[[str], str | None] = reverse_lookup,
) -> str:
    """Return the output line for one hop."""
    parts = [f"{ttl:2d}  "]
    has_valid = any(not r.timed_out for r in results)
    all_same = has_valid and all(r.ip == results[0].ip for r in results)

    if all_same:
        ip = results[0].ip
        parts.append(f"{resolver(ip) or ip} ({ip}) ")
        for r in results:
            if r.rtt is not None and r.rtt >= 0:
                parts.append(f"{r.rtt:.3f} ms ")
            else:
                parts.append("* ")
    else:
        for r in results:
            if r.timed_out:
                parts.append("* ")
            else:
                rtt = r.rtt if r.rtt is not None else -1.0
                parts.append(f"{resolver(r.ip) or r.ip} ({r.ip}) {rtt:.3f} ms ")

    parts.append("\n")
    return "".join(parts)