"""Raw-socket probing of the route to a host."""

from __future__ import annotations

import os
import select
import socket
import struct
import time
from typing import TextIO

from pytraceroute.packets import (
    MAX_TTL,
    PROBE_NUM,
    PROBE_TIMEOUT,
    ProbeInfo,
    ReplyKind,
    build_probe,
    parse_reply,
    probe_port,
)
from pytraceroute.report import HopResult, format_header, format_hop

_RECV_BUFFER = 512
_RECV_TIMEOUT = struct.pack("ll", 5, 0)


class TracerouteError(Exception):
    """Raised when the sockets needed for a trace cannot be set up or used."""


class Tracer:
    """Sends UDP probes with growing TTL and listens for ICMP answers."""

    def __init__(self, target_ip: str) -> None:
        self.target_ip = target_ip
        self._raw: socket.socket | None = None
        self._icmp: socket.socket | None = None

    def __enter__(self) -> Tracer:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        """Create the raw UDP sending socket and the ICMP listening socket."""
        if self._raw is not None:
            return
        try:
            raw = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_UDP)
        except OSError as exc:
            raise TracerouteError("raw socket creation failed") from exc
        try:
            icmp = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        except OSError as exc:
            raw.close()
            raise TracerouteError("ICMP socket creation failed") from exc

        steps = (
            (
                "setsockopt IP_HDRINCL failed",
                lambda: raw.setsockopt(socket.IPPROTO_IP, socket.IP_HDRINCL, 1),
            ),
            (
                "setsockopt TTL failed",
                lambda: raw.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, 1),
            ),
            (
                "setsockopt timeout failed",
                lambda: icmp.setsockopt(
                    socket.SOL_SOCKET, socket.SO_RCVTIMEO, _RECV_TIMEOUT
                ),
            ),
            ("ICMP socket bind failed", lambda: icmp.bind(("0.0.0.0", 0))),
        )
        for message, step in steps:
            try:
                step()
            except OSError as exc:
                raw.close()
                icmp.close()
                raise TracerouteError(message) from exc

        self._raw, self._icmp = raw, icmp

    def close(self) -> None:
        """Close both sockets; closing twice is harmless."""
        for sock in (self._raw, self._icmp):
            if sock is not None:
                sock.close()
        self._raw = self._icmp = None

    def _require_open(self) -> tuple[socket.socket, socket.socket]:
        if self._raw is None or self._icmp is None:
            raise TracerouteError("sockets are not open")
        return self._raw, self._icmp

    def send_probe(self, ttl: int) -> ProbeInfo:
        """Send one probe with ``ttl`` and return what is needed to match its reply.

        Raises OSError when the datagram cannot be sent.
        """
        raw, _ = self._require_open()
        now = time.time()
        packet = build_probe(ttl, self.target_ip, os.getpid(), now)
        info = ProbeInfo(ttl=ttl, dest_port=probe_port(ttl), send_time=now)
        raw.sendto(packet, (self.target_ip, 0))
        return info

    def receive_probe(self, probe: ProbeInfo) -> tuple[ReplyKind | None, HopResult]:
        """Wait for one ICMP datagram and match it against ``probe``.

        A timeout or a datagram that does not answer the probe gives
        ``(None, HopResult())``. Raises OSError on socket failure.
        """
        _, icmp = self._require_open()
        ready, _, _ = select.select([icmp], [], [], PROBE_TIMEOUT)
        if not ready:
            return None, HopResult()
        try:
            data, addr = icmp.recvfrom(_RECV_BUFFER, socket.MSG_DONTWAIT)
        except BlockingIOError:
            return None, HopResult()
        recv_time = time.time()

        kind = parse_reply(data, probe.dest_port, self.target_ip)
        if kind is None:
            return None, HopResult()
        rtt = (recv_time - probe.send_time) * 1000.0
        return kind, HopResult(ip=addr[0], rtt=rtt)

    def probe_hop(self, ttl: int) -> tuple[list[HopResult], bool]:
        """Send all probes for one hop; return their results and whether the target answered."""
        results: list[HopResult] = []
        reached = False
        for _ in range(PROBE_NUM):
            try:
                probe = self.send_probe(ttl)
                kind, result = self.receive_probe(probe)
            except OSError:
                results.append(HopResult())
                continue
            results.append(result)
            if kind is ReplyKind.REACHED:
                reached = True
        return results, reached

    def run(self, target: str, out: TextIO) -> bool:
        """Trace the route, writing one line per hop; return whether the target was reached."""
        out.write(format_header(target, self.target_ip))
        for ttl in range(1, MAX_TTL + 1):
            results, reached = self.probe_hop(ttl)
            out.write(format_hop(ttl, results))
            out.flush()
            if reached:
                return True
        return False