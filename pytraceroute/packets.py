"""Probe packet construction and ICMP reply matching."""

from __future__ import annotations

import enum
import socket
import struct
from dataclasses import dataclass

MAX_TTL = 30
PROBE_NUM = 3
PROBE_TIMEOUT = 1.0
PROBE_PORT = 33434
SOURCE_PORT_BASE = 32768
PAYLOAD_SIZE = 32
PAYLOAD_FILL = 0xAA

IP_HEADER_SIZE = 20
UDP_HEADER_SIZE = 8
ICMP_HEADER_SIZE = 8
PACKET_SIZE = IP_HEADER_SIZE + UDP_HEADER_SIZE + PAYLOAD_SIZE

ICMP_TIME_EXCEEDED = 11
ICMP_DEST_UNREACH = 3
ICMP_PORT_UNREACH = 3

_IP_HEADER = struct.Struct("!BBHHHBBH4s4s")
_UDP_HEADER = struct.Struct("!HHHH")
_TIMEVAL = struct.Struct("=qq")


class ReplyKind(enum.Enum):
    """What a matching ICMP reply says about the probe."""

    TIME_EXCEEDED = 1  # an intermediate router answered
    REACHED = 2  # the destination answered with port unreachable


@dataclass(frozen=True)
class ProbeInfo:
    """What is remembered about a sent probe to match its reply."""

    ttl: int
    dest_port: int
    send_time: float


def _ipv4_bytes(address: str) -> bytes:
    try:
        return socket.inet_pton(socket.AF_INET, address)
    except OSError as exc:
        raise ValueError(f"invalid IPv4 address: {address!r}") from exc


def calculate_checksum(data: bytes) -> int:
    """Return the 16-bit one's complement Internet checksum of ``data``."""
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack(f"!{len(data) // 2}H", data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def probe_port(ttl: int) -> int:
    """Return the UDP destination port used for probes with ``ttl``."""
    return PROBE_PORT + ttl


def build_probe(ttl: int, target_ip: str, ident: int, timestamp: float) -> bytes:
    """Build a complete IPv4/UDP probe datagram for the given hop."""
    if not 1 <= ttl <= 255:
        raise ValueError(f"ttl out of range: {ttl}")
    daddr = _ipv4_bytes(target_ip)

    seconds, micros = divmod(round(timestamp * 1_000_000), 1_000_000)
    stamp = _TIMEVAL.pack(seconds, micros)
    payload = stamp + bytes([PAYLOAD_FILL]) * (PAYLOAD_SIZE - len(stamp))

    fields = [
        (4 << 4) | (IP_HEADER_SIZE // 4),
        0,
        PACKET_SIZE,
        (ident + ttl) & 0xFFFF,
        0,
        ttl,
        socket.IPPROTO_UDP,
        0,
        bytes(4),
        daddr,
    ]
    header = _IP_HEADER.pack(*fields)
    fields[7] = calculate_checksum(header)
    header = _IP_HEADER.pack(*fields)

    udp = _UDP_HEADER.pack(
        (SOURCE_PORT_BASE + ttl) & 0xFFFF,
        probe_port(ttl),
        UDP_HEADER_SIZE + PAYLOAD_SIZE,
        0,
    )
    return header + udp + payload


def parse_reply(data: bytes, dest_port: int, target_ip: str) -> ReplyKind | None:
    """Classify a raw ICMP datagram as a reply to a probe, or return None.

    The reply counts only when it is a time-exceeded or port-unreachable
    message whose quoted datagram was sent to ``target_ip`` on ``dest_port``.
    """
    target = _ipv4_bytes(target_ip)
    if not data:
        return None
    ihl = (data[0] & 0x0F) * 4
    if len(data) < ihl + ICMP_HEADER_SIZE:
        return None

    icmp_type, icmp_code = data[ihl], data[ihl + 1]
    if icmp_type == ICMP_TIME_EXCEEDED:
        kind = ReplyKind.TIME_EXCEEDED
    elif icmp_type == ICMP_DEST_UNREACH and icmp_code == ICMP_PORT_UNREACH:
        kind = ReplyKind.REACHED
    else:
        return None

    inner = ihl + ICMP_HEADER_SIZE
    if len(data) < inner + IP_HEADER_SIZE:
        return None
    inner_ihl = (data[inner] & 0x0F) * 4
    udp = inner + inner_ihl
    if len(data) < udp + 4:
        return None

    (port,) = struct.unpack_from("!H", data, udp + 2)
    daddr = data[inner + 16:inner + 20]
    if port == dest_port and daddr == target:
        return kind
    return None