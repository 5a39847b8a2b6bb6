import struct

import pytest

from pytraceroute.packets import (
    PACKET_SIZE,
    PROBE_PORT,
    ProbeInfo,
    ReplyKind,
    build_probe,
    calculate_checksum,
    parse_reply,
    probe_port,
)

TARGET = "10.0.0.1"


def _reply(icmp_type, icmp_code, quoted):
    outer = bytes([0x45]) + bytes(19)
    icmp = bytes([icmp_type, icmp_code]) + bytes(6)
    return outer + icmp + quoted


def test_checksum_of_empty_is_all_ones():
    assert calculate_checksum(b"") == 0xFFFF


def test_checksum_small_value():
    assert calculate_checksum(b"\x00\x01") == 0xFFFE


def test_checksum_odd_length_pads_with_zero():
    assert calculate_checksum(b"\x12\x34\x56") == calculate_checksum(b"\x12\x34\x56\x00")


def test_checksum_verifies_to_zero_when_included():
    data = b"\x45\x00\x00\x3c\x1c\x46\x40\x00\x40\x06"
    check = calculate_checksum(data)
    assert calculate_checksum(data + struct.pack("!H", check)) == 0


def test_probe_port_follows_base():
    assert probe_port(0) == PROBE_PORT
    assert probe_port(5) == PROBE_PORT + 5


def test_build_probe_layout():
    packet = build_probe(1, TARGET, 100, 0.0)
    assert len(packet) == PACKET_SIZE
    assert packet[0] == 0x45
    assert struct.unpack("!H", packet[2:4])[0] == PACKET_SIZE
    assert struct.unpack("!H", packet[4:6])[0] == 101
    assert packet[8] == 1
    assert packet[9] == 17
    assert packet[16:20] == bytes([10, 0, 0, 1])


def test_build_probe_ip_checksum_valid():
    packet = build_probe(7, TARGET, 4242, 1234.5)
    assert calculate_checksum(packet[:20]) == 0


def test_build_probe_udp_header():
    packet = build_probe(3, TARGET, 0, 0.0)
    source, dest, length, check = struct.unpack("!HHHH", packet[20:28])
    assert source == 32768 + 3
    assert dest == probe_port(3)
    assert length == PACKET_SIZE - 20
    assert check == 0


def test_build_probe_payload_fill():
    packet = build_probe(2, TARGET, 0, 10.25)
    payload = packet[28:]
    seconds, micros = struct.unpack("=qq", payload[:16])
    assert (seconds, micros) == (10, 250000)
    assert set(payload[16:]) == {0xAA}


@pytest.mark.parametrize("ttl", [0, 256, -1])
def test_build_probe_rejects_bad_ttl(ttl):
    with pytest.raises(ValueError):
        build_probe(ttl, TARGET, 0, 0.0)


def test_build_probe_rejects_bad_address():
    with pytest.raises(ValueError):
        build_probe(1, "not-an-ip", 0, 0.0)


def test_parse_time_exceeded():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(11, 0, probe[:28])
    assert parse_reply(data, probe_port(4), TARGET) is ReplyKind.TIME_EXCEEDED


def test_parse_port_unreachable_means_reached():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(3, 3, probe[:28])
    assert parse_reply(data, probe_port(4), TARGET) is ReplyKind.REACHED


def test_parse_other_unreachable_ignored():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(3, 1, probe[:28])
    assert parse_reply(data, probe_port(4), TARGET) is None


def test_parse_echo_reply_ignored():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(0, 0, probe[:28])
    assert parse_reply(data, probe_port(4), TARGET) is None


def test_parse_wrong_port_ignored():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(11, 0, probe[:28])
    assert parse_reply(data, probe_port(5), TARGET) is None


def test_parse_wrong_target_ignored():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(11, 0, probe[:28])
    assert parse_reply(data, probe_port(4), "10.0.0.2") is None


def test_parse_truncated_ignored():
    probe = build_probe(4, TARGET, 0, 0.0)
    data = _reply(11, 0, probe[:22])
    assert parse_reply(data, probe_port(4), TARGET) is None
    assert parse_reply(b"", probe_port(4), TARGET) is None


def test_probe_info_fields():
    info = ProbeInfo(ttl=3, dest_port=probe_port(3), send_time=1.5)
    assert info.dest_port - info.ttl == PROBE_PORT
    with pytest.raises(AttributeError):
        info.ttl = 4