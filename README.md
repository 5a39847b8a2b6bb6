# pytraceroute

A small IPv4 traceroute. For each TTL from 1 to 30 it sends three UDP probes
with hand-built IP headers, listens for the ICMP replies, and prints one line
per hop. It stops once the destination answers with "port unreachable".

## Installation

```
pip install .
```

## Usage

Raw sockets need root privileges. Run as another user, the command prints an
error and exits with status 1.

```
sudo pytraceroute example.com
```

Sample output:

```
traceroute to example.com (192.0.2.10), 30 hops max, 60 byte packets
 1  gateway (192.168.1.1) 1.234 ms 1.102 ms 1.087 ms
 2  * * *
 3  10.0.0.1 (10.0.0.1) 8.512 ms 8.330 ms 8.401 ms
```

When all three probes for a hop come back from the same router, the address is
printed once and followed by the three round-trip times. Otherwise each probe
is printed on its own. A probe that got no matching reply within one second is
shown as `*`. Names come from reverse DNS when it is available; otherwise the
address is shown in their place.

The destination is resolved to its first IPv4 address. If it cannot be
resolved, or the sockets cannot be set up, a message goes to standard error
and the exit status is 1.

Options (only the first argument is looked at):

```
pytraceroute --help       # or -h: print help to standard error
pytraceroute --version    # or -v: print the version
```

Run with no arguments or more than two, the command prints a short usage
message. Ctrl-C or SIGTERM stops the trace and prints `Exiting...`.

## Library use

The packet helpers in `pytraceroute.packets` do not need the network:

```python
from pytraceroute.packets import build_probe, calculate_checksum, probe_port

packet = build_probe(ttl=5, target_ip="192.0.2.1", ident=1234, timestamp=0.0)
assert calculate_checksum(packet[:20]) == 0
assert probe_port(5) == 33439
```

- `pytraceroute.packets.parse_reply` classifies a raw ICMP datagram as a
  `ReplyKind` (`TIME_EXCEEDED` or `REACHED`) when it answers a probe sent to
  the given address and port, and returns `None` otherwise.
- `pytraceroute.report.format_header` and `format_hop` build the output lines;
  `format_hop` takes a list of `HopResult` values and an optional resolver
  function in place of `reverse_lookup`.
- `pytraceroute.tracer.Tracer` is a context manager that owns the two raw
  sockets. `send_probe`, `receive_probe` and `probe_hop` work one step at a
  time; `run` writes the whole trace to a text stream. Socket setup failures
  raise `TracerouteError`.

## Limitations

Only IPv4 and UDP probes are supported. The maximum number of hops (30), the
number of probes per hop (3), the per-probe timeout (1 second) and the first
destination port (33434) are fixed; there are no options to change them.

## Development

```
pip install -e ".[test]"
pytest
```