"""UDP traceroute with hand-built IPv4 probes and ICMP reply matching."""

__version__ = "1.0.0"
__all__ = ["cli", "packets", "report", "tracer"]