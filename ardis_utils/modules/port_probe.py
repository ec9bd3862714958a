from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Iterable, List

from ardis_utils.core.config import DEFAULT_PORT_TIMEOUT_MS
from ardis_utils.core.errors import ValidationError
from ardis_utils.core.models import PortProbeResult

log = logging.getLogger(__name__)


def _probe_one_tcp(resolved_host: str, port: int, timeout: float) -> bool:
    """
    True when the TCP handshake completes within `timeout` seconds.
    Uses the already resolved host so DNS isn't repeated per port.
    """
    s = socket.socket(socket.AF_INET6 if ":" in resolved_host else socket.AF_INET, socket.SOCK_STREAM)
    s.settimeout(timeout)
    try:
        return s.connect_ex((resolved_host, port)) == 0
    except (socket.timeout, OSError):
        return False
    finally:
        s.close()


def validate_host(host: str) -> str:
    host = host.strip()
    if not host:
        raise ValidationError("Empty host.")

    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        pass

    if " " in host:
        raise ValidationError(f"Invalid host (contains spaces): {host!r}")

    return host


def validate_port(port: int) -> int:
    if port <= 0 or port > 65535:
        raise ValidationError(f"Invalid port: {port}. Must be in 1-65535.")
    return port


def parse_ports(spec: str) -> List[int]:
    """
    Accepts:
      "22"
      "22,80,443"
      "1-1024"
      "22,80-90,443"
    """
    ports: set[int] = set()
    spec = spec.strip()
    if not spec:
        raise ValidationError("Empty port specification.")

    parts = [p.strip() for p in spec.split(",") if p.strip()]
    try:
        for part in parts:
            if "-" in part:
                a, b = part.split("-", 1)
                start = validate_port(int(a.strip()))
                end = validate_port(int(b.strip()))
                if start > end:
                    start, end = end, start
                ports.update(range(start, end + 1))  # inclusive
            else:
                ports.add(validate_port(int(part)))
    except ValueError as e:
        raise ValidationError(f"Invalid port specification {spec!r}: {e}") from e

    return sorted(ports)


def resolve_ip(host: str) -> str:
    """
    Resolves hostname -> IP (or returns the IP itself).
    Raises socket.gaierror on failure.
    """
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        return socket.gethostbyname(host)


def probe_port(host: str, port: int, timeout_ms: int = DEFAULT_PORT_TIMEOUT_MS) -> PortProbeResult:
    """
    Probes a single TCP port. Unresolvable hosts, refusals and timeouts are
    reported as open=False, never raised.
    """
    host = validate_host(host)
    port = validate_port(int(port))
    if timeout_ms <= 0:
        raise ValidationError(f"Invalid timeout: {timeout_ms}ms. Must be > 0.")

    try:
        resolved_ip = resolve_ip(host)
    except (socket.gaierror, UnicodeError):
        log.info("Could not resolve %s", host)
        return PortProbeResult(host=host, port=port, open=False)

    is_open = _probe_one_tcp(resolved_ip, port, timeout_ms / 1000.0)
    log.debug("%s (%s):%d open=%s", host, resolved_ip, port, is_open)
    return PortProbeResult(host=host, port=port, open=is_open)


def probe_ports(
    host: str,
    ports: Iterable[int],
    timeout_ms: int = DEFAULT_PORT_TIMEOUT_MS,
) -> List[PortProbeResult]:
    """Sequential probe, one result per port in ascending order."""
    return [probe_port(host, p, timeout_ms) for p in sorted(set(ports))]
