# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
SSRF-Guard validator: decide whether an outbound URL may be requested.

The decision is a pure function of the URL and the Policy. No DNS lookups,
no network I/O and no logging happen here, so it is safe to call from any
number of threads or tasks at once.
"""

from __future__ import annotations

import ipaddress
import re
import socket
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from ssrf_guard.core.models import (
    WELL_KNOWN_SERVICE_PORTS,
    Policy,
    RejectionReason,
    ValidationResult,
)

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_DANGEROUS_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost", "[::1]"})

_PRIVATE_V4_NETWORKS = (
    ipaddress.IPv4Network("10.0.0.0/8"),
    ipaddress.IPv4Network("172.16.0.0/12"),
    ipaddress.IPv4Network("192.168.0.0/16"),
)
_LOOPBACK_V4 = ipaddress.IPv4Network("127.0.0.0/8")
_LINK_LOCAL_V4 = ipaddress.IPv4Network("169.254.0.0/16")
_UNSPECIFIED_V4 = ipaddress.IPv4Address("0.0.0.0")
_BROADCAST_V4 = ipaddress.IPv4Address("255.255.255.255")
_LOOPBACK_V6 = ipaddress.IPv6Address("::1")

# Decimal, hex and octal IPv4 spellings such as 2130706433, 0x7f.1 or 0177.0.0.1
_NUMERIC_HOST = re.compile(r"^(?:0x[0-9a-f]*|\d+)(?:\.(?:0x[0-9a-f]*|\d+)){0,3}$")
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")


@dataclass(frozen=True)
class _ParsedUrl:
    scheme: str
    host: str
    port: int | None
    is_file: bool


def validate(url: str, policy: Policy) -> ValidationResult:
    """
    Validate a URL against an outbound request policy.

    Checks run in a fixed order and stop at the first failure:
    file protocol, scheme, dangerous hostname, domain allowlist,
    private IP, reserved IP, then (once the port is resolved) port range,
    port allowlist, port blocklist and well-known service ports.

    Args:
        url: The URL the caller is about to request.
        policy: The policy to enforce.

    Returns:
        ValidationResult; ``allowed`` is False and ``reason`` names the
        failing check when the URL is rejected.

    Raises:
        TypeError: If ``policy`` is None.
    """
    if policy is None:
        raise TypeError("policy must not be None")

    if not isinstance(url, str) or not url.strip():
        return ValidationResult.reject(
            url if isinstance(url, str) else "",
            RejectionReason.INVALID_INPUT,
            "URL must be a non-empty string",
        )

    if not policy.enabled:
        return ValidationResult.ok(url)

    try:
        parsed = _parse_url(url)
    except ValueError as e:
        return ValidationResult.reject(url, RejectionReason.MALFORMED_URL, f"Malformed URL: {e}")

    if parsed.is_file:
        return ValidationResult.reject(
            url, RejectionReason.FILE_PROTOCOL_NOT_ALLOWED, "File protocols are not allowed"
        )

    if parsed.scheme not in policy.allowed_schemes:
        return ValidationResult.reject(
            url,
            RejectionReason.SCHEME_NOT_ALLOWED,
            f"Scheme '{parsed.scheme}' is not allowed",
            value=parsed.scheme,
        )

    host = parsed.host
    if not host:
        return ValidationResult.reject(
            url, RejectionReason.MALFORMED_URL, "Malformed URL: URL has no host"
        )

    if is_dangerous_hostname(host):
        return ValidationResult.reject(
            url,
            RejectionReason.DANGEROUS_HOSTNAME,
            f"Dangerous hostname '{host}' is not allowed",
            value=host,
        )

    if policy.allowed_domains and not is_host_allowed(host, policy.allowed_domains):
        return ValidationResult.reject(
            url,
            RejectionReason.DOMAIN_NOT_ALLOWED,
            f"Host '{host}' is not in allowed domains",
            value=host,
        )

    ip = _ip_literal(host)
    if ip is not None:
        if is_private_ip(ip):
            return ValidationResult.reject(
                url,
                RejectionReason.PRIVATE_IP_NOT_ALLOWED,
                f"Private IP address '{ip}' is not allowed",
                value=str(ip),
            )
        if is_reserved_ip(ip):
            return ValidationResult.reject(
                url,
                RejectionReason.RESERVED_IP_NOT_ALLOWED,
                f"Reserved IP address '{ip}' is not allowed",
                value=str(ip),
            )

    port = resolve_port(parsed.scheme, parsed.port, policy.standard_ports)
    if port is None:
        return ValidationResult.ok(url)

    return _check_port(url, port, policy)


def _check_port(url: str, port: int, policy: Policy) -> ValidationResult:
    if port < policy.min_port or port > policy.max_port:
        return ValidationResult.reject(
            url,
            RejectionReason.PORT_OUT_OF_RANGE,
            f"Port {port} is outside allowed range ({policy.min_port}-{policy.max_port})",
            value=port,
        )

    # Allowlist membership does not exempt a port from the checks below.
    if policy.allowed_ports and port not in policy.allowed_ports:
        return ValidationResult.reject(
            url,
            RejectionReason.PORT_NOT_ALLOWED,
            f"Port {port} is not in allowed ports list",
            value=port,
        )

    if port in policy.blocked_ports:
        return ValidationResult.reject(
            url, RejectionReason.PORT_BLOCKED, f"Port {port} is explicitly blocked", value=port
        )

    if policy.block_well_known_services and is_well_known_service_port(port):
        service = WELL_KNOWN_SERVICE_PORTS[port]
        return ValidationResult.reject(
            url,
            RejectionReason.WELL_KNOWN_SERVICE_PORT,
            f"Port {port} is a well-known service port ({service}) and is blocked",
            value=port,
        )

    return ValidationResult.ok(url)


class UrlValidator:
    """
    Validator bound to a single policy.

    Usage::

        validator = UrlValidator(Policy(allowed_domains={"*.example.com"}))
        if not validator.is_allowed(url):
            ...
    """

    def __init__(self, policy: Policy) -> None:
        if policy is None:
            raise TypeError("policy must not be None")
        self._policy = policy

    @property
    def policy(self) -> Policy:
        return self._policy

    def validate(self, url: str) -> ValidationResult:
        return validate(url, self._policy)

    def is_allowed(self, url: str) -> bool:
        return self.validate(url).allowed


# ============================================================================
# CLASSIFIERS
# ============================================================================


def is_dangerous_hostname(host: str) -> bool:
    """Lexical loopback check on the raw host (brackets kept for IPv6)."""
    normalized = host.lower()
    return (
        normalized in _DANGEROUS_HOSTNAMES
        or normalized.startswith("127.")
        or normalized.startswith("[::1")
    )


def is_host_allowed(host: str, allowed_domains: Iterable[str]) -> bool:
    """
    Match a host against exact entries and '*.suffix' wildcards.

    ``*.example.com`` matches any host ending in ``.example.com`` but not
    ``example.com`` itself. Comparison is case-insensitive.
    """
    normalized = host.lower()
    for allowed in allowed_domains:
        entry = allowed.lower()
        if normalized == entry:
            return True
        if entry.startswith("*.") and normalized.endswith(entry[1:]):
            return True
    return False


def is_private_ip(ip: IPAddress) -> bool:
    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            return is_private_ip(ip.ipv4_mapped)
        return ip.is_link_local or ip.is_site_local
    return any(ip in network for network in _PRIVATE_V4_NETWORKS)


def is_reserved_ip(ip: IPAddress) -> bool:
    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            return is_reserved_ip(ip.ipv4_mapped)
        return (
            ip.is_link_local
            or ip.is_site_local
            or ip == _LOOPBACK_V6
            or ip.is_multicast
        )
    return (
        ip == _UNSPECIFIED_V4
        or ip == _BROADCAST_V4
        or ip in _LOOPBACK_V4
        or ip in _LINK_LOCAL_V4
    )


def is_well_known_service_port(port: int) -> bool:
    return port in WELL_KNOWN_SERVICE_PORTS


def resolve_port(scheme: str, port: int | None, standard_ports: Mapping[str, int]) -> int | None:
    """Return the explicit port, else the scheme's standard port, else None."""
    if port is not None:
        return port
    return standard_ports.get(scheme)


# ============================================================================
# PARSING
# ============================================================================


def _parse_url(url: str) -> _ParsedUrl:
    """
    Split a URL into scheme, host, explicit port and a file/UNC flag.

    Raises:
        ValueError: If the URL cannot be parsed.
    """
    text = url.strip()

    # Local paths, //server/share and \\server\share are treated like file:// URLs
    if text.startswith(("/", "\\\\")) or _WINDOWS_DRIVE.match(text):
        return _ParsedUrl(scheme="file", host="", port=None, is_file=True)

    parts = urlsplit(text)
    scheme = parts.scheme.lower()
    if not scheme:
        raise ValueError("URL has no scheme")

    hostport = parts.netloc.rpartition("@")[2]
    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            raise ValueError("unterminated IPv6 literal")
        host = hostport[: end + 1].lower()
        rest = hostport[end + 1 :]
        if rest and not rest.startswith(":"):
            raise ValueError(f"unexpected text after IPv6 literal: '{rest}'")
        port_text = rest[1:]
        try:
            ipaddress.IPv6Address(unquote(host[1:-1]))
        except ValueError as e:
            raise ValueError(f"invalid IPv6 literal '{host}'") from e
    else:
        host, _, port_text = hostport.partition(":")
        host = _canonical_ipv4(host.lower())

    return _ParsedUrl(
        scheme=scheme,
        host=host,
        port=_parse_port(port_text),
        is_file=scheme == "file",
    )


def _parse_port(port_text: str) -> int | None:
    if not port_text:
        return None
    if not (port_text.isascii() and port_text.isdigit()):
        raise ValueError(f"invalid port '{port_text}'")
    port = int(port_text)
    if port > 65535:
        raise ValueError(f"port {port} is out of range")
    return port


def _canonical_ipv4(host: str) -> str:
    """Rewrite numeric IPv4 spellings (2130706433, 0x7f.1) as dotted-quad."""
    if not _NUMERIC_HOST.match(host):
        return host
    try:
        packed = socket.inet_aton(host)
    except OSError as e:
        raise ValueError(f"invalid IPv4 address '{host}'") from e
    return str(ipaddress.IPv4Address(packed))


def _ip_literal(host: str) -> IPAddress | None:
    if host.startswith("[") and host.endswith("]"):
        host = unquote(host[1:-1])
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None
