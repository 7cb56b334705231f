# Copyright 2024-2026 The SSRF-Guard Authors
# SPDX-License-Identifier: Apache-2.0

"""
Data models for SSRF-Guard.

A Policy describes which outbound destinations are acceptable, and a
ValidationResult records the verdict for one URL checked against it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

# Ports of internal backend services that should never be reachable from
# attacker-influenced URLs. 8080 and 8443 are deliberately absent.
WELL_KNOWN_SERVICE_PORTS: dict[int, str] = {
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    110: "POP3",
    143: "IMAP",
    389: "LDAP",
    445: "SMB",
    636: "LDAPS",
    1433: "MSSQL",
    1521: "Oracle",
    3306: "MySQL",
    3389: "RDP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
    27017: "MongoDB",
}

TRUTHY_VALUES = ("1", "true", "yes", "on")


class RejectionReason(StrEnum):
    """Why a URL was rejected. Exactly one reason is reported per URL."""

    INVALID_INPUT = "invalid_input"
    MALFORMED_URL = "malformed_url"
    FILE_PROTOCOL_NOT_ALLOWED = "file_protocol_not_allowed"
    SCHEME_NOT_ALLOWED = "scheme_not_allowed"
    DANGEROUS_HOSTNAME = "dangerous_hostname"
    DOMAIN_NOT_ALLOWED = "domain_not_allowed"
    PRIVATE_IP_NOT_ALLOWED = "private_ip_not_allowed"
    RESERVED_IP_NOT_ALLOWED = "reserved_ip_not_allowed"
    PORT_OUT_OF_RANGE = "port_out_of_range"
    PORT_NOT_ALLOWED = "port_not_allowed"
    PORT_BLOCKED = "port_blocked"
    WELL_KNOWN_SERVICE_PORT = "well_known_service_port"


class Policy(BaseModel):
    """
    Outbound request policy.

    Constructed once (typically at service start-up) and shared by every
    validation call. Instances are frozen; use ``model_copy(update=...)``
    to derive a variant.

    Example:
        >>> policy = Policy(allowed_domains={"api.example.com", "*.trusted.com"})
        >>> policy.block_well_known_services
        True
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(
        default=True,
        description="When False, every URL is allowed without inspection.",
    )
    allowed_schemes: frozenset[str] = Field(
        default=frozenset({"http", "https"}),
        description="Permitted URL schemes (compared case-sensitively to the lowercased scheme).",
    )
    allowed_domains: frozenset[str] = Field(
        default_factory=frozenset,
        description="Exact hosts or '*.suffix' wildcards. Empty means no domain restriction.",
    )
    allowed_ports: frozenset[int] = Field(
        default_factory=frozenset,
        description="Port whitelist. Empty means no whitelist restriction.",
    )
    blocked_ports: frozenset[int] = Field(
        default_factory=frozenset,
        description="Port blacklist.",
    )
    block_well_known_services: bool = Field(
        default=True,
        description="Block SSH, SMTP, database and similar internal service ports.",
    )
    standard_ports: Mapping[str, int] = Field(
        default_factory=lambda: {"http": 80, "https": 443},
        description="Scheme -> default port, used when the URL carries no explicit port.",
    )
    min_port: int = Field(default=1, description="Lowest permitted port (inclusive).")
    max_port: int = Field(default=65535, description="Highest permitted port (inclusive).")

    @field_validator("standard_ports", mode="after")
    @classmethod
    def _freeze_standard_ports(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        # Private copy behind a read-only view; policies are shared across requests.
        return MappingProxyType(dict(value))

    @field_serializer("standard_ports")
    def _dump_standard_ports(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)

    @model_validator(mode="after")
    def _check_port_bounds(self) -> Policy:
        if self.min_port > self.max_port:
            raise ValueError(f"min_port ({self.min_port}) must not exceed max_port ({self.max_port})")
        return self

    @classmethod
    def from_env(cls) -> Policy:
        """Build a policy from SSRF_GUARD_* environment variables."""
        values: dict[str, object] = {}

        if (raw := os.getenv("SSRF_GUARD_ENABLED")) is not None:
            values["enabled"] = raw.strip().lower() in TRUTHY_VALUES
        if (raw := os.getenv("SSRF_GUARD_ALLOWED_SCHEMES")) is not None:
            values["allowed_schemes"] = _split_csv(raw)
        if (raw := os.getenv("SSRF_GUARD_ALLOWED_DOMAINS")) is not None:
            values["allowed_domains"] = _split_csv(raw)
        if (raw := os.getenv("SSRF_GUARD_ALLOWED_PORTS")) is not None:
            values["allowed_ports"] = {int(p) for p in _split_csv(raw)}
        if (raw := os.getenv("SSRF_GUARD_BLOCKED_PORTS")) is not None:
            values["blocked_ports"] = {int(p) for p in _split_csv(raw)}
        if (raw := os.getenv("SSRF_GUARD_BLOCK_WELL_KNOWN_SERVICES")) is not None:
            values["block_well_known_services"] = raw.strip().lower() in TRUTHY_VALUES
        if (raw := os.getenv("SSRF_GUARD_STANDARD_PORTS")) is not None:
            values["standard_ports"] = _parse_standard_ports(raw)
        if (raw := os.getenv("SSRF_GUARD_MIN_PORT")) is not None:
            values["min_port"] = int(raw)
        if (raw := os.getenv("SSRF_GUARD_MAX_PORT")) is not None:
            values["max_port"] = int(raw)

        return cls(**values)


class SSRFValidationError(ValueError):
    """Raised by HTTP collaborators when a URL fails SSRF validation."""

    def __init__(
        self,
        url: str,
        reason: RejectionReason,
        message: str,
        value: str | int | None = None,
    ) -> None:
        super().__init__(f"SSRF validation failed: {message}")
        self.url = url
        self.reason = reason
        self.value = value


class ValidationResult(BaseModel):
    """Verdict for a single URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    allowed: bool
    reason: RejectionReason | None = None
    value: str | int | None = Field(
        default=None,
        description="Offending scheme, host, IP or port.",
    )
    message: str | None = None

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def is_input_error(self) -> bool:
        """True when the caller passed an empty or non-string URL."""
        return self.reason == RejectionReason.INVALID_INPUT

    @classmethod
    def ok(cls, url: str) -> ValidationResult:
        return cls(url=url, allowed=True)

    @classmethod
    def reject(
        cls,
        url: str,
        reason: RejectionReason,
        message: str,
        value: str | int | None = None,
    ) -> ValidationResult:
        return cls(url=url, allowed=False, reason=reason, value=value, message=message)

    def raise_for_rejection(self) -> ValidationResult:
        """Raise SSRFValidationError if the URL was rejected, else return self."""
        if not self.allowed:
            raise SSRFValidationError(
                self.url,
                self.reason or RejectionReason.MALFORMED_URL,
                self.message or "URL rejected",
                value=self.value,
            )
        return self


def _split_csv(raw: str) -> set[str]:
    return {item.strip() for item in raw.split(",") if item.strip()}


def _parse_standard_ports(raw: str) -> dict[str, int]:
    """Parse 'http=80,https=443' into a scheme -> port mapping."""
    ports: dict[str, int] = {}
    for pair in _split_csv(raw):
        scheme, sep, port = pair.partition("=")
        if not sep:
            raise ValueError(f"Invalid standard port entry '{pair}', expected scheme=port")
        ports[scheme.strip().lower()] = int(port)
    return ports
