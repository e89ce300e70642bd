"""
Parsing of reconnaissance payloads into typed entries.

The reconnaissance backend returns loosely-structured JSON: every list may
hold plain strings or records, and any field may be missing. Each list element
is accepted as exactly one explicit variant (string form or record form);
anything else is dropped and logged at debug level. Nothing here raises for
malformed content.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..shared.exceptions import PayloadError, create_error_context

logger = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")


@dataclass(frozen=True)
class ServiceEntry:
    """A service observed on a host port."""

    ip: str | None
    port: int | None
    name: str | None = None
    status: str | None = None
    protocol: str | None = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.port is not None:
            return f"Port {self.port}"
        return "unknown"


@dataclass(frozen=True)
class IpEntry:
    """An IP address, either bare or with host details."""

    ip: str
    ports: tuple[str, ...] = ()
    isp: str | None = None
    location: str | None = None
    services: tuple[ServiceEntry, ...] = ()
    from_record: bool = False


@dataclass(frozen=True)
class SubdomainEntry:
    """A subdomain, either bare or with source and resolved IPs."""

    name: str
    source: str | None = None
    ips: tuple[IpEntry, ...] = ()
    from_record: bool = False


@dataclass(frozen=True)
class DomainEntry:
    """A domain with its nested subdomains."""

    domain: str
    subdomains: tuple[SubdomainEntry, ...] = ()


@dataclass(frozen=True)
class ReconPayload:
    """Normalized view of one reconnaissance result."""

    target: str | None = None
    subdomains: tuple[SubdomainEntry, ...] = ()
    domains: tuple[DomainEntry, ...] = ()
    ips: tuple[IpEntry, ...] = ()
    services: tuple[ServiceEntry, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_empty(self) -> bool:
        return not (self.target or self.subdomains or self.domains or self.ips or self.services)


def _text(value: Any) -> str | None:
    """Return a stripped non-empty string, or None."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return None


def _as_list(value: Any) -> list[Any]:
    """Missing or wrong-shaped arrays are treated as empty."""
    if isinstance(value, list | tuple):
        return list(value)
    return []


def _port(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def split_hostnames(value: str) -> list[str]:
    """Split a whitespace-packed list of host names into separate names."""
    return [part for part in value.split() if part]


def split_ip_tokens(value: str) -> list[str]:
    """Split a whitespace-packed list of IPs, keeping dotted IPv4 tokens only.

    A single token is returned as-is even if it is not IPv4, so that IPv6 or
    odd values from the backend still produce a node.
    """
    tokens = value.split()
    if len(tokens) <= 1:
        return tokens
    return [token for token in tokens if IPV4_PATTERN.match(token)]


def parse_service(raw: Any) -> ServiceEntry | None:
    """Parse a service record; strings carry no usable service data."""
    if not isinstance(raw, dict):
        logger.debug(f"Dropping service entry of type {type(raw).__name__}")
        return None

    ip = _text(raw.get("ip"))
    port = _port(raw.get("port"))
    name = _text(raw.get("service")) or _text(raw.get("name"))
    if ip is None and port is None and name is None:
        logger.debug("Dropping empty service record")
        return None

    return ServiceEntry(
        ip=ip,
        port=port,
        name=name,
        status=_text(raw.get("status")),
        protocol=_text(raw.get("protocol")),
    )


def parse_ip(raw: Any) -> list[IpEntry]:
    """Parse one IP element (string variant or record variant)."""
    if isinstance(raw, str):
        return [IpEntry(ip=token) for token in split_ip_tokens(raw)]

    if isinstance(raw, dict):
        ip_text = _text(raw.get("ip"))
        if ip_text is None:
            logger.debug("Dropping IP record without 'ip'")
            return []

        ports = tuple(p for p in (_text(port) for port in _as_list(raw.get("ports"))) if p)
        services = tuple(
            s for s in (parse_service(item) for item in _as_list(raw.get("services"))) if s
        )
        tokens = split_ip_tokens(ip_text)
        return [
            IpEntry(
                ip=token,
                ports=ports,
                isp=_text(raw.get("isp")),
                location=_text(raw.get("location")),
                # Nested services default to the host they are listed under
                services=tuple(
                    s if s.ip else ServiceEntry(token, s.port, s.name, s.status, s.protocol)
                    for s in services
                ),
                from_record=True,
            )
            for token in tokens
        ]

    logger.debug(f"Dropping IP entry of type {type(raw).__name__}")
    return []


def parse_subdomain(raw: Any) -> list[SubdomainEntry]:
    """Parse one subdomain element (string variant or record variant)."""
    if isinstance(raw, str):
        return [SubdomainEntry(name=name) for name in split_hostnames(raw)]

    if isinstance(raw, dict):
        name_text = _text(raw.get("name")) or _text(raw.get("subdomain"))
        if name_text is None:
            logger.debug("Dropping subdomain record without a name")
            return []

        ips: list[IpEntry] = []
        for item in _as_list(raw.get("ips")):
            ips.extend(parse_ip(item))
        single_ip = raw.get("ip")
        if isinstance(single_ip, str):
            ips.extend(parse_ip(single_ip))

        source = _text(raw.get("source"))
        return [
            SubdomainEntry(name=name, source=source, ips=tuple(ips), from_record=True)
            for name in split_hostnames(name_text)
        ]

    logger.debug(f"Dropping subdomain entry of type {type(raw).__name__}")
    return []


def parse_domain(raw: Any) -> DomainEntry | None:
    if not isinstance(raw, dict):
        return None
    domain = _text(raw.get("domain"))
    if domain is None:
        return None

    subdomains: list[SubdomainEntry] = []
    for item in _as_list(raw.get("subdomains")):
        subdomains.extend(parse_subdomain(item))
    return DomainEntry(domain=domain, subdomains=tuple(subdomains))


def parse_payload(raw: Any) -> ReconPayload:
    """Parse an arbitrary object into a :class:`ReconPayload`.

    Args:
        raw: Decoded JSON (or anything else)

    Returns:
        Parsed payload; empty when ``raw`` is not a mapping
    """
    if not isinstance(raw, dict):
        return ReconPayload()

    subdomains: list[SubdomainEntry] = []
    for item in _as_list(raw.get("subdomains")):
        subdomains.extend(parse_subdomain(item))

    domains = [d for d in (parse_domain(item) for item in _as_list(raw.get("domains"))) if d]

    ips: list[IpEntry] = []
    for item in _as_list(raw.get("ips")):
        ips.extend(parse_ip(item))

    services = [s for s in (parse_service(item) for item in _as_list(raw.get("services"))) if s]

    payload = ReconPayload(
        target=_text(raw.get("target")),
        subdomains=tuple(subdomains),
        domains=tuple(domains),
        ips=tuple(ips),
        services=tuple(services),
        raw=raw,
    )
    logger.debug(
        f"Parsed payload: {len(subdomains)} subdomains, {len(domains)} domains, "
        f"{len(ips)} IPs, {len(services)} services"
    )
    return payload


def load_payload(payload_path: Path) -> ReconPayload:
    """Load and parse a payload JSON file.

    Args:
        payload_path: Path to the JSON file

    Returns:
        Parsed payload

    Raises:
        PayloadError: If the file cannot be read or is not valid JSON
    """
    try:
        with open(payload_path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load payload file {payload_path}: {e}")
        raise PayloadError(
            f"Could not load payload: {e}", create_error_context(path=str(payload_path))
        ) from e

    return parse_payload(raw)
