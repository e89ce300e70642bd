"""
Tabular report sections derived from the full (ungrouped) payload.

Rows are ``|``-delimited strings, one cell per column. Cell values have the
delimiter escaped so a value containing ``|`` never shifts the columns.
"""

from dataclasses import dataclass

from ..graph.payload import IpEntry, ReconPayload, ServiceEntry, SubdomainEntry
from ..shared.models import ExportSettings

ROW_DELIMITER = " | "
MISSING = "N/A"


@dataclass(frozen=True)
class TableSection:
    """A titled table of delimited rows."""

    title: str
    headers: tuple[str, ...]
    rows: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.rows)


def escape_cell(value: str) -> str:
    return value.replace("|", "/")


def format_row(*cells: str) -> str:
    return ROW_DELIMITER.join(escape_cell(cell) for cell in cells)


def split_row(row: str) -> list[str]:
    """Split a formatted row back into its cells."""
    return [cell.strip() for cell in row.split("|")]


def format_subdomain(entry: SubdomainEntry) -> str:
    ips = ", ".join(ip.ip for ip in entry.ips)
    return format_row(entry.name, ips or MISSING)


def format_ip(entry: IpEntry) -> str:
    return format_row(
        entry.ip,
        ", ".join(entry.ports) or MISSING,
        entry.isp or MISSING,
        entry.location or MISSING,
    )


def format_service(entry: ServiceEntry) -> str:
    return format_row(
        entry.display_name,
        str(entry.port) if entry.port is not None else MISSING,
        entry.protocol or MISSING,
        entry.status or "unknown",
    )


def collect_subdomains(payload: ReconPayload) -> list[SubdomainEntry]:
    """Top-level subdomains followed by the ones nested under domains, by name."""
    seen: set[str] = set()
    entries: list[SubdomainEntry] = []
    nested = [sub for domain in payload.domains for sub in domain.subdomains]
    for entry in list(payload.subdomains) + nested:
        if entry.name not in seen:
            seen.add(entry.name)
            entries.append(entry)
    return entries


def collect_ips(payload: ReconPayload) -> list[IpEntry]:
    seen: set[str] = set()
    entries: list[IpEntry] = []
    for entry in payload.ips:
        if entry.ip not in seen:
            seen.add(entry.ip)
            entries.append(entry)
    return entries


def collect_services(payload: ReconPayload) -> list[ServiceEntry]:
    """Top-level services plus those listed under IP records, without repeats."""
    seen: set[tuple[str | None, int | None, str]] = set()
    entries: list[ServiceEntry] = []
    nested = [service for ip in payload.ips for service in ip.services]
    for entry in list(payload.services) + nested:
        key = (entry.ip, entry.port, entry.display_name)
        if key not in seen:
            seen.add(key)
            entries.append(entry)
    return entries


def build_sections(payload: ReconPayload, settings: ExportSettings) -> list[TableSection]:
    """Build the enabled, non-empty table sections in report order.

    Args:
        payload: Full payload (grouping never applies to reports)
        settings: Export settings selecting the sections

    Returns:
        Sections for subdomains, IP addresses and services
    """
    sections: list[TableSection] = []
    if settings.include_subdomains:
        rows = tuple(format_subdomain(e) for e in collect_subdomains(payload))
        if rows:
            sections.append(TableSection("Subdomains", ("Subdomain", "IPs"), rows))
    if settings.include_ips:
        rows = tuple(format_ip(e) for e in collect_ips(payload))
        if rows:
            sections.append(
                TableSection("IP Addresses", ("IP Address", "Ports", "ISP", "Location"), rows)
            )
    if settings.include_services:
        rows = tuple(format_service(e) for e in collect_services(payload))
        if rows:
            sections.append(
                TableSection("Services", ("Service", "Port", "Protocol", "Status"), rows)
            )
    return sections
