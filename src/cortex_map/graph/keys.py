"""
Grouping key policies.

Each function maps a node label to the bucket it is collapsed into when the
grouping engine is active, or ``None`` when the node never joins a bucket.
These are policy: changing them changes which nodes the user sees merged.
"""

from collections.abc import Callable
from functools import partial

from ..shared.models import Node, NodeType

KeyFunction = Callable[[Node], str | None]

# Ordered: the first category whose keyword occurs in the name wins
SERVICE_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("web", ("http", "https", "www", "web", "ssl")),
    ("remote", ("ssh", "telnet", "rdp", "vnc")),
    ("dns", ("dns", "domain")),
    ("email", ("smtp", "mail", "pop3", "imap")),
    ("file", ("ftp", "smb", "nfs")),
)
FALLBACK_SERVICE_CATEGORY = "other"


def subdomain_group_key(label: str, root_domain: str | None = None) -> str | None:
    """First label segment of the part of ``label`` in front of the root domain.

    ``api.v2.example.com`` under ``example.com`` groups as ``api``. Names that
    are not under ``root_domain`` fall back to treating the last two labels as
    the root. Bare root domains have no key.
    """
    name = label.strip().lower().rstrip(".")
    if not name:
        return None

    if root_domain:
        suffix = "." + root_domain.strip().lower().rstrip(".")
        if name.endswith(suffix):
            prefix = name[: -len(suffix)]
            return prefix.split(".")[0] or None

    parts = name.split(".")
    if len(parts) > 2:
        return parts[0]
    return None


def ip_group_key(label: str) -> str | None:
    """First octet of an IPv4 address (first hextet for IPv6)."""
    address = label.strip()
    if "." in address:
        first = address.split(".")[0]
        return first if first.isdigit() else None
    if ":" in address:
        return address.split(":")[0].lower() or None
    return None


def service_category(name: str) -> str:
    """Classify a service name into web, remote, dns, email, file or other."""
    lowered = name.lower()
    for category, keywords in SERVICE_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return FALLBACK_SERVICE_CATEGORY


def service_group_key(label: str) -> str:
    return service_category(label)


def default_key_functions(root_domain: str | None = None) -> dict[NodeType, KeyFunction]:
    """Key functions for every groupable node type."""

    def by_label(func: Callable[..., str | None], node: Node, **kwargs) -> str | None:
        return func(node.label, **kwargs)

    return {
        NodeType.SUBDOMAIN: partial(by_label, subdomain_group_key, root_domain=root_domain),
        NodeType.IP: partial(by_label, ip_group_key),
        NodeType.SERVICE: partial(by_label, service_group_key),
    }
