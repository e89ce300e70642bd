"""
JSON snapshot export.

The snapshot always has the keys ``target``, ``date``, ``subdomains``,
``ips`` and ``services``; disabled sections are written as empty lists.
List contents are copied from the raw payload unchanged.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from ..graph.payload import ReconPayload
from ..shared.models import ExportSettings

logger = logging.getLogger(__name__)


def _raw_list(payload: ReconPayload, key: str) -> list[Any]:
    value = payload.raw.get(key)
    return list(value) if isinstance(value, list) else []


def build_json_snapshot(
    payload: ReconPayload, settings: ExportSettings, moment: datetime | None = None
) -> dict[str, Any]:
    """Build the schema-stable snapshot document.

    Args:
        payload: Parsed payload carrying the raw JSON
        settings: Export settings selecting the sections
        moment: Export timestamp (now by default)

    Returns:
        Snapshot dictionary
    """
    moment = moment or datetime.now()
    return {
        "target": payload.target,
        "date": moment.isoformat(),
        "subdomains": _raw_list(payload, "subdomains") if settings.include_subdomains else [],
        "ips": _raw_list(payload, "ips") if settings.include_ips else [],
        "services": _raw_list(payload, "services") if settings.include_services else [],
    }


def write_json_snapshot(snapshot: dict[str, Any], output_path: Path) -> Path:
    """Write a snapshot to disk as pretty-printed UTF-8 JSON."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, ensure_ascii=False)
    logger.debug(f"Wrote JSON snapshot to {output_path}")
    return output_path
