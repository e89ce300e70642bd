"""
Pytest configuration and shared fixtures for CorteX Map tests.
"""

import json
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from cortex_map.graph import normalize_payload
from cortex_map.shared.config import MapConfig, SimulationConfig
from cortex_map.shared.models import GraphData


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def example_payload() -> dict[str, Any]:
    """Return the minimal example payload: two subdomains, one IP, one service."""
    return {
        "target": "ex.com",
        "subdomains": ["a.ex.com", "b.ex.com"],
        "ips": ["1.2.3.4"],
        "services": [{"ip": "1.2.3.4", "port": 80, "service": "http"}],
    }


@pytest.fixture
def rich_payload() -> dict[str, Any]:
    """Return a payload mixing string and record variants of every list."""
    return {
        "target": "example.com",
        "subdomains": [
            {"name": "api.example.com", "source": "crtsh", "ips": ["10.0.0.1"]},
            {"subdomain": "dev.example.com", "ip": "10.0.0.2"},
            "www.example.com mail.example.com",
            "api.example.com",
            42,
        ],
        "domains": [
            {"domain": "example.com", "subdomains": ["shop.example.com"]},
            {"domain": "example.org", "subdomains": [{"name": "blog.example.org"}]},
            "not-a-record",
        ],
        "ips": [
            {
                "ip": "10.0.0.1",
                "ports": [80, 443],
                "isp": "Example ISP",
                "location": "Lisbon, PT",
                "services": [{"port": 443, "service": "https", "status": "open"}],
            },
            "192.168.1.10 192.168.1.11",
            {"isp": "no address"},
        ],
        "services": [
            {"ip": "10.0.0.1", "port": 22, "service": "ssh", "protocol": "tcp", "status": "open"},
            {"ip": "10.0.0.2", "port": 25, "name": "smtp", "protocol": "tcp"},
            {"port": 53, "service": "dns"},
            "ftp",
        ],
    }


@pytest.fixture
def large_payload() -> dict[str, Any]:
    """Return a payload with 120 subdomains spread over four prefixes."""
    prefixes = ["api", "dev", "staging", "prod"]
    subdomains = [f"{prefixes[i % 4]}.node{i}.ex.com" for i in range(120)]
    return {
        "target": "ex.com",
        "subdomains": subdomains,
        "ips": [f"{10 + i % 3}.0.0.{i}" for i in range(12)],
        "services": [
            {"ip": f"{10 + i % 3}.0.0.{i}", "port": 80 + i, "service": "http"} for i in range(6)
        ],
    }


@pytest.fixture
def example_graph(example_payload: dict[str, Any]) -> GraphData:
    return normalize_payload(example_payload)


@pytest.fixture
def large_graph(large_payload: dict[str, Any]) -> GraphData:
    return normalize_payload(large_payload)


@pytest.fixture
def fast_config(temp_dir: Path) -> MapConfig:
    """Configuration with a short simulation and output under the temp dir."""
    return MapConfig(
        simulation=SimulationConfig(max_iterations=60, drag_cooldown_ticks=3),
        output_dir=temp_dir / "outputs",
    )


@pytest.fixture
def payload_file(temp_dir: Path, rich_payload: dict[str, Any]) -> Path:
    """Write the mixed-variant payload to a JSON file and return its path."""
    path = temp_dir / "payload.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(rich_payload, f)
    return path
