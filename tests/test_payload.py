"""
Tests for reconnaissance payload parsing.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from cortex_map.graph.payload import (
    IpEntry,
    ReconPayload,
    ServiceEntry,
    load_payload,
    parse_ip,
    parse_payload,
    parse_service,
    parse_subdomain,
    split_hostnames,
    split_ip_tokens,
)
from cortex_map.shared.exceptions import PayloadError


class TestSplitting:
    """Tests for whitespace-packed value expansion."""

    def test_split_hostnames(self) -> None:
        """Test packed host names are split into separate names."""
        assert split_hostnames("a.ex.com  b.ex.com\nc.ex.com") == [
            "a.ex.com",
            "b.ex.com",
            "c.ex.com",
        ]

    def test_split_ip_tokens_keeps_ipv4(self) -> None:
        """Test packed IP lists keep only dotted IPv4 tokens."""
        assert split_ip_tokens("1.1.1.1 junk 2.2.2.2") == ["1.1.1.1", "2.2.2.2"]

    def test_single_token_kept_as_is(self) -> None:
        """Test a lone non-IPv4 token still produces an entry."""
        assert split_ip_tokens("2001:db8::1") == ["2001:db8::1"]


class TestVariants:
    """Tests for string and record variants of list elements."""

    def test_subdomain_string_variant(self) -> None:
        """Test a plain string becomes a bare subdomain entry."""
        entries = parse_subdomain("api.ex.com")
        assert len(entries) == 1
        assert entries[0].name == "api.ex.com"
        assert entries[0].from_record is False

    def test_subdomain_record_variant(self) -> None:
        """Test a record accepts name, source and ips."""
        entries = parse_subdomain({"name": "api.ex.com", "source": "crtsh", "ips": ["1.2.3.4"]})
        assert entries[0].source == "crtsh"
        assert [ip.ip for ip in entries[0].ips] == ["1.2.3.4"]
        assert entries[0].from_record is True

    def test_subdomain_record_alternate_fields(self) -> None:
        """Test the subdomain/ip field spellings are accepted."""
        entries = parse_subdomain({"subdomain": "dev.ex.com", "ip": "10.0.0.2"})
        assert entries[0].name == "dev.ex.com"
        assert entries[0].ips == (IpEntry(ip="10.0.0.2"),)

    def test_subdomain_unknown_shape_dropped(self) -> None:
        """Test elements that are neither string nor record are dropped."""
        assert parse_subdomain(42) == []
        assert parse_subdomain({"source": "no name"}) == []

    def test_ip_record_with_nested_services(self) -> None:
        """Test nested services inherit the host IP."""
        entries = parse_ip(
            {"ip": "10.0.0.1", "ports": [80, "443"], "services": [{"port": 443, "service": "https"}]}
        )
        assert entries[0].ports == ("80", "443")
        assert entries[0].services[0].ip == "10.0.0.1"
        assert entries[0].services[0].port == 443

    def test_service_requires_record(self) -> None:
        """Test services given as strings are dropped."""
        assert parse_service("ftp") is None
        assert parse_service({}) is None

    def test_service_name_fallbacks(self) -> None:
        """Test display names fall back to the port, then to unknown."""
        assert parse_service({"port": 8080}).display_name == "Port 8080"
        assert ServiceEntry(ip=None, port=None).display_name == "unknown"
        assert parse_service({"port": "22", "name": "ssh"}).port == 22


class TestParsePayload:
    """Tests for whole-payload parsing."""

    def test_non_mapping_is_empty(self) -> None:
        """Test anything but a mapping yields an empty payload."""
        for raw in (None, [], "text", 3):
            payload = parse_payload(raw)
            assert payload == ReconPayload()
            assert payload.is_empty

    def test_wrong_shaped_lists_are_empty(self) -> None:
        """Test non-list fields are treated as empty lists."""
        payload = parse_payload({"target": "ex.com", "subdomains": "nope", "ips": {"a": 1}})
        assert payload.target == "ex.com"
        assert payload.subdomains == ()
        assert payload.ips == ()

    def test_mixed_payload(self, rich_payload: dict[str, Any]) -> None:
        """Test a payload mixing all variants parses every valid element."""
        payload = parse_payload(rich_payload)
        assert [s.name for s in payload.subdomains] == [
            "api.example.com",
            "dev.example.com",
            "www.example.com",
            "mail.example.com",
            "api.example.com",
        ]
        assert [d.domain for d in payload.domains] == ["example.com", "example.org"]
        assert [ip.ip for ip in payload.ips] == ["10.0.0.1", "192.168.1.10", "192.168.1.11"]
        assert len(payload.services) == 3
        assert payload.raw is rich_payload


class TestLoadPayload:
    """Tests for loading payload files."""

    def test_load_valid_file(self, payload_file: Path) -> None:
        """Test loading a JSON payload file."""
        payload = load_payload(payload_file)
        assert payload.target == "example.com"

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test a missing file raises PayloadError."""
        with pytest.raises(PayloadError) as exc_info:
            load_payload(temp_dir / "missing.json")
        assert "missing.json" in str(exc_info.value)

    def test_invalid_json(self, temp_dir: Path) -> None:
        """Test undecodable content raises PayloadError."""
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PayloadError):
            load_payload(path)

    def test_json_array_is_empty_payload(self, temp_dir: Path) -> None:
        """Test valid JSON of the wrong shape degrades to an empty payload."""
        path = temp_dir / "array.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        assert load_payload(path).is_empty
