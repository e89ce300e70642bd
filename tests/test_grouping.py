"""
Tests for grouping keys and the grouping engine.
"""

import networkx as nx
import pytest

from cortex_map.graph import (
    GroupingEngine,
    group_graph,
    ip_group_key,
    make_group_id,
    normalize_payload,
    service_category,
    subdomain_group_key,
)
from cortex_map.shared.models import GraphData, Node, NodeType


class TestGroupKeys:
    """Tests for the bucket key policies."""

    @pytest.mark.parametrize(
        "label,root,expected",
        [
            ("api.example.com", "example.com", "api"),
            ("api.v2.example.com", "example.com", "api"),
            ("example.com", "example.com", None),
            ("www.other.org", "example.com", "www"),
            ("other.org", None, None),
            ("", None, None),
        ],
    )
    def test_subdomain_key(self, label: str, root: str | None, expected: str | None) -> None:
        """Test the subdomain key is the first label in front of the root."""
        assert subdomain_group_key(label, root) == expected

    def test_ip_key(self) -> None:
        """Test IPs are keyed by their first octet or hextet."""
        assert ip_group_key("192.168.1.10") == "192"
        assert ip_group_key("2001:db8::1") == "2001"
        assert ip_group_key("not-an-ip") is None

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("https", "web"),
            ("ssh", "remote"),
            ("dns", "dns"),
            ("smtp", "email"),
            ("ftp", "file"),
            ("mysql", "other"),
        ],
    )
    def test_service_category(self, name: str, expected: str) -> None:
        """Test service names map to their category."""
        assert service_category(name) == expected


class TestGroupingEngine:
    """Tests for collapsing node classes into groups."""

    def test_disabled_returns_same_graph(self, large_graph: GraphData) -> None:
        """Test a disabled engine returns its input untouched."""
        assert GroupingEngine().apply(large_graph, 50, enabled=False) is large_graph

    def test_below_threshold_returns_same_graph(self, example_graph: GraphData) -> None:
        """Test nothing is grouped when no class exceeds the threshold."""
        assert group_graph(example_graph, 50, root_domain="ex.com") is example_graph

    def test_subdomains_grouped_by_prefix(self, large_graph: GraphData) -> None:
        """Test 120 subdomains collapse into four groups of thirty."""
        grouped = group_graph(large_graph, 50, root_domain="ex.com")
        groups = grouped.nodes_of_type(NodeType.SUBDOMAIN_GROUP)
        assert sorted(g.group for g in groups) == ["api", "dev", "prod", "staging"]
        assert all(g.member_count == 30 for g in groups)
        assert sum(g.member_count for g in groups) == 120
        assert grouped.nodes_of_type(NodeType.SUBDOMAIN) == []

    def test_group_node_attributes(self, large_graph: GraphData) -> None:
        """Test group nodes carry id, label and member labels."""
        grouped = group_graph(large_graph, 50, root_domain="ex.com")
        group = grouped.get_node(make_group_id(NodeType.SUBDOMAIN, "api"))
        assert group.label == "Subdomains api (30)"
        assert group.type == NodeType.SUBDOMAIN_GROUP
        assert "api.node0.ex.com" in group.data["members"]

    def test_small_classes_untouched(self, large_graph: GraphData) -> None:
        """Test classes at or under the threshold stay ungrouped."""
        grouped = group_graph(large_graph, 50, root_domain="ex.com")
        assert len(grouped.nodes_of_type(NodeType.IP)) == 12
        assert len(grouped.nodes_of_type(NodeType.SERVICE)) == 6
        assert len(grouped.nodes) == 23
        assert len(grouped.edges) == 22

    def test_low_threshold_groups_every_class(self, large_graph: GraphData) -> None:
        """Test IPs and services are grouped once they exceed the threshold."""
        grouped = group_graph(large_graph, 5, root_domain="ex.com")
        assert sorted(g.group for g in grouped.nodes_of_type(NodeType.IP_GROUP)) == [
            "10",
            "11",
            "12",
        ]
        services = grouped.nodes_of_type(NodeType.SERVICE_GROUP)
        assert [g.label for g in services] == ["Services web (6)"]
        assert len(grouped.nodes) == 9
        assert len(grouped.edges) == 10

    def test_reachability_preserved(self, large_graph: GraphData) -> None:
        """Test every original relationship survives between representatives."""
        grouped = group_graph(large_graph, 5, root_domain="ex.com")
        representative = {node.id: node.id for node in grouped.nodes}
        for node in grouped.nodes:
            for member_id in node.member_ids:
                representative[member_id] = node.id

        view = grouped.to_networkx()
        for edge in large_graph.edges:
            source = representative[edge.source]
            target = representative[edge.target]
            assert source == target or nx.has_path(view, source, target)

    def test_no_self_loops_or_duplicates(self, large_graph: GraphData) -> None:
        """Test rewritten edges are neither self loops nor duplicates."""
        grouped = group_graph(large_graph, 5, root_domain="ex.com")
        keys = [(e.source, e.target, e.kind) for e in grouped.edges]
        assert len(keys) == len(set(keys))
        assert all(source != target for source, target, _ in keys)

    def test_source_graph_unchanged(self, large_graph: GraphData) -> None:
        """Test grouping never modifies the normalized graph."""
        before = (large_graph.node_ids(), [e.id for e in large_graph.edges])
        group_graph(large_graph, 5, root_domain="ex.com")
        assert (large_graph.node_ids(), [e.id for e in large_graph.edges]) == before

    def test_singleton_buckets_stay(self) -> None:
        """Test a bucket with a single member keeps its ordinary node."""
        subdomains = [f"api.n{i}.ex.com" for i in range(4)] + ["mail.ex.com"]
        graph = normalize_payload({"target": "ex.com", "subdomains": subdomains})
        grouped = group_graph(graph, 3, root_domain="ex.com")
        assert grouped.get_node("subdomain-mail.ex.com") is not None
        assert grouped.get_node(make_group_id(NodeType.SUBDOMAIN, "api")).member_count == 4

    def test_custom_key_function(self, large_graph: GraphData) -> None:
        """Test key functions can be swapped per node type."""

        def everything(node: Node) -> str:
            return "all"

        engine = GroupingEngine(key_functions={NodeType.SUBDOMAIN: everything})
        grouped = engine.apply(large_graph, 50)
        groups = grouped.nodes_of_type(NodeType.SUBDOMAIN_GROUP)
        assert [g.member_count for g in groups] == [120]
