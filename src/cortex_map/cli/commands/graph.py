"""
Graph command: build, group and lay out a payload and summarize the result.
"""

import sys
from pathlib import Path

import click
from rich.table import Table

from ...graph import load_payload
from ...layout import LAYOUT_ENGINES
from ...session import MapSession
from ...shared.exceptions import CortexMapError, wrap_external_error
from ...shared.models import BASE_NODE_TYPES, NodeType


def build_summary_table(session: MapSession) -> Table:
    """Node and edge counts per type, in total and currently visible."""
    table = Table(title=f"Graph for {session.payload.target or 'unknown target'}")
    table.add_column("Type", style="cyan")
    table.add_column("Nodes", justify="right")
    table.add_column("Visible", justify="right")

    for node_type in NodeType:
        total = len(session.graph.nodes_of_type(node_type))
        if total == 0:
            continue
        visible = sum(1 for node in session.visible.nodes if node.type == node_type)
        table.add_row(node_type.value, str(total), str(visible))

    table.add_row("edges", str(len(session.graph.edges)), str(len(session.visible.edges)))
    return table


def prepare_session(
    ctx: click.Context,
    payload_path: Path,
    layout: str | None,
    group: bool,
    threshold: int | None,
) -> MapSession:
    """Create a session for a payload file and run its layout to rest."""
    session = MapSession(ctx.obj["config"], layout=layout)
    session.set_grouping(group, threshold)
    session.load(load_payload(payload_path))
    session.run_layout()
    return session


@click.command()
@click.argument("payload_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--layout",
    "-l",
    type=click.Choice(sorted(LAYOUT_ENGINES)),
    default=None,
    help="Layout strategy (default from configuration)",
)
@click.option("--group/--no-group", default=False, help="Collapse large node classes into groups")
@click.option("--threshold", type=click.IntRange(min=0), help="Grouping threshold per node class")
@click.option("--search", "-s", default="", help="Highlight nodes whose label contains TEXT")
@click.option("--node-limit", type=click.IntRange(min=1), help="Maximum visible nodes per type")
@click.option(
    "--hide",
    multiple=True,
    type=click.Choice([t.value for t in BASE_NODE_TYPES]),
    help="Hide a node type (can be repeated)",
)
@click.pass_context
def graph(ctx, payload_path, layout, group, threshold, search, node_limit, hide):
    """Build the relationship graph for PAYLOAD_PATH and print a summary."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    try:
        session = prepare_session(ctx, payload_path, layout, group, threshold)
        for type_name in hide:
            session.set_type_visible(NodeType(type_name), False)
        if node_limit is not None:
            session.set_node_limit(node_limit)

        if session.graph.is_empty:
            output.warning(f"No target or results in {payload_path.name}; the graph is empty")
        output.table(build_summary_table(session))
        if output.is_verbose:
            layout_config = session.layout_engine.get_layout_config()
            output.info(f"Layout parameters: {layout_config}", markup=False)

        if search:
            matches = session.search(search)
            output.info(f"Search '{search}' matched {len(matches)} nodes")

        scene = session.scene()
        output.success(
            f"Laid out {len(scene.nodes)} visible nodes with the {session.layout_name} layout"
        )
        session.close()

    except CortexMapError as e:
        logger.error(f"Graph build failed: {e}")
        output.error(str(e))
        sys.exit(1)
    except (OSError, ValueError) as e:
        wrapped = wrap_external_error(e)
        logger.error(f"Unexpected failure: {wrapped}")
        output.error(str(wrapped))
        sys.exit(1)
