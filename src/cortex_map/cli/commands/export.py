"""
Export command: write JSON, PDF and PNG artifacts for a payload.
"""

import sys
from dataclasses import replace
from pathlib import Path

import click

from ...export import EXPORT_FORMATS
from ...layout import LAYOUT_ENGINES
from ...shared.exceptions import CortexMapError, wrap_external_error
from ...shared.models import ExportSettings
from .graph import prepare_session


@click.command()
@click.argument("payload_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "export_format",
    type=click.Choice([*EXPORT_FORMATS, "all"]),
    default="all",
    help="Artifact to produce",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default from configuration)",
)
@click.option("--layout", "-l", type=click.Choice(sorted(LAYOUT_ENGINES)), default=None)
@click.option("--group/--no-group", default=False, help="Group the graph shown in the image")
@click.option("--no-graph", is_flag=True, help="Leave the graph image out of the report")
@click.option("--no-subdomains", is_flag=True, help="Leave subdomains out")
@click.option("--no-ips", is_flag=True, help="Leave IP addresses out")
@click.option("--no-services", is_flag=True, help="Leave services out")
@click.option("--no-paginate", is_flag=True, help="Render each table as one unbounded section")
@click.option("--no-fit", is_flag=True, help="Do not shrink the graph image to fit the page")
@click.option("--items-per-page", type=click.IntRange(min=1), help="Table rows per page")
@click.pass_context
def export(
    ctx,
    payload_path,
    export_format,
    output_dir,
    layout,
    group,
    no_graph,
    no_subdomains,
    no_ips,
    no_services,
    no_paginate,
    no_fit,
    items_per_page,
):
    """Export the graph and tables for PAYLOAD_PATH."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    config = ctx.obj["config"]
    if output_dir is not None:
        config = replace(config, output_dir=output_dir)
        ctx.obj["config"] = config

    settings = ExportSettings(
        include_graph=not no_graph,
        include_subdomains=not no_subdomains,
        include_ips=not no_ips,
        include_services=not no_services,
        paginate=not no_paginate,
        fit_to_page=not no_fit,
        items_per_page=items_per_page or config.items_per_page,
    )
    formats = EXPORT_FORMATS if export_format == "all" else (export_format,)

    try:
        session = prepare_session(ctx, payload_path, layout, group, None)
        paths = session.export(formats, settings)
        session.close()

        for fmt, path in paths.items():
            output.success(f"{fmt.upper()} written: {path}")
        logger.info(f"Exported {', '.join(paths)} for {session.payload.target}")

    except CortexMapError as e:
        logger.error(f"Export failed: {e}")
        output.error(str(e))
        sys.exit(1)
    except (OSError, ValueError) as e:
        wrapped = wrap_external_error(e)
        logger.error(f"Unexpected failure: {wrapped}")
        output.error(str(wrapped))
        sys.exit(1)
