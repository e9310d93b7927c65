"""List files no entry point reaches."""

from __future__ import annotations

import click

from mpscope.commands.resolve import run_analysis
from mpscope.exit_codes import EXIT_PARTIAL, exit_with
from mpscope.graph.model import KIND_MODULE
from mpscope.output.formatter import format_size, format_table, json_envelope, to_json


@click.command()
@click.option("--fail-on-unused", is_flag=True, help="Exit with code 6 when anything is unused")
@click.pass_context
def unused(ctx, fail_on_unused):
    """List unused files (unreachable from every entry point)."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    result = run_analysis(ctx)
    graph = result.graph

    rows = []
    for path in result.unused_files:
        props = graph.node(path)["properties"]
        rows.append([result.relative(path), format_size(props.get("size"))])

    summary = {
        "files": len(graph.nodes(KIND_MODULE)),
        "reachable": len(result.reachable_node_ids),
        "unused": len(result.unused_files),
        "degraded": len(result.failed_files),
    }

    if json_mode:
        click.echo(to_json(json_envelope(
            "unused",
            summary=summary,
            unused=[r[0] for r in rows],
            degraded=[result.relative(p) for p in result.failed_files],
        )))
    else:
        click.echo(f"=== Unused files ({len(rows)}) ===")
        click.echo(format_table(["path", "size"], rows))
        if result.failed_files:
            click.echo(f"\n{len(result.failed_files)} file(s) could not be parsed; run with -v for details.")

    if fail_on_unused and result.unused_files:
        exit_with(EXIT_PARTIAL, f"{len(result.unused_files)} unused file(s) found")
