"""Export the dependency graph as JSON."""

from __future__ import annotations

import click

from mpscope.commands.resolve import run_analysis
from mpscope.graph.tree import build_tree
from mpscope.output.formatter import to_json


@click.command("graph")
@click.option("--tree", "as_tree", is_flag=True, help="Export the structural tree instead of nodes/links")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Write to a file instead of stdout")
@click.pass_context
def graph_cmd(ctx, as_tree, output):
    """Export the graph (nodes/links) or the App/Package/Page/Component tree."""
    result = run_analysis(ctx)
    if as_tree:
        data = build_tree(result.graph)
    else:
        data = result.graph.to_dict()
        reachable = result.reachable_node_ids
        for node in data["nodes"]:
            node["reachable"] = node["id"] in reachable

    text = to_json(data)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        click.echo(f"Wrote graph to {output}")
    else:
        click.echo(text)
