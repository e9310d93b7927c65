"""Flat graph to nested structural tree, for visualization and export."""

from __future__ import annotations

from mpscope.graph.model import (
    APP_NODE_ID,
    KIND_COMPONENT,
    KIND_MODULE,
    KIND_PACKAGE,
    KIND_PAGE,
    REL_STRUCTURE,
    DependencyGraph,
)

_KIND_ORDER = {KIND_PACKAGE: 0, KIND_PAGE: 1, KIND_COMPONENT: 2}


def build_tree(graph: DependencyGraph, root_id: str = APP_NODE_ID) -> dict | None:
    """Nest the structural nodes reachable from *root_id* via Structure edges.

    Module nodes are left out.  Siblings are ordered Package, Page,
    Component, then by label.  A node repeated on its own ancestor path
    is emitted once more with ``"cycle": True`` and no children.
    """
    if not graph.has_node(root_id):
        return None
    return _build(graph, root_id, set())


def _build(graph: DependencyGraph, node_id: str, path: set[str]) -> dict:
    info = graph.node(node_id)
    entry = {"id": node_id, "label": info["label"], "kind": info["kind"], "children": []}
    if node_id in path:
        entry["cycle"] = True
        return entry

    path = path | {node_id}
    child_ids = []
    for _, target, relation in graph.out_edges(node_id):
        if relation != REL_STRUCTURE or graph.kind(target) == KIND_MODULE:
            continue
        if target not in child_ids:
            child_ids.append(target)

    child_ids.sort(key=lambda c: (_KIND_ORDER.get(graph.kind(c), 9), graph.node(c)["label"]))
    entry["children"] = [_build(graph, c, path) for c in child_ids]
    return entry
