"""Typed, multi-relation dependency graph.

Nodes are keyed by the canonical absolute path of a file (``Module``
nodes) or by a synthetic id for structural nodes (``app``, ``pkg:<root>``,
``page:<base>``, ``comp:<base>``).  Edges carry a relation; two different
relations between the same pair are two edges, while re-adding an
identical ``(source, target, relation)`` triple is a no-op.

Backed by a NetworkX ``MultiDiGraph`` whose edge key is the relation.
"""

from __future__ import annotations

import logging

import networkx as nx

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------

KIND_APP = "App"
KIND_PACKAGE = "Package"
KIND_PAGE = "Page"
KIND_COMPONENT = "Component"
KIND_MODULE = "Module"

ALL_KINDS = frozenset({KIND_APP, KIND_PACKAGE, KIND_PAGE, KIND_COMPONENT, KIND_MODULE})

# ---------------------------------------------------------------------------
# Relations
# ---------------------------------------------------------------------------

REL_STRUCTURE = "Structure"
REL_IMPORT = "Import"
REL_TEMPLATE = "Template"
REL_STYLE = "Style"
REL_CONFIG = "Config"
REL_RESOURCE = "Resource"
REL_WORKER_ENTRY = "WorkerEntry"

ALL_RELATIONS = frozenset({
    REL_STRUCTURE, REL_IMPORT, REL_TEMPLATE, REL_STYLE,
    REL_CONFIG, REL_RESOURCE, REL_WORKER_ENTRY,
})

APP_NODE_ID = "app"


class DependencyGraph:
    """Directed graph of files and structural units with typed edges."""

    def __init__(self) -> None:
        self._g = nx.MultiDiGraph()

    # -- nodes -------------------------------------------------------------

    def add_node(self, node_id: str, kind: str, label: str | None = None, **properties) -> bool:
        """Insert a node.  Returns False if *node_id* already existed.

        Insertion is idempotent: the first registration of an id wins and
        later calls leave its kind, label and properties untouched.
        """
        if kind not in ALL_KINDS:
            raise ValueError(f"Unknown node kind: {kind}")
        if node_id in self._g:
            return False
        self._g.add_node(node_id, kind=kind, label=label or node_id, properties=properties)
        return True

    def has_node(self, node_id: str) -> bool:
        return node_id in self._g

    def node(self, node_id: str) -> dict:
        """Return ``{"id", "kind", "label", "properties"}`` for *node_id*."""
        attrs = self._g.nodes[node_id]
        return {
            "id": node_id,
            "kind": attrs["kind"],
            "label": attrs["label"],
            "properties": dict(attrs["properties"]),
        }

    def kind(self, node_id: str) -> str:
        return self._g.nodes[node_id]["kind"]

    def nodes(self, kind: str | None = None) -> list[str]:
        """Node ids in insertion order, optionally restricted to one kind."""
        if kind is None:
            return list(self._g.nodes)
        return [n for n, k in self._g.nodes(data="kind") if k == kind]

    # -- edges -------------------------------------------------------------

    def add_edge(self, source: str, target: str, relation: str) -> bool:
        """Insert a typed edge.  Returns True only when a new edge was added.

        Both endpoints must already be nodes; an edge to an unknown id is
        refused with a warning so that no node is ever created implicitly.
        """
        if relation not in ALL_RELATIONS:
            raise ValueError(f"Unknown relation: {relation}")
        if source not in self._g or target not in self._g:
            log.warning("Refusing edge between unknown nodes: %s -> %s", source, target)
            return False
        if self._g.has_edge(source, target, key=relation):
            return False
        self._g.add_edge(source, target, key=relation)
        return True

    def has_edge(self, source: str, target: str, relation: str | None = None) -> bool:
        if relation is None:
            return self._g.has_edge(source, target)
        return self._g.has_edge(source, target, key=relation)

    def out_edges(self, node_id: str) -> list[tuple[str, str, str]]:
        """``(source, target, relation)`` triples leaving *node_id*."""
        if node_id not in self._g:
            return []
        return list(self._g.out_edges(node_id, keys=True))

    def in_edges(self, node_id: str) -> list[tuple[str, str, str]]:
        """``(source, target, relation)`` triples entering *node_id*."""
        if node_id not in self._g:
            return []
        return list(self._g.in_edges(node_id, keys=True))

    def successors(self, node_id: str) -> list[str]:
        if node_id not in self._g:
            return []
        return list(self._g.successors(node_id))

    def edges(self) -> list[tuple[str, str, str]]:
        return list(self._g.edges(keys=True))

    # -- sizes ---------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return self._g.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._g.number_of_edges()

    def __contains__(self, node_id) -> bool:
        return node_id in self._g

    def __len__(self) -> int:
        return self._g.number_of_nodes()

    # -- lifecycle -------------------------------------------------------------

    def freeze(self) -> "DependencyGraph":
        """Make the graph immutable; further mutation raises ``NetworkXError``."""
        nx.freeze(self._g)
        return self

    @property
    def frozen(self) -> bool:
        return nx.is_frozen(self._g)

    @property
    def nx_graph(self) -> nx.MultiDiGraph:
        """Read-only view of the underlying NetworkX graph."""
        return self._g.copy(as_view=True)

    # -- export ----------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serializable ``{"nodes": [...], "links": [...]}`` form.

        Every node entry has an ``id`` and every link a ``source`` and
        ``target``; kind, label and relation ride along for renderers.
        """
        nodes = []
        for node_id, attrs in self._g.nodes(data=True):
            nodes.append({
                "id": node_id,
                "kind": attrs["kind"],
                "label": attrs["label"],
                "properties": dict(attrs["properties"]),
            })
        links = [
            {"source": s, "target": t, "relation": rel}
            for s, t, rel in self._g.edges(keys=True)
        ]
        return {"nodes": nodes, "links": links}
