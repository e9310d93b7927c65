"""Reachability over the dependency graph and the unused-file set."""

from __future__ import annotations

import logging
import os
from collections import deque

from mpscope.graph.model import KIND_MODULE, DependencyGraph
from mpscope.index.discovery import matches_glob
from mpscope.index.relations import is_image_path

log = logging.getLogger(__name__)


def find_reachable_nodes(graph: DependencyGraph, entry_ids) -> set[str]:
    """BFS from *entry_ids* along outgoing edges of any relation.

    Parameters
    ----------
    graph : DependencyGraph
        The built graph.
    entry_ids : iterable[str]
        Seed node ids.  Ids that are not graph nodes are skipped.

    Returns
    -------
    set[str]
        All reachable node ids, seeds included.  Membership does not
        depend on traversal order.
    """
    seeds = []
    for node_id in entry_ids:
        if graph.has_node(node_id):
            seeds.append(node_id)
        else:
            log.warning("Entry %s is not a graph node; skipped", node_id)

    visited = set(seeds)
    queue = deque(seeds)
    while queue:
        current = queue.popleft()
        for neighbor in graph.successors(current):
            if neighbor not in visited and graph.has_node(neighbor):
                visited.add(neighbor)
                queue.append(neighbor)

    log.info("Reachable: %d of %d nodes", len(visited), graph.node_count)
    return visited


def _rel(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def is_kept(path: str, keep_patterns, project_root: str, miniapp_root: str) -> bool:
    """True when *path* matches a keep glob, relative to either root."""
    if not keep_patterns:
        return False
    candidates = {_rel(path, project_root), _rel(path, miniapp_root)}
    return any(matches_glob(rel, pattern) for pattern in keep_patterns for rel in candidates)


def find_unused_files(
    graph: DependencyGraph,
    reachable,
    project_root: str,
    miniapp_root: str,
    keep_patterns=(),
    include_assets: bool = False,
) -> list[str]:
    """Module nodes not in *reachable*, minus kept files and (by default) images.

    Returns sorted absolute paths.
    """
    reachable = set(reachable)
    unused = []
    skipped_assets = 0
    for node_id in graph.nodes(KIND_MODULE):
        if node_id in reachable:
            continue
        if is_kept(node_id, keep_patterns, project_root, miniapp_root):
            continue
        if not include_assets and is_image_path(node_id):
            skipped_assets += 1
            continue
        unused.append(node_id)

    if skipped_assets:
        log.debug("Left out %d unreferenced image assets (use include_assets to report them)", skipped_assets)
    unused.sort()
    return unused
