"""Dependency graph construction and traversal."""

from mpscope.graph.builder import StructureBuilder, build_graph
from mpscope.graph.entry import EntryPointResolver, EntrySet
from mpscope.graph.model import DependencyGraph
from mpscope.graph.reachability import find_reachable_nodes, find_unused_files
from mpscope.graph.tree import build_tree

__all__ = [
    "DependencyGraph",
    "StructureBuilder",
    "build_graph",
    "EntryPointResolver",
    "EntrySet",
    "find_reachable_nodes",
    "find_unused_files",
    "build_tree",
]
