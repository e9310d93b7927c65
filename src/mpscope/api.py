"""Programmatic entry point: ``analyze(project_root, options)``.

One call is one fresh pass: scan, build, resolve entries, traverse.  No
state survives between calls.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from mpscope.config import AnalyzeOptions
from mpscope.exit_codes import ConfigurationError
from mpscope.graph.builder import StructureBuilder
from mpscope.graph.entry import EntryPointResolver, EntrySet
from mpscope.graph.model import DependencyGraph
from mpscope.graph.reachability import find_reachable_nodes, find_unused_files
from mpscope.index.aliases import AliasResolver, find_tsconfig, load_tsconfig_types
from mpscope.index.descriptor import resolve_descriptor
from mpscope.index.discovery import discover_files
from mpscope.index.relations import PathResolver

log = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    graph: DependencyGraph
    unused_files: list[str]
    reachable_node_ids: set[str]
    entry_ids: list[str] = field(default_factory=list)
    project_root: str = ""
    miniapp_root: str = ""
    failed_files: list[str] = field(default_factory=list)

    def relative(self, path: str) -> str:
        """*path* relative to the project root, forward slashes."""
        return os.path.relpath(path, self.project_root).replace(os.sep, "/")


def _coerce_options(options) -> AnalyzeOptions:
    if options is None:
        return AnalyzeOptions()
    if isinstance(options, AnalyzeOptions):
        return options
    return AnalyzeOptions.from_mapping(options)


def _miniapp_root(project_root: str, opts: AnalyzeOptions) -> str:
    if not opts.miniapp_root:
        return project_root
    root = os.path.normpath(os.path.join(project_root, opts.miniapp_root))
    if not os.path.isdir(root):
        raise ConfigurationError(f"Miniapp root does not exist or is not a directory: {root}")
    return os.path.realpath(root)


def analyze(project_root, options=None) -> AnalysisResult:
    """Build the dependency graph of *project_root* and compute unused files.

    *options* is an :class:`AnalyzeOptions` or a mapping with camelCase
    or snake_case keys.  Raises :class:`ConfigurationError` when no
    descriptor content and no entry point can be found.
    """
    opts = _coerce_options(options)
    if not os.path.isdir(project_root):
        raise ConfigurationError(f"Project root does not exist: {project_root}")
    project_root = os.path.realpath(project_root)
    miniapp_root = _miniapp_root(project_root, opts)
    log.info("Analyzing %s (miniapp root %s)", project_root, miniapp_root)

    files = discover_files(miniapp_root, opts.file_types, opts.exclude_patterns)

    aliases = AliasResolver(project_root, miniapp_root, custom_aliases=opts.aliases)
    aliases.initialize()
    resolver = PathResolver(project_root, miniapp_root, aliases)
    tsconfig = find_tsconfig(project_root, miniapp_root)
    type_files = load_tsconfig_types(tsconfig) if tsconfig else []

    descriptor_path, descriptor = resolve_descriptor(miniapp_root, opts.entry_file, opts.entry_content)
    if descriptor is None:
        explicit = (
            os.path.normpath(os.path.join(miniapp_root, opts.entry_file))
            if opts.entry_file else None
        )
        if explicit is None or explicit not in files:
            raise ConfigurationError(
                f"No app.json found under {miniapp_root} and no entry content was given. "
                "Check --miniapp-root or pass --entry-file."
            )
        log.warning("No app descriptor; analyzing from entry file %s only", opts.entry_file)

    builder = StructureBuilder(
        project_root, miniapp_root, files, resolver,
        descriptor_path=descriptor_path, descriptor=descriptor,
    )
    graph = builder.build()

    entries: EntrySet = EntryPointResolver(
        graph,
        project_root,
        miniapp_root,
        entry_file=opts.entry_file,
        entry_content=opts.entry_content,
        has_descriptor=descriptor is not None,
        essential_files=opts.essential_files,
        ambient_candidates=[f for f in files if f.endswith(".d.ts")],
        type_files=type_files,
    ).resolve()

    reachable = find_reachable_nodes(graph, entries.all_ids)
    unused = find_unused_files(
        graph, reachable, project_root, miniapp_root,
        keep_patterns=opts.keep_assets,
        include_assets=opts.include_assets,
    )
    log.info("Found %d unused files", len(unused))
    return AnalysisResult(
        graph=graph,
        unused_files=unused,
        reachable_node_ids=reachable,
        entry_ids=entries.all_ids,
        project_root=project_root,
        miniapp_root=miniapp_root,
        failed_files=list(builder.failed_files),
    )
