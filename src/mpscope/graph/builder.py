"""Build the dependency graph for one analysis run.

A :class:`StructureBuilder` owns its node and edge maps for exactly one
``build()`` call.  The build has three phases:

1. every scanned file becomes a ``Module`` node;
2. the app descriptor is walked into structural nodes (App, Package,
   Page, Component) and structural edges;
3. every ``Module`` node is parsed once, in scan order, and its resolved
   references become edges.

Files are processed one at a time.  A file that cannot be read or parsed
keeps its node with zero outgoing edges and is recorded in
``failed_files``; nothing short of a fatal configuration problem aborts
the build.
"""

from __future__ import annotations

import json
import logging
import os
from collections import deque

from mpscope.graph.model import (
    APP_NODE_ID,
    KIND_APP,
    KIND_COMPONENT,
    KIND_MODULE,
    KIND_PACKAGE,
    KIND_PAGE,
    REL_CONFIG,
    REL_IMPORT,
    REL_RESOURCE,
    REL_STRUCTURE,
    REL_STYLE,
    REL_TEMPLATE,
    REL_WORKER_ENTRY,
    DependencyGraph,
)
from mpscope.index.descriptor import AppDescriptor, normalize_descriptor, subpackage_page_path
from mpscope.index.relations import PathResolver, cluster_files
from mpscope.languages.config_lang import CLUSTER_EXTENSIONS
from mpscope.languages.registry import extractor_for_file

log = logging.getLogger(__name__)

# Files at the miniapp root the runtime loads without any reference
IMPLICIT_GLOBAL_FILES = ("app.js", "app.ts", "app.wxss", "project.config.json", "sitemap.json")

_WORKER_SCRIPT_EXTENSIONS = (".js", ".ts")


def _rel(path: str, root: str) -> str:
    return os.path.relpath(path, root).replace(os.sep, "/")


def relation_for(source_path: str, target_path: str) -> str:
    """Edge relation for a file-to-file reference."""
    src = os.path.splitext(source_path)[1].lower()
    tgt = os.path.splitext(target_path)[1].lower()
    if src == ".wxml" and tgt == ".wxml":
        return REL_TEMPLATE
    if src == ".wxss" and tgt == ".wxss":
        return REL_STYLE
    return REL_IMPORT


def structural_node_id(kind: str, base_path: str, miniapp_root: str) -> tuple[str, str]:
    """``(id, label)`` of a Page or Component rooted at absolute *base_path*."""
    rel = _rel(base_path, miniapp_root)
    prefix = "page" if kind == KIND_PAGE else "comp"
    return f"{prefix}:{rel}", rel


class StructureBuilder:
    """Single-use builder of the project dependency graph."""

    def __init__(
        self,
        project_root: str,
        miniapp_root: str,
        files: list[str],
        resolver: PathResolver,
        descriptor_path: str | None = None,
        descriptor: dict | None = None,
    ):
        self.project_root = project_root
        self.miniapp_root = miniapp_root
        self.files = list(files)
        self.resolver = resolver
        self.descriptor_path = descriptor_path
        self.descriptor = descriptor
        self.failed_files: list[str] = []

        self._graph = DependencyGraph()
        self._parsed: set[str] = set()
        self._seen_configs: set[str] = set()
        self._pending_configs: deque[tuple[str, str]] = deque()
        self._built = False

    @property
    def descriptor_anchor(self) -> str:
        """File that descriptor-level references are resolved from."""
        return self.descriptor_path or os.path.join(self.miniapp_root, "app.json")

    def build(self) -> DependencyGraph:
        if self._built:
            raise RuntimeError("StructureBuilder.build() may only be called once")
        self._built = True

        for path in self.files:
            self._add_file_node(path)
        log.info("Initialized %d module nodes from file scan", self._graph.node_count)

        self._graph.add_node(APP_NODE_ID, KIND_APP, "App", path=self.descriptor_path)
        if self.descriptor_path and self._graph.has_node(self.descriptor_path):
            self._graph.add_edge(APP_NODE_ID, self.descriptor_path, REL_CONFIG)

        self._walk_descriptor(normalize_descriptor(self.descriptor or {}))
        self._link_implicit_globals()

        for node_id in self._graph.nodes(KIND_MODULE):
            self._parse_module(node_id)

        log.info(
            "Structure complete: %d nodes, %d edges, %d files degraded",
            self._graph.node_count, self._graph.edge_count, len(self.failed_files),
        )
        return self._graph.freeze()

    # -- nodes ---------------------------------------------------------------

    def _add_file_node(self, path: str) -> None:
        try:
            size = os.path.getsize(path)
        except OSError:
            size = None
        self._graph.add_node(
            path,
            KIND_MODULE,
            _rel(path, self.project_root),
            absolute_path=path,
            size=size,
            extension=os.path.splitext(path)[1].lower(),
        )

    def _link(self, source: str, target: str, relation: str) -> None:
        if self._graph.has_node(target):
            self._graph.add_edge(source, target, relation)
        else:
            log.debug("Not linking %s -> %s: target was not scanned", source, target)

    # -- descriptor walk -------------------------------------------------------

    def _walk_descriptor(self, desc: AppDescriptor) -> None:
        for page in desc.pages:
            self._add_page(APP_NODE_ID, page)

        for pkg in desc.sub_packages:
            package_id = f"pkg:{pkg.root}"
            self._graph.add_node(
                package_id, KIND_PACKAGE, pkg.root,
                root=os.path.join(self.miniapp_root, pkg.root),
            )
            self._graph.add_edge(APP_NODE_ID, package_id, REL_STRUCTURE)
            for page in pkg.pages:
                self._add_page(package_id, subpackage_page_path(pkg.root, page))

        for ref in desc.component_refs():
            self._add_component(APP_NODE_ID, ref, self.descriptor_anchor)

        for item in desc.tab_bar:
            if item.page_path:
                self._add_page(APP_NODE_ID, item.page_path)
            for icon in (item.icon_path, item.selected_icon_path):
                if icon:
                    self._link_single_file(APP_NODE_ID, icon, REL_RESOURCE)

        if desc.theme_location:
            self._link_single_file(APP_NODE_ID, desc.theme_location, REL_CONFIG)
        self._link_single_file(APP_NODE_ID, "theme.json", REL_CONFIG, warn=False)

        if desc.workers:
            self._link_workers(desc.workers)

        self._drain_component_configs()

    def _add_page(self, parent_id: str, page_path: str) -> None:
        page_path = page_path.strip("/")
        resolved = self.resolver.resolve("/" + page_path, self.descriptor_anchor, CLUSTER_EXTENSIONS)
        if resolved is None:
            log.warning("Page %s has no files on disk", page_path)
            base = os.path.join(self.miniapp_root, page_path)
            files = []
        else:
            base = os.path.splitext(resolved)[0]
            files = cluster_files(resolved, CLUSTER_EXTENSIONS)
        page_id, label = structural_node_id(KIND_PAGE, base, self.miniapp_root)
        self._graph.add_node(page_id, KIND_PAGE, label, basePath=base)
        self._graph.add_edge(parent_id, page_id, REL_STRUCTURE)
        self._link_cluster(page_id, files)

    def _add_component(self, parent_id: str, ref: str, containing_file: str) -> None:
        resolved = self.resolver.resolve(ref, containing_file, CLUSTER_EXTENSIONS)
        if resolved is None:
            log.warning("Component %r used by %s could not be resolved", ref, _rel(containing_file, self.project_root))
            return
        base = os.path.splitext(resolved)[0]
        comp_id, label = structural_node_id(KIND_COMPONENT, base, self.miniapp_root)
        if not self._graph.add_node(comp_id, KIND_COMPONENT, label, basePath=base):
            self._graph.add_edge(parent_id, comp_id, REL_STRUCTURE)
            return
        self._graph.add_edge(parent_id, comp_id, REL_STRUCTURE)
        self._link_cluster(comp_id, cluster_files(resolved, CLUSTER_EXTENSIONS))

    def _link_cluster(self, owner_id: str, files: list[str]) -> None:
        for path in files:
            relation = REL_CONFIG if path.endswith(".json") else REL_STRUCTURE
            self._link(owner_id, path, relation)
            if path.endswith(".json") and path not in self._seen_configs:
                self._seen_configs.add(path)
                self._pending_configs.append((owner_id, path))

    def _drain_component_configs(self) -> None:
        """Turn each page/component JSON's component references into nodes.

        Worklist driven; a component already in the graph is only linked,
        so component cycles terminate.
        """
        while self._pending_configs:
            owner_id, json_path = self._pending_configs.popleft()
            try:
                with open(json_path, encoding="utf-8") as f:
                    raw = json.load(f)
            except (OSError, ValueError) as exc:
                log.warning("Failed to read component config %s: %s", _rel(json_path, self.project_root), exc)
                continue
            for ref in normalize_descriptor(raw).component_refs():
                self._add_component(owner_id, ref, json_path)

    def _link_single_file(self, source_id: str, ref: str, relation: str, warn: bool = True,
                          allowed=()) -> None:
        resolved = self.resolver.resolve(ref, self.descriptor_anchor, allowed)
        if resolved is None or not self._graph.has_node(resolved):
            if warn:
                log.warning("File referenced by the app descriptor not found: %s", ref)
            return
        self._graph.add_edge(source_id, resolved, relation)

    def _link_workers(self, workers: str) -> None:
        """Workers may name a directory (every script below it) or one file."""
        target = os.path.normpath(os.path.join(self.miniapp_root, workers.strip("/")))
        if os.path.isdir(target):
            prefix = target + os.sep
            linked = 0
            for node_id in self._graph.nodes(KIND_MODULE):
                if node_id.startswith(prefix) and node_id.endswith(_WORKER_SCRIPT_EXTENSIONS):
                    self._graph.add_edge(APP_NODE_ID, node_id, REL_WORKER_ENTRY)
                    linked += 1
            log.debug("Linked %d worker scripts under %s", linked, workers)
            return
        self._link_single_file(APP_NODE_ID, workers, REL_WORKER_ENTRY, allowed=_WORKER_SCRIPT_EXTENSIONS)

    def _link_implicit_globals(self) -> None:
        for name in IMPLICIT_GLOBAL_FILES:
            path = os.path.join(self.miniapp_root, name)
            if self._graph.has_node(path):
                self._graph.add_edge(APP_NODE_ID, path, REL_STRUCTURE)

    # -- per-file references ---------------------------------------------------

    def _parse_module(self, path: str) -> None:
        if path in self._parsed:
            return
        self._parsed.add(path)
        extractor = extractor_for_file(path)
        if extractor is None:
            return

        label = _rel(path, self.project_root)
        try:
            with open(path, encoding="utf-8") as f:
                source = f.read()
            refs = extractor.extract_references(source, path)
        except Exception as exc:
            log.warning("Failed to parse %s: %s", label, exc)
            self.failed_files.append(path)
            return

        for ref in refs:
            resolved = self.resolver.resolve(ref["path"], path, extractor.allowed_extensions(ref))
            if resolved is None:
                log.debug("Unresolved %s reference %r in %s", ref["kind"], ref["path"], label)
                continue
            if extractor.expands_cluster(ref):
                targets = cluster_files(resolved, extractor.allowed_extensions(ref))
            else:
                targets = [resolved]
            for target in targets:
                if target != path:
                    self._link(path, target, relation_for(path, target))


def build_graph(project_root, miniapp_root, files, resolver, descriptor_path=None, descriptor=None):
    """Convenience wrapper: build and return ``(graph, failed_files)``."""
    builder = StructureBuilder(
        project_root, miniapp_root, files, resolver,
        descriptor_path=descriptor_path, descriptor=descriptor,
    )
    graph = builder.build()
    return graph, builder.failed_files
