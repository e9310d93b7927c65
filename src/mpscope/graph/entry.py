"""Entry-point and essential-file resolution.

The primary entry source is picked by precedence (first success wins):

1. an explicit entry file, when it exists and is a graph node;
2. injected descriptor content (the ``app`` node, which the builder has
   already walked into pages and components);
3. conventional default files at the miniapp root.

Essential files are unioned in regardless of which source won.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from mpscope.exit_codes import ConfigurationError
from mpscope.graph.model import APP_NODE_ID, DependencyGraph
from mpscope.index.ambient import find_ambient_declarations

log = logging.getLogger(__name__)

# Tooling files the project root may carry
PROJECT_ESSENTIALS = (
    "tsconfig.json",
    "jsconfig.json",
    "mpscope.config.json",
    "package.json",
    ".eslintrc.js",
    ".eslintrc.json",
    ".prettierrc",
    ".prettierrc.js",
    ".babelrc",
    "babel.config.js",
)

# Runtime config files the miniapp root may carry
MINIAPP_ESSENTIALS = (
    "app.json",
    "project.config.json",
    "project.private.config.json",
    "sitemap.json",
    "theme.json",
    "ext.json",
)

CONVENTIONAL_DEFAULTS = (
    "app.js",
    "app.ts",
    "app.json",
    "app.wxss",
    "project.config.json",
    "sitemap.json",
)

SOURCE_ENTRY_FILE = "entry_file"
SOURCE_CONTENT = "entry_content"
SOURCE_DEFAULTS = "defaults"


@dataclass
class EntrySet:
    primary: list[str] = field(default_factory=list)
    source: str | None = None
    essential: list[str] = field(default_factory=list)

    @property
    def all_ids(self) -> list[str]:
        """Primary entries followed by essentials, duplicates removed."""
        return list(dict.fromkeys(self.primary + self.essential))


class EntryPointResolver:
    """Pick the traversal roots for a built graph."""

    def __init__(
        self,
        graph: DependencyGraph,
        project_root: str,
        miniapp_root: str,
        entry_file: str | None = None,
        entry_content: dict | None = None,
        has_descriptor: bool = False,
        essential_files=(),
        ambient_candidates=(),
        type_files=(),
    ):
        self.graph = graph
        self.project_root = project_root
        self.miniapp_root = miniapp_root
        self.entry_file = entry_file
        self.entry_content = entry_content
        self.has_descriptor = has_descriptor or entry_content is not None
        self.essential_files = list(essential_files)
        self.ambient_candidates = list(ambient_candidates)
        self.type_files = list(type_files)

    def resolve(self) -> EntrySet:
        entries = EntrySet()
        self._resolve_primary(entries)
        entries.essential = self._essential_ids()

        if not entries.primary and not entries.essential:
            raise ConfigurationError(
                "No entry point found: no app.json, no entry file and no default "
                f"or essential files under {self.miniapp_root}. "
                "Pass --miniapp-root or --entry-file."
            )
        log.info(
            "Entry points (%s): %d primary, %d essential",
            entries.source or "none", len(entries.primary), len(entries.essential),
        )
        return entries

    def _resolve_primary(self, entries: EntrySet) -> None:
        app = [APP_NODE_ID] if self.has_descriptor and self.graph.has_node(APP_NODE_ID) else []

        if self.entry_file:
            path = os.path.normpath(os.path.join(self.miniapp_root, self.entry_file))
            if self.graph.has_node(path):
                entries.primary = [path] + app
                entries.source = SOURCE_ENTRY_FILE
                return
            log.warning("Entry file %s is not a scanned file; falling back", self.entry_file)

        if self.entry_content is not None and app:
            entries.primary = app
            entries.source = SOURCE_CONTENT
            return

        defaults = [
            p for p in (os.path.join(self.miniapp_root, name) for name in CONVENTIONAL_DEFAULTS)
            if self.graph.has_node(p)
        ]
        if defaults or app:
            entries.primary = defaults + app
            entries.source = SOURCE_DEFAULTS

    def _essential_ids(self) -> list[str]:
        found: list[str] = []
        for name in PROJECT_ESSENTIALS:
            path = os.path.join(self.project_root, name)
            if self.graph.has_node(path):
                found.append(path)
        for name in MINIAPP_ESSENTIALS:
            path = os.path.join(self.miniapp_root, name)
            if self.graph.has_node(path):
                found.append(path)

        for name in self.essential_files:
            path = self._locate_user_essential(name)
            if path is None:
                log.warning("Essential file not found among scanned files: %s", name)
            else:
                found.append(path)

        for path in self.type_files:
            if self.graph.has_node(path):
                found.append(path)
            else:
                log.debug("Type file outside the scan: %s", path)

        for path in find_ambient_declarations(self.ambient_candidates):
            if self.graph.has_node(path):
                found.append(path)
        return list(dict.fromkeys(found))

    def _locate_user_essential(self, name: str) -> str | None:
        if os.path.isabs(name):
            path = os.path.normpath(name)
            return path if self.graph.has_node(path) else None
        for root in (self.miniapp_root, self.project_root):
            path = os.path.normpath(os.path.join(root, name))
            if self.graph.has_node(path):
                return path
        return None
