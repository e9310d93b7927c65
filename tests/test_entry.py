"""Tests for entry-point precedence, essentials and reachability."""

from __future__ import annotations

import logging
import os

import pytest

from mpscope.exit_codes import ConfigurationError
from mpscope.graph.entry import (
    SOURCE_CONTENT,
    SOURCE_DEFAULTS,
    SOURCE_ENTRY_FILE,
    EntryPointResolver,
    EntrySet,
)
from mpscope.graph.model import APP_NODE_ID, KIND_APP, KIND_MODULE, REL_IMPORT, DependencyGraph
from mpscope.graph.reachability import find_reachable_nodes, find_unused_files

ROOT = os.path.abspath("/proj")


def P(rel):
    return os.path.join(ROOT, rel)


def _graph(*rels, app=True):
    g = DependencyGraph()
    if app:
        g.add_node(APP_NODE_ID, KIND_APP, "App")
    for rel in rels:
        g.add_node(P(rel), KIND_MODULE, rel)
    return g


class TestPrimaryPrecedence:
    def test_explicit_entry_file_wins(self):
        g = _graph("main.js", "app.js")
        entries = EntryPointResolver(g, ROOT, ROOT, entry_file="main.js", has_descriptor=True).resolve()
        assert entries.source == SOURCE_ENTRY_FILE
        assert entries.primary == [P("main.js"), APP_NODE_ID]

    def test_missing_entry_file_falls_back(self, caplog):
        g = _graph("app.js")
        with caplog.at_level(logging.WARNING):
            entries = EntryPointResolver(g, ROOT, ROOT, entry_file="main.js", has_descriptor=True).resolve()
        assert entries.source == SOURCE_DEFAULTS
        assert "main.js" in caplog.text

    def test_injected_content_uses_app_node(self):
        g = _graph("app.js")
        entries = EntryPointResolver(g, ROOT, ROOT, entry_content={"pages": []}).resolve()
        assert entries.source == SOURCE_CONTENT
        assert entries.primary == [APP_NODE_ID]

    def test_conventional_defaults(self):
        g = _graph("app.js", "app.wxss", "sitemap.json", "other.js")
        entries = EntryPointResolver(g, ROOT, ROOT, has_descriptor=True).resolve()
        assert entries.source == SOURCE_DEFAULTS
        assert entries.primary == [P("app.js"), P("app.wxss"), P("sitemap.json"), APP_NODE_ID]

    def test_app_node_not_an_entry_without_descriptor(self):
        g = _graph("app.js")
        entries = EntryPointResolver(g, ROOT, ROOT, has_descriptor=False).resolve()
        assert APP_NODE_ID not in entries.primary


class TestEssentials:
    def test_tooling_and_user_essentials(self):
        g = _graph("app.js", "package.json", "tsconfig.json", "ext.json", "keep/me.js")
        entries = EntryPointResolver(
            g, ROOT, ROOT, has_descriptor=True, essential_files=["keep/me.js", "absent.js"],
        ).resolve()
        assert P("package.json") in entries.essential
        assert P("tsconfig.json") in entries.essential
        assert P("ext.json") in entries.essential
        assert P("keep/me.js") in entries.essential
        assert all("absent" not in e for e in entries.essential)

    def test_user_essential_resolves_against_project_root_second(self):
        g = DependencyGraph()
        g.add_node(os.path.join(ROOT, "scripts/build.js"), KIND_MODULE)
        g.add_node(os.path.join(ROOT, "mini/app.js"), KIND_MODULE)
        entries = EntryPointResolver(
            g, ROOT, os.path.join(ROOT, "mini"), essential_files=["scripts/build.js"],
        ).resolve()
        assert entries.essential == [os.path.join(ROOT, "scripts/build.js")]

    def test_type_files_join_essentials_when_scanned(self):
        g = _graph("app.js", "typings/wx-ext.d.ts")
        entries = EntryPointResolver(
            g, ROOT, ROOT, has_descriptor=True,
            type_files=[P("typings/wx-ext.d.ts"), P("outside/gone.d.ts")],
        ).resolve()
        assert entries.essential == [P("typings/wx-ext.d.ts")]

    def test_all_ids_deduplicates(self):
        entries = EntrySet(primary=["a", "b"], essential=["b", "c"])
        assert entries.all_ids == ["a", "b", "c"]

    def test_nothing_found_is_fatal(self):
        g = _graph("lib/x.js", app=False)
        with pytest.raises(ConfigurationError):
            EntryPointResolver(g, ROOT, ROOT).resolve()


class TestReachability:
    def test_follows_outgoing_edges_only(self):
        g = _graph("a.js", "b.js", "c.js")
        g.add_edge(P("a.js"), P("b.js"), REL_IMPORT)
        g.add_edge(P("c.js"), P("a.js"), REL_IMPORT)
        assert find_reachable_nodes(g, [P("a.js")]) == {P("a.js"), P("b.js")}

    def test_unknown_entries_skipped(self, caplog):
        g = _graph("a.js")
        with caplog.at_level(logging.WARNING):
            assert find_reachable_nodes(g, ["nope", P("a.js")]) == {P("a.js")}
        assert "nope" in caplog.text

    def test_membership_independent_of_seed_order(self):
        g = _graph("a.js", "b.js", "c.js", "d.js")
        g.add_edge(P("a.js"), P("b.js"), REL_IMPORT)
        g.add_edge(P("b.js"), P("c.js"), REL_IMPORT)
        g.add_edge(P("c.js"), P("a.js"), REL_IMPORT)
        seeds = [P("c.js"), P("a.js")]
        assert find_reachable_nodes(g, seeds) == find_reachable_nodes(g, list(reversed(seeds)))


class TestUnusedFiles:
    def test_images_and_keep_globs(self):
        g = _graph("a.js", "dead.js", "img/x.png", "vendor/lib.js")
        unused = find_unused_files(g, {P("a.js")}, ROOT, ROOT, keep_patterns=["vendor/**"])
        assert unused == [P("dead.js")]
        unused = find_unused_files(g, {P("a.js")}, ROOT, ROOT, include_assets=True)
        assert unused == [P("dead.js"), P("img/x.png"), P("vendor/lib.js")]

    def test_structural_nodes_never_reported(self):
        g = _graph("a.js")
        assert APP_NODE_ID not in find_unused_files(g, set(), ROOT, ROOT)
