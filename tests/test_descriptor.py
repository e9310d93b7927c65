"""Tests for app descriptor normalization and lookup."""

from __future__ import annotations

import os

from mpscope.index.descriptor import AppDescriptor, normalize_descriptor, resolve_descriptor


class TestNormalizeDescriptor:
    def test_subpackage_synonyms(self):
        a = normalize_descriptor({"subPackages": [{"root": "a", "pages": ["p"]}]})
        b = normalize_descriptor({"subpackages": [{"root": "/a/", "pages": ["p"]}]})
        assert a.sub_packages == b.sub_packages
        assert a.sub_packages[0].root == "a"

    def test_malformed_entries_dropped(self):
        desc = normalize_descriptor({
            "pages": ["ok", 3, "", None],
            "subPackages": [{"pages": ["no-root"]}, "junk"],
            "tabBar": {"list": ["junk", {"pagePath": "p"}]},
            "usingComponents": {"a": "/c/a", "b": 5},
            "workers": 7,
        })
        assert desc.pages == ["ok"]
        assert desc.sub_packages == []
        assert [t.page_path for t in desc.tab_bar] == ["p"]
        assert desc.using_components == {"a": "/c/a"}
        assert desc.workers is None

    def test_workers_object(self):
        assert normalize_descriptor({"workers": {"path": "w"}}).workers == "w"

    def test_non_dict(self):
        assert normalize_descriptor([]) == AppDescriptor()

    def test_component_refs_skip_plugins(self):
        desc = normalize_descriptor({
            "usingComponents": {"a": "/c/a", "p": "plugin://x/y"},
            "componentGenerics": {"g": {"default": "/c/g"}},
        })
        assert desc.component_refs() == ["/c/a", "/c/g"]


class TestResolveDescriptor:
    def test_default_file(self, project_factory):
        proj = project_factory({"app.json": {"pages": ["a"]}})
        path, content = resolve_descriptor(str(proj))
        assert path == os.path.join(str(proj), "app.json")
        assert content == {"pages": ["a"]}

    def test_explicit_entry_file(self, project_factory):
        proj = project_factory({"alt/app.json": {"pages": ["b"]}, "app.json": {"pages": ["a"]}})
        path, content = resolve_descriptor(str(proj), entry_file="alt/app.json")
        assert path == os.path.join(str(proj), "alt", "app.json")
        assert content == {"pages": ["b"]}

    def test_injected_content_wins_over_file(self, project_factory):
        proj = project_factory({"app.json": {"pages": ["a"]}})
        path, content = resolve_descriptor(str(proj), entry_content={"pages": ["z"]})
        assert path == os.path.join(str(proj), "app.json")
        assert content == {"pages": ["z"]}

    def test_nothing_found(self, tmp_path):
        assert resolve_descriptor(str(tmp_path)) == (None, None)

    def test_unparseable_file_gives_empty_content(self, project_factory):
        proj = project_factory({"app.json": "{ nope"})
        path, content = resolve_descriptor(str(proj))
        assert path is not None
        assert content == {}
