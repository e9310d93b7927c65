"""CLI tests: unused, clean and graph commands via CliRunner."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from conftest import assert_json_envelope, invoke_cli, parse_json_output

from mpscope.exit_codes import EXIT_CONFIG, EXIT_PARTIAL

EXPECTED_UNUSED = [
    "components/unused-widget/unused-widget.js",
    "components/unused-widget/unused-widget.wxml",
    "utils/dead.js",
]


class TestUnused:
    def test_text_output(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["unused"], cwd=miniapp_project)
        assert result.exit_code == 0, result.output
        assert "Unused files (3)" in result.output
        for rel in EXPECTED_UNUSED:
            assert rel in result.output

    def test_json_envelope(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["unused"], cwd=miniapp_project, json_mode=True)
        data = parse_json_output(result, "unused")
        assert_json_envelope(data, "unused")
        assert data["unused"] == EXPECTED_UNUSED
        assert data["summary"]["unused"] == 3
        assert data["summary"]["degraded"] == 0

    def test_include_assets_flag(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["--include-assets", "unused"], cwd=miniapp_project, json_mode=True)
        data = parse_json_output(result, "unused")
        assert "images/orphan.png" in data["unused"]

    def test_exclude_and_essential_flags(self, cli_runner, miniapp_project):
        result = invoke_cli(
            cli_runner,
            ["--exclude", "components/unused-widget/", "--essential", "utils/dead.js", "unused"],
            cwd=miniapp_project, json_mode=True,
        )
        data = parse_json_output(result, "unused")
        assert data["unused"] == []

    def test_project_config_file_is_merged(self, cli_runner, project_factory):
        proj = project_factory({
            "mpscope.config.json": {"miniappRoot": "miniprogram", "keepAssets": ["utils/keep.js"]},
            "miniprogram/app.json": {"pages": ["pages/a"]},
            "miniprogram/pages/a.js": "",
            "miniprogram/utils/keep.js": "",
            "miniprogram/utils/dead.js": "",
        })
        result = invoke_cli(cli_runner, ["unused"], cwd=proj, json_mode=True)
        data = parse_json_output(result, "unused")
        assert data["unused"] == ["miniprogram/utils/dead.js"]

    def test_fail_on_unused(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["unused", "--fail-on-unused"], cwd=miniapp_project)
        assert result.exit_code == EXIT_PARTIAL

    def test_configuration_error_exit_code(self, cli_runner, project_factory):
        proj = project_factory({"lib/a.js": ""})
        result = invoke_cli(cli_runner, ["unused"], cwd=proj)
        assert result.exit_code == EXIT_CONFIG
        assert "app.json" in result.output


class TestClean:
    def test_dry_run_deletes_nothing(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["clean"], cwd=miniapp_project)
        assert result.exit_code == 0, result.output
        assert "Would delete 3 file(s)" in result.output
        assert (miniapp_project / "utils/dead.js").exists()

    def test_write_deletes_unused_files(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["clean", "--write"], cwd=miniapp_project, json_mode=True)
        data = parse_json_output(result, "clean")
        assert_json_envelope(data, "clean")
        assert data["summary"]["dry_run"] is False
        assert data["files"] == EXPECTED_UNUSED
        assert not (miniapp_project / "utils/dead.js").exists()
        assert (miniapp_project / "utils/util.js").exists()
        assert (miniapp_project / "images/orphan.png").exists()

        again = parse_json_output(invoke_cli(cli_runner, ["clean"], cwd=miniapp_project, json_mode=True))
        assert again["files"] == []


class TestGraph:
    def test_nodes_and_links(self, cli_runner, miniapp_project):
        result = invoke_cli(cli_runner, ["graph"], cwd=miniapp_project)
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        ids = {n["id"] for n in data["nodes"]}
        assert "app" in ids
        assert "page:pages/index/index" in ids
        dead = os.path.join(os.path.realpath(str(miniapp_project)), "utils", "dead.js")
        by_id = {n["id"]: n for n in data["nodes"]}
        assert by_id[dead]["reachable"] is False
        assert by_id["app"]["reachable"] is True
        assert all({"source", "target", "relation"} <= set(link) for link in data["links"])

    def test_tree_to_file(self, cli_runner, miniapp_project, tmp_path):
        out = tmp_path / "tree.json"
        result = invoke_cli(cli_runner, ["graph", "--tree", "--output", str(out)], cwd=miniapp_project)
        assert result.exit_code == 0, result.output
        tree = json.loads(out.read_text(encoding="utf-8"))
        assert tree["id"] == "app"
        kinds = [c["kind"] for c in tree["children"]]
        assert kinds == ["Package", "Page", "Component"]


class TestHelp:
    def test_lists_commands(self, cli_runner):
        result = invoke_cli(cli_runner, ["--help"])
        assert result.exit_code == 0
        for name in ("unused", "clean", "graph"):
            assert name in result.output
