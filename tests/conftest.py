"""Shared test fixtures and helpers for mpscope tests.

Provides:
- Factory fixture: project_factory for writing mini-program file trees
- A ready-made sample project: miniapp_project
- CliRunner fixtures: cli_runner, invoke_cli()
- JSON validation helpers: parse_json_output(), assert_json_envelope()
"""

from __future__ import annotations

import json
import os

import pytest
from click.testing import CliRunner

# ===========================================================================
# Project fixtures
# ===========================================================================


def write_files(root, files):
    """Write ``{relative_path: content}`` under *root*.

    Dict and list contents are written as JSON; bytes are written raw.
    """
    for rel_path, content in files.items():
        fp = root / rel_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            fp.write_text(json.dumps(content, indent=2), encoding="utf-8")
        elif isinstance(content, bytes):
            fp.write_bytes(content)
        else:
            fp.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def project_factory(tmp_path_factory):
    """Factory fixture for creating custom project layouts.

    Usage:
        def test_something(project_factory):
            proj = project_factory({
                "app.json": {"pages": ["pages/a"]},
                "pages/a.js": "Page({})",
            })

    Returns a callable that accepts a dict of {relative_path: content}
    and returns the project path.
    """

    def _create(files):
        proj = tmp_path_factory.mktemp("project")
        return write_files(proj, files)

    return _create


SAMPLE_PROJECT = {
    "app.json": {
        "pages": ["pages/index/index"],
        "usingComponents": {"nav-bar": "/components/nav-bar/nav-bar"},
        "subPackages": [{"root": "pkg", "pages": ["detail/detail"]}],
    },
    "app.js": "const util = require('./utils/util')\nApp({})\n",
    "app.wxss": "@import './styles/base.wxss';\n",
    "styles/base.wxss": "page { background: url('/images/bg.png'); }\n",
    "images/bg.png": b"\x89PNG",
    "images/orphan.png": b"\x89PNG",
    "utils/util.js": "module.exports = {}\n",
    "utils/dead.js": "module.exports = {}\n",
    "pages/index/index.js": "import { fmt } from '../../utils/format'\nPage({})\n",
    "pages/index/index.json": {"usingComponents": {"card": "/components/card/card"}},
    "pages/index/index.wxml": '<import src="../../tpl/header.wxml"/>\n<card/>\n',
    "pages/index/index.wxss": ".title { color: red; }\n",
    "utils/format.js": "export function fmt() {}\n",
    "tpl/header.wxml": "<template name=\"header\"><view/></template>\n",
    "components/nav-bar/nav-bar.js": "Component({})\n",
    "components/nav-bar/nav-bar.json": {"component": True},
    "components/nav-bar/nav-bar.wxml": "<view/>\n",
    "components/card/card.js": "Component({})\n",
    "components/card/card.json": {"component": True},
    "components/card/card.wxml": "<view/>\n",
    "components/unused-widget/unused-widget.js": "Component({})\n",
    "components/unused-widget/unused-widget.wxml": "<view/>\n",
    "pkg/detail/detail.js": "Page({})\n",
    "pkg/detail/detail.wxml": "<view/>\n",
}


@pytest.fixture
def miniapp_project(project_factory):
    """A small mini-program with a few dead files."""
    return project_factory(SAMPLE_PROJECT)


def rel_paths(paths, root):
    """Absolute paths -> sorted forward-slash paths relative to *root*."""
    root = os.path.realpath(str(root))
    return sorted(os.path.relpath(p, root).replace(os.sep, "/") for p in paths)


# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False):
    """Invoke the mpscope CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["unused"])
        cwd: project directory, passed as --project
        json_mode: if True, prepend --json flag
    Returns:
        click.testing.Result
    """
    from mpscope.cli import cli

    full_args = []
    if cwd:
        full_args.extend(["--project", str(cwd)])
    if json_mode:
        full_args.append("--json")
    full_args.extend(args)
    return runner.invoke(cli, full_args, catch_exceptions=False)


def parse_json_output(result, command=None):
    """Parse JSON from a CliRunner result.

    Raises AssertionError with context on a non-zero exit or parse failure.
    """
    assert result.exit_code == 0, f"Command {command or '?'} failed (exit {result.exit_code}):\n{result.output}"
    try:
        return json.loads(result.output)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.output[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the mpscope envelope contract."""
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    assert "command" in data, "Missing 'command' key in envelope"
    assert "version" in data, "Missing 'version' key in envelope"
    assert "summary" in data, "Missing 'summary' key in envelope"
    assert "timestamp" in data.get("_meta", {}), "Missing 'timestamp' in _meta"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    assert isinstance(data["summary"], dict), f"summary should be dict, got {type(data['summary'])}"
