"""Analysis options and the ``mpscope.config.json`` project config."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from mpscope.index.aliases import PROJECT_CONFIG_NAME

log = logging.getLogger(__name__)

# Accepted spellings for each option field
_KEY_ALIASES = {
    "file_types": ("fileTypes", "file_types", "types"),
    "exclude_patterns": ("excludePatterns", "exclude_patterns", "exclude"),
    "essential_files": ("essentialFiles", "essential_files"),
    "miniapp_root": ("miniappRoot", "miniapp_root"),
    "entry_file": ("entryFile", "entry_file", "appJsonPath"),
    "entry_content": ("entryContent", "entry_content", "appJsonContent"),
    "include_assets": ("includeAssets", "include_assets"),
    "keep_assets": ("keepAssets", "keep_assets"),
    "aliases": ("aliases",),
}

_KNOWN_KEYS = {k for keys in _KEY_ALIASES.values() for k in keys}


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


@dataclass
class AnalyzeOptions:
    file_types: list[str] | None = None
    exclude_patterns: list[str] = field(default_factory=list)
    essential_files: list[str] = field(default_factory=list)
    miniapp_root: str | None = None
    entry_file: str | None = None
    entry_content: dict | None = None
    include_assets: bool = False
    keep_assets: list[str] = field(default_factory=list)
    aliases: dict | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "AnalyzeOptions":
        """Build options from camelCase or snake_case keys; unknown keys warn."""
        data = data or {}
        for key in data:
            if key not in _KNOWN_KEYS:
                log.warning("Ignoring unknown option %r", key)

        values: dict[str, Any] = {}
        for name, keys in _KEY_ALIASES.items():
            for key in keys:
                if key in data and data[key] is not None:
                    values[name] = data[key]
                    break

        if "file_types" in values:
            values["file_types"] = _as_list(values["file_types"]) or None
        for name in ("exclude_patterns", "essential_files", "keep_assets"):
            if name in values:
                values[name] = _as_list(values[name])
        if "include_assets" in values:
            values["include_assets"] = bool(values["include_assets"])
        if "entry_content" in values and not isinstance(values["entry_content"], dict):
            log.warning("Ignoring entry content: expected a JSON object")
            del values["entry_content"]
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_project_config(root) -> dict[str, Any]:
    """Read ``mpscope.config.json`` from *root*.

    A missing file yields ``{}``; a malformed one is logged and ignored.
    """
    config_path = Path(root) / PROJECT_CONFIG_NAME
    if not config_path.exists():
        return {}
    try:
        cfg = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("Ignoring malformed %s: %s", config_path, exc)
        return {}
    if not isinstance(cfg, dict):
        log.warning("Ignoring %s: top level is not an object", config_path)
        return {}
    log.debug("Loaded project config from %s", config_path)
    return cfg


def merge_options(cli: dict[str, Any] | None, file_cfg: dict[str, Any] | None) -> AnalyzeOptions:
    """Merge command-line values over the project config file.

    A CLI value wins whenever it is set (not None, not an empty list,
    not False).
    """
    merged = AnalyzeOptions.from_mapping(file_cfg)
    override = AnalyzeOptions.from_mapping(
        {k: v for k, v in (cli or {}).items() if v not in (None, (), [], False)}
    )
    for f in fields(AnalyzeOptions):
        value = getattr(override, f.name)
        if value not in (None, [], False):
            setattr(merged, f.name, value)
    return merged
