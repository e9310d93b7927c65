"""Path-alias table built from tsconfig/jsconfig and the project config.

The table maps an alias prefix (``@``, ``@components``, ``utils``) to an
ordered list of absolute base directories.  It is built once per run and
never mutated afterwards; when a prefix maps to several directories the
first one listed is used.
"""

from __future__ import annotations

import json
import logging
import os

log = logging.getLogger(__name__)

TSCONFIG_NAMES = ("tsconfig.json", "jsconfig.json")
PROJECT_CONFIG_NAME = "mpscope.config.json"


def _strip_wildcard(pattern: str) -> str:
    """``@/*`` -> ``@``, ``src/*`` -> ``src``, ``lib`` -> ``lib``."""
    if pattern.endswith("/*"):
        return pattern[:-2]
    if pattern.endswith("*"):
        return pattern[:-1].rstrip("/")
    return pattern.rstrip("/")


def _read_json_object(path: str) -> dict | None:
    """Read *path* as a JSON object, or log a warning and return None."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        log.warning("Ignoring alias source %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        log.warning("Ignoring alias source %s: top level is not an object", path)
        return None
    return data


def load_tsconfig_paths(config_path: str) -> dict[str, list[str]]:
    """Return the ``compilerOptions.paths`` table of one tsconfig file.

    Keys and targets have their wildcard suffix stripped; targets are
    made absolute against ``baseUrl`` (itself relative to the config
    file's directory).  A malformed file yields an empty table.
    """
    data = _read_json_object(config_path)
    if data is None:
        return {}
    options = data.get("compilerOptions")
    if not isinstance(options, dict):
        return {}
    paths = options.get("paths")
    if not isinstance(paths, dict):
        return {}

    config_dir = os.path.dirname(os.path.abspath(config_path))
    base_url = options.get("baseUrl")
    base_dir = os.path.normpath(os.path.join(config_dir, base_url)) if isinstance(base_url, str) else config_dir

    table: dict[str, list[str]] = {}
    for pattern, targets in paths.items():
        if not isinstance(pattern, str):
            continue
        if isinstance(targets, str):
            targets = [targets]
        if not isinstance(targets, list):
            log.warning("Alias %r in %s has no target list", pattern, config_path)
            continue
        dirs = [
            os.path.normpath(os.path.join(base_dir, _strip_wildcard(t)))
            for t in targets
            if isinstance(t, str)
        ]
        prefix = _strip_wildcard(pattern)
        if dirs and prefix:
            table[prefix] = dirs
    return table


def find_tsconfig(project_root: str, miniapp_root: str | None = None) -> str | None:
    """First tsconfig/jsconfig found at the project root, then the miniapp root."""
    for root in dict.fromkeys(r for r in (project_root, miniapp_root) if r):
        for name in TSCONFIG_NAMES:
            candidate = os.path.join(root, name)
            if os.path.isfile(candidate):
                return candidate
    return None


_TYPE_FILE_SUFFIXES = (".d.ts", ".ts")


def load_tsconfig_types(config_path: str) -> list[str]:
    """Local files named by ``compilerOptions.types``.

    Entries starting with ``.`` or containing a path separator are paths
    relative to the config file; anything else is a package name and is
    skipped.  A directory entry contributes every file below it, and an
    entry without a suffix may name a ``.d.ts``/``.ts`` file.
    """
    data = _read_json_object(config_path)
    options = (data or {}).get("compilerOptions")
    if not isinstance(options, dict):
        return []
    types = options.get("types")
    if not isinstance(types, list):
        return []

    config_dir = os.path.dirname(os.path.abspath(config_path))
    found: list[str] = []
    for entry in types:
        if not isinstance(entry, str):
            continue
        if not (entry.startswith(".") or "/" in entry or "\\" in entry):
            log.debug("Skipping package type reference %s", entry)
            continue
        path = os.path.normpath(os.path.join(config_dir, entry))
        if os.path.isdir(path):
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames.sort()
                found.extend(os.path.join(dirpath, f) for f in sorted(filenames))
            continue
        for candidate in (path,) + tuple(path + s for s in _TYPE_FILE_SUFFIXES):
            if os.path.isfile(candidate):
                found.append(candidate)
                break
        else:
            log.warning("Type reference %r in %s does not exist", entry, config_path)
    return list(dict.fromkeys(found))


def normalize_custom_aliases(aliases: dict, project_root: str) -> dict[str, list[str]]:
    """Normalize a user alias map (``str`` or ``list[str]`` values) to absolute dirs."""
    table: dict[str, list[str]] = {}
    if not isinstance(aliases, dict):
        log.warning("Ignoring custom aliases: expected an object, got %s", type(aliases).__name__)
        return table
    for prefix, targets in aliases.items():
        if isinstance(targets, str):
            targets = [targets]
        if not isinstance(prefix, str) or not isinstance(targets, list):
            log.warning("Ignoring malformed alias entry %r", prefix)
            continue
        dirs = [
            os.path.normpath(os.path.join(project_root, _strip_wildcard(t)))
            for t in targets
            if isinstance(t, str)
        ]
        prefix = _strip_wildcard(prefix)
        if dirs and prefix:
            table[prefix] = dirs
    return table


class AliasResolver:
    """Alias prefix -> base directory lookup for one analysis run."""

    def __init__(self, project_root: str, miniapp_root: str | None = None,
                 custom_aliases: dict | None = None):
        self.project_root = os.path.abspath(project_root)
        self.miniapp_root = os.path.abspath(miniapp_root) if miniapp_root else self.project_root
        self._custom = custom_aliases
        self._table: dict[str, list[str]] = {}
        self._prefixes: tuple[str, ...] = ()
        self._initialized = False

    def initialize(self) -> bool:
        """Load alias sources.  Returns True if at least one alias exists.

        Custom aliases (from the caller or from ``mpscope.config.json``)
        override tsconfig entries for the same prefix.
        """
        if self._initialized:
            return bool(self._table)
        table: dict[str, list[str]] = {}

        tsconfig = find_tsconfig(self.project_root, self.miniapp_root)
        if tsconfig is not None:
            table.update(load_tsconfig_paths(tsconfig))

        custom = self._custom
        if custom is None:
            config_path = os.path.join(self.project_root, PROJECT_CONFIG_NAME)
            if os.path.isfile(config_path):
                data = _read_json_object(config_path)
                custom = (data or {}).get("aliases")
        if custom:
            table.update(normalize_custom_aliases(custom, self.project_root))

        self._table = table
        # Longest prefix first so "@components" beats "@"
        self._prefixes = tuple(sorted(table, key=len, reverse=True))
        self._initialized = True
        if table:
            log.debug("Alias table: %s", table)
        return bool(table)

    def aliases(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._table.items()}

    def has_aliases(self) -> bool:
        return bool(self._table)

    def match(self, ref: str) -> str | None:
        """Return the alias prefix that *ref* falls under, if any."""
        for prefix in self._prefixes:
            if ref == prefix or ref.startswith(prefix + "/"):
                return prefix
        return None

    def resolve(self, ref: str, containing_file: str | None = None) -> str | None:
        """Map *ref* onto its alias target directory.

        Returns the absolute base path (not yet checked for existence or
        extension), or None when no alias prefix matches.
        """
        prefix = self.match(ref)
        if prefix is None:
            return None
        remainder = ref[len(prefix):].lstrip("/")
        base = self._table[prefix][0]
        resolved = os.path.normpath(os.path.join(base, remainder)) if remainder else base
        log.debug("Alias %s: %s -> %s (from %s)", prefix, ref, resolved, containing_file)
        return resolved
