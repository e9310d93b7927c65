"""File discovery: the candidate files that become graph nodes."""

from __future__ import annotations

import fnmatch
import logging
import os

log = logging.getLogger(__name__)

DEFAULT_FILE_TYPES = (
    ".js", ".ts", ".wxml", ".wxss", ".json",
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".wxs",
)

# Directories never scanned
SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn", "node_modules", "miniprogram_npm",
    "__pycache__", ".idea", ".vscode",
})


def normalize_file_types(types) -> tuple[str, ...]:
    """Accept ``"js,ts"``, ``["js", ".ts"]`` or None; return dotted suffixes."""
    if not types:
        return DEFAULT_FILE_TYPES
    if isinstance(types, str):
        types = types.split(",")
    result = []
    for t in types:
        t = str(t).strip()
        if not t:
            continue
        result.append(t if t.startswith(".") else "." + t)
    return tuple(dict.fromkeys(result)) or DEFAULT_FILE_TYPES


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Match a forward-slash relative path against one glob pattern.

    ``*`` may cross directory separators.  A leading ``**/`` also matches
    at the top level, and a trailing ``/`` or ``/**`` matches everything
    below that directory.
    """
    pattern = pattern.strip().replace("\\", "/")
    if not pattern:
        return False
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if pattern.endswith("/"):
        pattern += "**"
    if fnmatch.fnmatch(rel_path, pattern):
        return True
    if pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:]):
        return True
    if pattern.endswith("/**"):
        prefix = pattern[:-3]
        return fnmatch.fnmatch(rel_path, prefix) or fnmatch.fnmatch(rel_path, prefix + "/*")
    return False


def is_excluded(rel_path: str, patterns) -> bool:
    return any(matches_glob(rel_path, p) for p in patterns or ())


def _has_suffix(name: str, suffixes: tuple[str, ...]) -> bool:
    lower = name.lower()
    return any(lower.endswith(s) for s in suffixes)


def discover_files(root, file_types=None, exclude_patterns=()) -> list[str]:
    """Walk *root* and return sorted absolute paths of candidate files.

    Keeps files whose name ends with one of *file_types* (so ``.d.ts``
    counts as ``.ts``) and drops those matching an exclude glob, matched
    against the path relative to *root*.
    """
    root = os.path.abspath(root)
    suffixes = tuple(s.lower() for s in normalize_file_types(file_types))
    patterns = [p for p in exclude_patterns or () if p]
    result = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [
            d for d in dirnames
            if d not in SKIP_DIRS and not d.startswith(".")
        ]
        for fname in filenames:
            if not _has_suffix(fname, suffixes):
                continue
            full = os.path.join(dirpath, fname)
            rel = os.path.relpath(full, root).replace("\\", "/")
            if patterns and is_excluded(rel, patterns):
                continue
            result.append(full)
    result.sort()
    log.info("Discovered %d candidate files under %s", len(result), root)
    return result
