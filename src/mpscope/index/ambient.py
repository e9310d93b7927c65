"""Detection of pure ambient type-declaration files.

A ``.d.ts`` file with no top-level ``import`` or ``export`` statement is a
global declaration: the compiler picks it up without any reference, so
it must count as used even though nothing in the graph points at it.
"""

from __future__ import annotations

import logging

from mpscope.index.parser import parse_source

log = logging.getLogger(__name__)

_MODULE_STATEMENTS = frozenset({"import_statement", "export_statement", "export_assignment"})


def is_pure_ambient(source: bytes) -> bool:
    tree = parse_source(source, "typescript")
    return not any(child.type in _MODULE_STATEMENTS for child in tree.root_node.named_children)


def find_ambient_declarations(paths) -> list[str]:
    """Return the subset of *paths* that are pure ambient declaration files."""
    found = []
    for path in paths:
        if not path.endswith(".d.ts"):
            continue
        try:
            with open(path, "rb") as f:
                source = f.read()
        except OSError as exc:
            log.warning("Could not read declaration file %s: %s", path, exc)
            continue
        if is_pure_ambient(source):
            found.append(path)
    if found:
        log.debug("Found %d pure ambient declaration files", len(found))
    return found
