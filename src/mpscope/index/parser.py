"""Tree-sitter parsing for script sources."""

from __future__ import annotations

import os
from functools import lru_cache

# Grammar per script extension; .wxs is ES5 JavaScript
_GRAMMARS = {
    ".js": "javascript",
    ".wxs": "javascript",
    ".ts": "typescript",
}


def grammar_for_file(path: str) -> str:
    return _GRAMMARS.get(os.path.splitext(path)[1].lower(), "javascript")


@lru_cache(maxsize=None)
def get_ts_parser(grammar: str):
    """Return a cached tree-sitter parser for *grammar*."""
    from tree_sitter_language_pack import get_parser

    return get_parser(grammar)


def parse_source(source: bytes, grammar: str):
    """Parse *source* and return the tree-sitter tree."""
    return get_ts_parser(grammar).parse(source)


def node_text(node, source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
