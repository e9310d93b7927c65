"""Script extractor (``.js`` / ``.ts`` and ``.wxs`` modules).

Parses with tree-sitter so references inside comments and ordinary
string literals are never reported.

References extracted
--------------------
* ``import x from './a'``, ``import './a'``, ``import type {T} from './t'``
                                              -> kind "import"
* ``export {x} from './a'``, ``export * from './a'`` -> kind "import"
* ``require('./a')``, ``import x = require('./a')`` -> kind "require"
* ``import('./a')``                            -> kind "dynamic_import"

Template literals count only when they carry no ``${}`` substitution.
"""

from __future__ import annotations

from mpscope.index.parser import grammar_for_file, node_text, parse_source

from .base import ReferenceExtractor

SCRIPT_TARGET_EXTENSIONS = (".js", ".ts", ".json")
WXS_TARGET_EXTENSIONS = (".wxs",)


def _literal_value(node, source: bytes) -> str | None:
    """Unquoted value of a string / substitution-free template literal."""
    if node is None:
        return None
    if node.type == "string":
        return node_text(node, source)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return node_text(node, source)[1:-1]
    return None


def _first_argument(call, source: bytes) -> str | None:
    args = call.child_by_field_name("arguments")
    if args is None or not args.named_children:
        return None
    return _literal_value(args.named_children[0], source)


class ScriptExtractor(ReferenceExtractor):
    """Imports, re-exports, ``require()`` and dynamic ``import()`` targets."""

    # Reference kinds this extractor reports; .wxs narrows it to require()
    _kinds = frozenset({"import", "require", "dynamic_import"})

    @property
    def language_name(self) -> str:
        return "script"

    @property
    def file_extensions(self) -> list[str]:
        return [".js", ".ts"]

    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        return SCRIPT_TARGET_EXTENSIONS

    def extract_references(self, source: str, file_path: str) -> list[dict]:
        data = source.encode("utf-8")
        tree = parse_source(data, grammar_for_file(file_path))
        refs = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            found = self._reference_at(node, data)
            if found is not None:
                value, kind = found
                if value and kind in self._kinds:
                    refs.append(self._make_reference(value, kind, node.start_point[0] + 1))
            stack.extend(reversed(node.children))
        return refs

    def _reference_at(self, node, data: bytes) -> tuple[str | None, str] | None:
        ntype = node.type
        if ntype in ("import_statement", "export_statement"):
            src = node.child_by_field_name("source")
            if src is not None:
                return _literal_value(src, data), "import"
            return None
        if ntype == "import_require_clause":
            return _literal_value(node.child_by_field_name("source"), data), "require"
        if ntype == "call_expression":
            fn = node.child_by_field_name("function")
            if fn is None:
                return None
            if fn.type == "import":
                return _first_argument(node, data), "dynamic_import"
            if fn.type == "identifier" and node_text(fn, data) == "require":
                return _first_argument(node, data), "require"
        return None


class WxsExtractor(ScriptExtractor):
    """Script-module files: ``require()`` of other ``.wxs`` files only."""

    _kinds = frozenset({"require"})

    @property
    def language_name(self) -> str:
        return "wxs"

    @property
    def file_extensions(self) -> list[str]:
        return [".wxs"]

    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        return WXS_TARGET_EXTENSIONS
