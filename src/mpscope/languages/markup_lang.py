"""Markup extractor (``.wxml``, regex-only).

References extracted
--------------------
* ``<import src="..."/>``, ``<include src="..."/>`` -> kind "template"
* ``<wxs src="..." module="m"/>``                 -> kind "wxs"
* ``<image src="..."/>``                          -> kind "image"

Image sources that are data URIs, remote URLs or still contain a
``{{ }}`` expression are skipped.  HTML comments are ignored.

Besides references, this module collects tag usage (including
``generic:*`` attribute values) and class names for the lint and
style-purge collaborators; neither feeds the dependency graph.
"""

from __future__ import annotations

import re

from mpscope.index.relations import IMAGE_EXTENSIONS, is_external

from .base import ReferenceExtractor, line_of

_COMMENT_RE = re.compile(r"<!--.*?-->", re.S)

# <name attrs>; quoted attribute values may contain '>'
_TAG_RE = re.compile(r"<([A-Za-z][\w:.-]*)(?=[\s/>])((?:[^>\"']|\"[^\"]*\"|'[^']*')*)>", re.S)
# src not preceded by another attribute-name char
_SRC_ATTR_RE = re.compile(r"(?<![\w-])src\s*=\s*(['\"])(.*?)\1", re.S)
_GENERIC_ATTR_RE = re.compile(r"(?<![\w-])generic:[\w-]+\s*=\s*(['\"])(.*?)\1", re.S)
_CLASS_ATTR_RE = re.compile(r"(?<![\w-])(?:[\w]+-)?class\s*=\s*(['\"])(.*?)\1", re.S)
_EXPR_RE = re.compile(r"\{\{.*?\}\}", re.S)

_KIND_BY_TAG = {
    "import": "template",
    "include": "template",
    "wxs": "wxs",
    "image": "image",
}

_ALLOWED = {
    "template": (".wxml",),
    "wxs": (".wxs",),
    "image": IMAGE_EXTENSIONS,
}


def strip_comments(source: str) -> str:
    """Blank out HTML comments while keeping line numbers stable."""
    return _COMMENT_RE.sub(lambda m: "\n" * m.group(0).count("\n"), source)


class MarkupExtractor(ReferenceExtractor):

    @property
    def language_name(self) -> str:
        return "markup"

    @property
    def file_extensions(self) -> list[str]:
        return [".wxml"]

    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        return _ALLOWED.get(ref["kind"], (".wxml",))

    def extract_references(self, source: str, file_path: str) -> list[dict]:
        text = strip_comments(source)
        refs = []
        for m in _TAG_RE.finditer(text):
            kind = _KIND_BY_TAG.get(m.group(1))
            if kind is None:
                continue
            src = _SRC_ATTR_RE.search(m.group(2))
            if src is None:
                continue
            value = src.group(2).strip()
            if not value or "{{" in value:
                continue
            if kind == "image" and is_external(value):
                continue
            refs.append(self._make_reference(value, kind, line_of(text, m.start())))
        return refs


def collect_tag_usage(source: str) -> dict[str, int]:
    """Tag name -> occurrence count, in order of first appearance.

    A ``generic:slot="my-comp"`` attribute counts as a use of ``my-comp``.
    """
    text = strip_comments(source)
    usage: dict[str, int] = {}
    for m in _TAG_RE.finditer(text):
        usage[m.group(1)] = usage.get(m.group(1), 0) + 1
        for g in _GENERIC_ATTR_RE.finditer(m.group(2)):
            value = g.group(2).strip()
            if value:
                usage[value] = usage.get(value, 0) + 1
    return usage


def collect_class_names(source: str) -> list[str]:
    """Static class names used in ``class`` / ``*-class`` attributes (sorted).

    Parts inside ``{{ }}`` are dynamic and dropped; quoted literals within
    an expression are still reported since they are the only static hint.
    """
    text = strip_comments(source)
    names: set[str] = set()
    for m in _CLASS_ATTR_RE.finditer(text):
        value = m.group(2)
        for expr in _EXPR_RE.findall(value):
            for lit in re.findall(r"['\"]([\w\s-]+)['\"]", expr):
                names.update(lit.split())
        names.update(_EXPR_RE.sub(" ", value).split())
    return sorted(names)
