"""Stylesheet extractor (``.wxss``, regex-only).

References extracted
--------------------
* ``@import "a.wxss";`` / ``@import url(a.wxss);`` -> kind "style_import"
* ``url(../img/bg.png)``                        -> kind "url"

Data URIs, remote URLs and template expressions are skipped; query
strings and fragments (``font.woff?v=2#x``) are stripped.
"""

from __future__ import annotations

import re

from mpscope.index.relations import IMAGE_EXTENSIONS, is_external, is_image_path

from .base import ReferenceExtractor, line_of

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.S)
_IMPORT_RE = re.compile(
    r"@import\s+(?:url\(\s*(['\"]?)([^'\")]+)\1\s*\)|(['\"])(.*?)\3)",
    re.S,
)
_URL_RE = re.compile(r"url\(\s*(['\"]?)([^'\")]+)\1\s*\)")


def _clean(value: str) -> str:
    return value.strip().split("?", 1)[0].split("#", 1)[0]


class StyleExtractor(ReferenceExtractor):

    @property
    def language_name(self) -> str:
        return "style"

    @property
    def file_extensions(self) -> list[str]:
        return [".wxss"]

    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        if ref["kind"] == "url" and is_image_path(ref["path"]):
            return IMAGE_EXTENSIONS
        return (".wxss",)

    def extract_references(self, source: str, file_path: str) -> list[dict]:
        text = _COMMENT_RE.sub(lambda m: "\n" * m.group(0).count("\n"), source)
        found = []
        import_spans = []
        for m in _IMPORT_RE.finditer(text):
            import_spans.append(m.span())
            value = _clean(m.group(2) or m.group(4) or "")
            if value and not is_external(value) and "{{" not in value:
                found.append((m.start(), value, "style_import"))
        for m in _URL_RE.finditer(text):
            if any(start <= m.start() < end for start, end in import_spans):
                continue
            value = _clean(m.group(2))
            if not value or is_external(value) or "{{" in value:
                continue
            found.append((m.start(), value, "url"))
        found.sort(key=lambda item: item[0])
        return [self._make_reference(value, kind, line_of(text, pos)) for pos, value, kind in found]
