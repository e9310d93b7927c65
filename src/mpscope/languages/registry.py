"""Extension -> reference extractor lookup."""

from __future__ import annotations

import os
from functools import lru_cache

from .base import ReferenceExtractor

_EXTENSION_MAP = {
    ".js": "script",
    ".ts": "script",
    ".wxs": "wxs",
    ".wxml": "markup",
    ".wxss": "style",
    ".json": "config",
}


def get_language_for_file(path: str) -> str | None:
    """Return the file kind for *path*, or None for files without references (images)."""
    _, ext = os.path.splitext(path)
    return _EXTENSION_MAP.get(ext.lower())


@lru_cache(maxsize=None)
def get_extractor(language: str) -> ReferenceExtractor:
    """Create and cache an extractor instance for a file kind."""
    if language == "script":
        from .script_lang import ScriptExtractor

        return ScriptExtractor()
    elif language == "wxs":
        from .script_lang import WxsExtractor

        return WxsExtractor()
    elif language == "markup":
        from .markup_lang import MarkupExtractor

        return MarkupExtractor()
    elif language == "style":
        from .style_lang import StyleExtractor

        return StyleExtractor()
    elif language == "config":
        from .config_lang import ConfigExtractor

        return ConfigExtractor()
    raise ValueError(f"Unsupported file kind: {language}")


def extractor_for_file(path: str) -> ReferenceExtractor | None:
    language = get_language_for_file(path)
    if language is None:
        return None
    return get_extractor(language)
