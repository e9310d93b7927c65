from __future__ import annotations

from abc import ABC, abstractmethod


class ReferenceExtractor(ABC):
    """Base class for per-file-kind reference extraction.

    Extractors are pure and stateless: ``(content, path)`` in, an ordered
    list of raw references out.  Duplicates are allowed; they collapse
    when edges are added.
    """

    @property
    @abstractmethod
    def language_name(self) -> str: ...

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]: ...

    @abstractmethod
    def extract_references(self, source: str, file_path: str) -> list[dict]:
        """Extract raw references from file content.

        Each dict contains:
            path, kind, line
        """
        ...

    @abstractmethod
    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        """Extension priority list used to resolve *ref*."""
        ...

    def expands_cluster(self, ref: dict) -> bool:
        """Whether *ref* names a page/component cluster rather than one file."""
        return False

    def _make_reference(self, path: str, kind: str, line: int | None) -> dict:
        return {
            "path": path,
            "kind": kind,
            "line": line,
        }


def line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1
