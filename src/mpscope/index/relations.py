"""Reference resolution: raw reference strings into canonical file paths.

Resolution order for one reference:

0. External targets (data URIs, ``scheme://`` URLs, protocol-relative
   ``//host`` URLs) are never resolved.
1. A filesystem-absolute reference that names an existing file resolves
   to itself; otherwise it is treated as root-relative.
2. An alias prefix maps the reference onto the alias base directory.  A
   matched alias whose target does not exist is reported at WARNING
   level, since the author clearly expected a file there.
3. ``/x`` resolves against the miniapp root, ``./x`` and ``../x`` against
   the containing file's directory, and anything else against the miniapp
   root (the implicit-root convention of page and component paths).
   Bare references made from script files are package specifiers and are
   left unresolved.
4. :func:`find_existing_file` tries the base path, then ``base + ext``
   for each allowed extension in priority order, then ``base/index + ext``.
"""

from __future__ import annotations

import logging
import os
import re

from mpscope.index.aliases import AliasResolver

log = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp")

# Files whose bare references are package specifiers rather than paths
SCRIPT_SOURCE_EXTENSIONS = frozenset({".js", ".ts", ".wxs"})

_EXTERNAL_RE = re.compile(r"^(?:data:|[A-Za-z][A-Za-z0-9+.-]*://|//)")


def is_external(ref: str) -> bool:
    """True for data URIs, ``http(s)://``, ``plugin://`` and ``//host`` refs."""
    return bool(_EXTERNAL_RE.match(ref))


def is_image_path(ref: str) -> bool:
    return os.path.splitext(ref)[1].lower() in IMAGE_EXTENSIONS


def find_existing_file(base: str, allowed_extensions) -> str | None:
    """Locate the file a base path refers to.

    The extension list is a priority order, not a filter: with both
    ``foo.js`` and ``foo.ts`` on disk and ``[".js", ".ts"]`` allowed,
    ``foo`` resolves to ``foo.js``.
    """
    if os.path.isfile(base):
        return base
    for ext in allowed_extensions:
        candidate = base + ext
        if os.path.isfile(candidate):
            return candidate
    if os.path.isdir(base):
        for ext in allowed_extensions:
            candidate = os.path.join(base, "index" + ext)
            if os.path.isfile(candidate):
                return candidate
    return None


def cluster_files(resolved_path: str, extensions) -> list[str]:
    """All existing siblings of *resolved_path* sharing its base name.

    A page or component is a set of co-located files (script, markup,
    stylesheet, config); every one that exists is returned, in
    *extensions* order.
    """
    base, _ = os.path.splitext(resolved_path)
    return [base + ext for ext in extensions if os.path.isfile(base + ext)]


class PathResolver:
    """Turns raw references into canonical absolute file paths."""

    def __init__(self, project_root: str, miniapp_root: str | None = None,
                 alias_resolver: AliasResolver | None = None):
        self.project_root = os.path.abspath(project_root)
        self.miniapp_root = os.path.abspath(miniapp_root) if miniapp_root else self.project_root
        self.aliases = alias_resolver

    def resolve(self, raw_ref: str, containing_file: str, allowed_extensions) -> str | None:
        """Resolve *raw_ref* as written in *containing_file*.

        Returns a normalised absolute path of an existing file, or None.
        """
        ref = raw_ref.strip()
        if not ref or is_external(ref):
            return None

        if os.path.isabs(ref) and os.path.isfile(ref):
            return os.path.normpath(ref)

        if self.aliases is not None:
            alias_base = self.aliases.resolve(ref, containing_file)
            if alias_base is not None:
                found = find_existing_file(alias_base, allowed_extensions)
                if found is None:
                    log.warning(
                        "Alias reference %r in %s matched but nothing exists at %s",
                        ref, containing_file, alias_base,
                    )
                    return None
                return os.path.normpath(found)

        source_dir = os.path.dirname(os.path.abspath(containing_file))
        is_bare = not ref.startswith(("/", "."))
        if is_bare and os.path.splitext(containing_file)[1].lower() in SCRIPT_SOURCE_EXTENSIONS:
            log.debug("Skipping package specifier %r in %s", ref, containing_file)
            return None

        if ref.startswith("/"):
            base = os.path.join(self.miniapp_root, ref.lstrip("/"))
        elif ref.startswith("."):
            base = os.path.join(source_dir, ref)
        else:
            base = os.path.join(self.miniapp_root, ref)

        found = find_existing_file(os.path.normpath(base), allowed_extensions)
        if found is None and is_bare:
            # Component paths are sometimes written relative without "./"
            found = find_existing_file(os.path.normpath(os.path.join(source_dir, ref)), allowed_extensions)
        if found is None:
            log.debug("Could not resolve %r from %s", ref, containing_file)
            return None
        return os.path.normpath(found)
