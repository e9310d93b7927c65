"""Root application descriptor (``app.json``): lookup and normalization.

Raw descriptors are duck-typed (``subPackages`` vs ``subpackages``,
optional fields, string-or-object ``workers``).  They are folded once into
:class:`AppDescriptor` so the rest of the analysis never branches on raw
shape.  The same normalization is applied to page and component JSON,
which share the ``usingComponents`` and ``componentGenerics`` fields.
"""

from __future__ import annotations

import json
import logging
import os
import posixpath
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DESCRIPTOR_NAME = "app.json"


@dataclass
class SubPackage:
    root: str
    pages: list[str] = field(default_factory=list)


@dataclass
class TabBarItem:
    page_path: str | None = None
    icon_path: str | None = None
    selected_icon_path: str | None = None


@dataclass
class AppDescriptor:
    pages: list[str] = field(default_factory=list)
    sub_packages: list[SubPackage] = field(default_factory=list)
    tab_bar: list[TabBarItem] = field(default_factory=list)
    using_components: dict[str, str] = field(default_factory=dict)
    component_generics: dict[str, str] = field(default_factory=dict)
    workers: str | None = None
    theme_location: str | None = None

    def component_refs(self) -> list[str]:
        """Component targets in declaration order, plugin targets excluded."""
        refs = list(self.using_components.values()) + list(self.component_generics.values())
        return [r for r in refs if not r.startswith("plugin://")]


def _strings(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v.strip()]


def _opt_str(value) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def normalize_descriptor(raw) -> AppDescriptor:
    """Fold a raw JSON object into an :class:`AppDescriptor`."""
    if not isinstance(raw, dict):
        return AppDescriptor()

    desc = AppDescriptor(pages=_strings(raw.get("pages")))

    packages = raw.get("subPackages")
    if packages is None:
        packages = raw.get("subpackages")
    for pkg in packages if isinstance(packages, list) else ():
        if isinstance(pkg, dict) and _opt_str(pkg.get("root")):
            desc.sub_packages.append(SubPackage(root=pkg["root"].strip("/"), pages=_strings(pkg.get("pages"))))

    tab_bar = raw.get("tabBar")
    items = tab_bar.get("list") if isinstance(tab_bar, dict) else None
    for item in items if isinstance(items, list) else ():
        if isinstance(item, dict):
            desc.tab_bar.append(TabBarItem(
                page_path=_opt_str(item.get("pagePath")),
                icon_path=_opt_str(item.get("iconPath")),
                selected_icon_path=_opt_str(item.get("selectedIconPath")),
            ))

    using = raw.get("usingComponents")
    if isinstance(using, dict):
        desc.using_components = {k: v for k, v in using.items() if isinstance(v, str) and v.strip()}

    generics = raw.get("componentGenerics")
    if isinstance(generics, dict):
        for name, info in generics.items():
            if isinstance(info, dict) and _opt_str(info.get("default")):
                desc.component_generics[name] = info["default"]

    workers = raw.get("workers")
    if isinstance(workers, dict):
        workers = workers.get("path")
    desc.workers = _opt_str(workers)
    desc.theme_location = _opt_str(raw.get("themeLocation"))
    return desc


def subpackage_page_path(root: str, page: str) -> str:
    return posixpath.join(root.strip("/"), page.lstrip("/"))


def _load_json(path: str) -> dict | None:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        log.warning("Failed to read or parse descriptor %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        log.warning("Descriptor %s is not a JSON object", path)
        return None
    return data


def resolve_descriptor(miniapp_root: str, entry_file: str | None = None,
                       entry_content: dict | None = None) -> tuple[str | None, dict | None]:
    """Find the descriptor path and content.

    Attempts, in order: an explicit *entry_file* named ``app.json``; the
    injected *entry_content* (associated with the default ``app.json``
    when that file exists); the default ``app.json``.  Returns
    ``(path, content)``; either may be None.  A descriptor file that
    exists but cannot be parsed yields ``{}`` as content.
    """
    path: str | None = None
    content = entry_content if isinstance(entry_content, dict) else None
    default_path = os.path.join(miniapp_root, DESCRIPTOR_NAME)

    if entry_file:
        custom = os.path.normpath(os.path.join(miniapp_root, entry_file))
        if not os.path.isfile(custom):
            log.warning("Entry file does not exist: %s", custom)
        elif os.path.basename(custom) == DESCRIPTOR_NAME:
            path = custom
            log.info("Using entry file as descriptor: %s", custom)
            if content is None:
                content = _load_json(custom) or {}
        else:
            log.warning("Entry file %s is not %s; its content is not used as the descriptor",
                        entry_file, DESCRIPTOR_NAME)

    if content is not None and path is None and os.path.isfile(default_path):
        path = default_path

    if path is None and content is None and os.path.isfile(default_path):
        path = default_path
        log.info("Found default descriptor: %s", default_path)
        content = _load_json(default_path) or {}

    return path, content
