"""Structured-config extractor (``.json`` app / page / component configs).

References extracted
--------------------
* ``pages[]``                                   -> kind "page"  (root-relative)
* ``subPackages[].root`` + ``pages[]``          -> kind "page"  (root-relative)
* ``tabBar.list[].pagePath``                    -> kind "page"
* ``tabBar.list[].iconPath`` / ``selectedIconPath`` -> kind "icon"
* ``usingComponents`` values                    -> kind "component"
* ``componentGenerics.*.default``               -> kind "component"

Page and component references name a cluster: every co-located file
sharing the base name is a target, not only the first one resolved.
``plugin://`` components live outside the analysed tree and are skipped.
"""

from __future__ import annotations

import json

from mpscope.index.descriptor import normalize_descriptor, subpackage_page_path
from mpscope.index.relations import IMAGE_EXTENSIONS

from .base import ReferenceExtractor

# Files that together define one page or component, in priority order
CLUSTER_EXTENSIONS = (".js", ".ts", ".wxml", ".wxss", ".json")

_CLUSTER_KINDS = frozenset({"page", "component"})


class ConfigExtractor(ReferenceExtractor):

    @property
    def language_name(self) -> str:
        return "config"

    @property
    def file_extensions(self) -> list[str]:
        return [".json"]

    def allowed_extensions(self, ref: dict) -> tuple[str, ...]:
        if ref["kind"] == "icon":
            return IMAGE_EXTENSIONS
        return CLUSTER_EXTENSIONS

    def expands_cluster(self, ref: dict) -> bool:
        return ref["kind"] in _CLUSTER_KINDS

    def extract_references(self, source: str, file_path: str) -> list[dict]:
        # json.JSONDecodeError propagates: the caller degrades the file
        data = json.loads(source)
        if not isinstance(data, dict):
            return []
        desc = normalize_descriptor(data)
        refs = []
        for page in desc.pages:
            refs.append(self._make_reference("/" + page.lstrip("/"), "page", None))
        for pkg in desc.sub_packages:
            for page in pkg.pages:
                refs.append(self._make_reference("/" + subpackage_page_path(pkg.root, page), "page", None))
        for item in desc.tab_bar:
            if item.page_path:
                refs.append(self._make_reference("/" + item.page_path.lstrip("/"), "page", None))
            for icon in (item.icon_path, item.selected_icon_path):
                if icon:
                    refs.append(self._make_reference(icon, "icon", None))
        for comp in desc.component_refs():
            refs.append(self._make_reference(comp, "component", None))
        return refs
