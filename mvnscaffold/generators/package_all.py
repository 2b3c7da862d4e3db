"""Aggregate package generator (module type ``package-all``).

Embeds every packaged module of the project: bundles as ``jar`` and content
packages as ``zip``, each installed below ``/apps/<appId>-packages``.
"""

from __future__ import annotations

from typing import Any

from .bundle import BUNDLE_TYPE
from .lifecycle import Generator
from .package_apps import APPS_TYPE
from .package_config import CONFIG_TYPE, CONTENT_TYPE
from .package_structure import STRUCTURE_TYPE

ALL_TYPE = "package-all"

PACKAGED_TYPES = (BUNDLE_TYPE, STRUCTURE_TYPE, APPS_TYPE, CONFIG_TYPE, CONTENT_TYPE)


class AllPackageGenerator(Generator):
    module_type = ALL_TYPE
    display_name = "All Package"
    singleton = True

    def embedded(self) -> list[dict[str, Any]]:
        """Describe each packaged module to embed, in discovery order."""
        app_id = self.props["appId"]
        entries: list[dict[str, Any]] = []
        for module_type in PACKAGED_TYPES:
            for module in self.lifecycle.find_modules(module_type):
                folder = "content" if module_type == CONTENT_TYPE else "application"
                entries.append({
                    "artifactId": module.get("artifactId"),
                    "type": "jar" if module_type == BUNDLE_TYPE else "zip",
                    "target": f"/apps/{app_id}-packages/{folder}/install",
                })
        return entries

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        context = lifecycle.context(embedded=self.embedded())
        lifecycle.write_templates("shared", context)
        lifecycle.write_descriptor(lifecycle.render_descriptor(context))
