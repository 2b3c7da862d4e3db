"""Repository structure package generator (module type ``package-structure``).

The structure package is empty; its descriptor only enumerates the repository
roots the code packages of the project install into.  Other package modules
add their own roots to it through :func:`register_filter_roots`.
"""

from __future__ import annotations

import logging
from typing import Any

from mvnscaffold.pom.fixups import fix_serialized_output
from mvnscaffold.pom.merge import merge_filters, packaging_filters
from mvnscaffold.pom.reader import POM_FILENAME, read_descriptor
from mvnscaffold.pom.tree import element, find_section, leaf, serialize

from .lifecycle import Generator, ModuleLifecycle

logger = logging.getLogger(__name__)

STRUCTURE_TYPE = "package-structure"
REGISTERED_MARKER = " Roots registered by other modules "


def register_filter_roots(lifecycle: ModuleLifecycle, roots: list[str]) -> None:
    """Add ``<filter><root>`` entries for *roots* to the project's structure package.

    Does nothing when the project has no structure module.  Roots already
    listed are left alone.
    """
    incoming = [element("filter", leaf("root", root)) for root in roots]
    for module in lifecycle.find_modules(STRUCTURE_TYPE):
        directory = lifecycle.project_root / module["path"]
        document = read_descriptor(lifecycle.editor, directory)
        if document is None:
            continue
        filters = packaging_filters(find_section(document.nodes, "project"))
        if filters is None:
            continue

        before = len(filters)
        merge_filters(filters, incoming, marker=REGISTERED_MARKER)
        if len(filters) != before:
            logger.debug("Registered %s in %s", roots, directory)
            lifecycle.editor.write(directory / POM_FILENAME, fix_serialized_output(serialize(document)))


class StructurePackageGenerator(Generator):
    module_type = STRUCTURE_TYPE
    display_name = "Repository Structure"
    singleton = True

    def app_ids(self) -> list[str]:
        """This module's appId followed by those of the project's code packages."""
        ids: list[str] = [self.props["appId"]]
        for module_type in ("package-apps", "package-content"):
            for module in self.lifecycle.find_modules(module_type):
                app_id = module.get("appId")
                if app_id and app_id not in ids:
                    ids.append(app_id)
        return ids

    async def writing(self) -> None:
        lifecycle = self.lifecycle
        context: dict[str, Any] = lifecycle.context(appIds=self.app_ids())
        lifecycle.write_templates("shared", context)
        lifecycle.write_descriptor(lifecycle.render_descriptor(context))
