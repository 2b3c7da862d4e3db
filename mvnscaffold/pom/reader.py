"""Read well-known fields out of a module's ``pom.xml``."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .tree import Document, find_section, find_text, parse

if TYPE_CHECKING:
    from mvnscaffold.state.editor import FileEditor

POM_FILENAME = "pom.xml"


def read_descriptor(editor: FileEditor, directory: str | Path) -> Document | None:
    """Parse ``<directory>/pom.xml`` through *editor*, or ``None`` if absent."""
    pom = Path(directory) / POM_FILENAME
    if not editor.exists(pom):
        return None
    return parse(editor.read(pom))


def descriptor_properties(document: Document | None) -> dict[str, Any]:
    """Extract coordinates, name and ``<properties>`` from a descriptor.

    Returns a mapping with any of ``groupId``, ``artifactId``, ``version``,
    ``name`` and ``pomProperties``; fields missing from the descriptor are
    omitted.  ``groupId`` and ``version`` fall back to the ``<parent>`` block,
    as Maven does.
    """
    if document is None:
        return {}
    project = find_section(document.nodes, "project")
    if project is None:
        return {}

    props: dict[str, Any] = {}
    for key in ("groupId", "artifactId", "version", "name"):
        value = find_text(project, key)
        if value is None and key in ("groupId", "version"):
            value = find_text(project, "parent", key)
        if value is not None:
            props[key] = value

    properties = find_section(project, "properties")
    if properties:
        props["pomProperties"] = {
            node.tag: node.text or "" for node in properties if not node.is_comment and node.is_leaf
        }
    return props


def read_pom_properties(editor: FileEditor, directory: str | Path) -> dict[str, Any]:
    return descriptor_properties(read_descriptor(editor, directory))


def list_modules(document: Document | None) -> list[str]:
    """Return the module directory names declared in ``<modules>``."""
    if document is None:
        return []
    modules = find_section(document.nodes, "project", "modules") or []
    return [node.text for node in modules if node.tag == "module" and node.text]
