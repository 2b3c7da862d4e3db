"""Merge logic for descriptor sections.

All merges are set-unions with a caller-defined identity: an incoming entry is
appended to the target list unless the target already holds an entry the
predicate considers equal.  A match suppresses the insertion; it never
updates the existing entry, so hand-added fields (``<scope>``,
``<exclusions>`` ...) survive regeneration.

Predicates take ``(target_entry, incoming_entry)``.  Comment entries only
match identical comments, which keeps repeated merges from stacking copies of
the same comment.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field

from .tree import Document, Node, comment, element, find_node, find_section, find_text, leaf

logger = logging.getLogger(__name__)

Predicate = Callable[[Node, Node], bool]

FILEVAULT_PLUGIN = "filevault-package-maven-plugin"
FILTER_MARKER = " Filters carried over from the existing descriptor "

_COORDINATE_ORDER = ("groupId", "artifactId", "version", "type", "classifier", "scope")


class Coordinates(BaseModel):
    """Maven coordinates of an artifact."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    artifact_id: str
    version: str | None = None
    type: str | None = None
    versions: list[str] = Field(default_factory=list)

    @property
    def path(self) -> str:
        """Repository path of the artifact (``com/adobe/aem/uber-jar``)."""
        return f"{self.group_id.replace('.', '/')}/{self.artifact_id}"

    def to_dependency(self, scope: str | None = None) -> Node:
        """Render these coordinates as a ``<dependency>`` entry."""
        children = [leaf("groupId", self.group_id), leaf("artifactId", self.artifact_id)]
        if self.version:
            children.append(leaf("version", self.version))
        if self.type:
            children.append(leaf("type", self.type))
        if scope:
            children.append(leaf("scope", scope))
        return element("dependency", *children)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _same_kind(a: Node, b: Node, tag: str) -> bool:
    return a.tag == tag and b.tag == tag


def dependency_key(node: Node) -> tuple[str | None, str | None]:
    """Identity of a ``<dependency>`` entry: ``(groupId, artifactId)``."""
    return find_text(node.children, "groupId"), find_text(node.children, "artifactId")


def dependency_equals(a: Node, b: Node) -> bool:
    if a.is_comment or b.is_comment:
        return a == b
    return _same_kind(a, b, "dependency") and dependency_key(a) == dependency_key(b)


def plugin_equals(a: Node, b: Node) -> bool:
    """Plugins match on artifactId; default plugins may omit their groupId."""
    if a.is_comment or b.is_comment:
        return a == b
    if not _same_kind(a, b, "plugin"):
        return False
    artifact = find_text(a.children, "artifactId")
    return artifact is not None and artifact == find_text(b.children, "artifactId")


def property_equals(a: Node, b: Node) -> bool:
    """Properties match on name; the value of an existing property is kept."""
    if a.is_comment or b.is_comment:
        return a == b
    return a.tag == b.tag


def profile_equals(a: Node, b: Node) -> bool:
    if a.is_comment or b.is_comment:
        return a == b
    if not _same_kind(a, b, "profile"):
        return False
    profile_id = find_text(a.children, "id")
    return profile_id is not None and profile_id == find_text(b.children, "id")


def module_equals(a: Node, b: Node) -> bool:
    if a.is_comment or b.is_comment:
        return a == b
    return _same_kind(a, b, "module") and a.text == b.text


def filter_equals(a: Node, b: Node) -> bool:
    """Filters have no partial identity: the whole entry must match."""
    return a == b


# ---------------------------------------------------------------------------
# Section merges
# ---------------------------------------------------------------------------


def merge_section(
    target: list[Node] | None,
    incoming: list[Node] | None,
    equals: Predicate,
) -> list[Node]:
    """Append each incoming entry that has no equal entry in *target*.

    Existing entries keep their position; new ones are appended in incoming
    order.  A ``None`` target is treated as empty and a new list is returned,
    otherwise *target* itself is mutated and returned.
    """
    if target is None:
        target = []
    for item in incoming or []:
        if not any(equals(existing, item) for existing in target):
            target.append(copy.deepcopy(item))
    return target


def _set_child_text(node: Node, tag: str, text: str) -> None:
    if node.children is None:
        node.children = []
    existing = find_node(node.children, tag)
    if existing is not None:
        existing.text = text
        return

    position = 0
    rank = _COORDINATE_ORDER.index(tag)
    for index, child in enumerate(node.children):
        if child.tag in _COORDINATE_ORDER[:rank]:
            position = index + 1
    node.children.insert(position, leaf(tag, text))


def _override_coordinates(entry: Node, override: Coordinates) -> Node:
    rewritten = copy.deepcopy(entry)
    if rewritten.is_comment:
        return rewritten
    _set_child_text(rewritten, "groupId", override.group_id)
    _set_child_text(rewritten, "artifactId", override.artifact_id)
    if override.version:
        _set_child_text(rewritten, "version", override.version)
    if override.type:
        _set_child_text(rewritten, "type", override.type)
    return rewritten


def merge_dependencies(
    target: list[Node] | None,
    incoming: list[Node] | None,
    override: Coordinates | None = None,
) -> list[Node]:
    """Merge ``<dependency>`` entries keyed by ``(groupId, artifactId)``.

    When *override* is given, copies of the incoming entries are rewritten to
    its coordinates (and version/type, when set) before the identity check.
    The incoming list itself is never modified.
    """
    entries = incoming or []
    if override is not None:
        entries = [_override_coordinates(entry, override) for entry in entries]
    return merge_section(target, entries, dependency_equals)


def remove_dependencies(target: list[Node] | None, to_remove: list[Node] | None) -> None:
    """Drop every entry of *target* whose key matches an entry of *to_remove*."""
    if target is None or not to_remove:
        return
    target[:] = [
        entry for entry in target
        if not any(dependency_equals(entry, removed) for removed in to_remove)
    ]


def merge_filters(
    target: list[Node] | None,
    incoming: list[Node] | None,
    marker: str = FILTER_MARKER,
) -> list[Node]:
    """Merge packaging ``<filter>`` entries by deep equality.

    Carried-over entries are appended after a single marker comment so a
    reader can tell them from the filters generated by this run.  Marker
    comments in *incoming* are not copied, and the marker is not repeated
    when *target* already has one.
    """
    if target is None:
        target = []
    candidates = [
        item for item in incoming or []
        if not (item.is_comment and item.text == marker)
        and not any(filter_equals(existing, item) for existing in target)
    ]
    added = merge_section([], candidates, filter_equals)
    if added:
        if comment(marker) not in target:
            target.append(comment(marker))
        target.extend(added)
    return target


# ---------------------------------------------------------------------------
# Descriptor-level helpers
# ---------------------------------------------------------------------------


def ensure_section(nodes: list[Node], *path: str) -> list[Node]:
    """Return the container at *path*, creating missing levels at the end."""
    siblings = nodes
    for tag in path:
        node = find_node(siblings, tag)
        if node is None:
            node = element(tag)
            siblings.append(node)
        elif node.children is None:
            node.children = []
        siblings = node.children
    return siblings


def find_plugin(project: list[Node] | None, artifact_id: str) -> Node | None:
    """Locate a build plugin of *project* by artifactId."""
    for plugin in find_section(project, "build", "plugins") or []:
        if plugin.tag == "plugin" and find_text(plugin.children, "artifactId") == artifact_id:
            return plugin
    return None


def packaging_filters(project: list[Node] | None) -> list[Node] | None:
    """Return the filter list of the filevault packaging plugin, if configured."""
    plugin = find_plugin(project, FILEVAULT_PLUGIN)
    if plugin is None:
        return None
    return find_section(plugin.children, "configuration", "filters")


def add_module(project: list[Node], name: str) -> list[Node]:
    """Register module directory *name* in the ``<modules>`` section.

    A missing section is inserted before the first ``<properties>``,
    ``<build>`` or ``<dependencies>`` element, or appended when there is none.
    """
    node = find_node(project, "modules")
    if node is not None:
        if node.children is None:
            node.children = []
        modules = node.children
    else:
        section = element("modules")
        anchor = next(
            (i for i, sibling in enumerate(project) if sibling.tag in ("properties", "build", "dependencies")),
            len(project),
        )
        project.insert(anchor, section)
        modules = section.children
    return merge_section(modules, [leaf("module", name)], module_equals)


_MERGED_SECTIONS: tuple[tuple[tuple[str, ...], Predicate], ...] = (
    (("modules",), module_equals),
    (("properties",), property_equals),
    (("build", "plugins"), plugin_equals),
    (("build", "pluginManagement", "plugins"), plugin_equals),
    (("profiles",), profile_equals),
)

_MERGED_DEPENDENCIES: tuple[tuple[str, ...], ...] = (
    ("dependencies",),
    ("dependencyManagement", "dependencies"),
)


def merge_descriptor(generated: Document, existing: Document) -> Document:
    """Carry the extras of an on-disk descriptor into a freshly generated one.

    The generated descriptor wins for coordinates and ordering; modules,
    properties, plugins (managed or not), profiles, dependencies (managed or
    not) and packaging filters that exist only on disk are appended to the
    matching generated section.
    """
    gen_project = find_section(generated.nodes, "project")
    old_project = find_section(existing.nodes, "project")
    if gen_project is None or old_project is None:
        return generated

    for path, equals in _MERGED_SECTIONS:
        incoming = find_section(old_project, *path)
        if incoming:
            merge_section(ensure_section(gen_project, *path), incoming, equals)

    for path in _MERGED_DEPENDENCIES:
        old_dependencies = find_section(old_project, *path)
        if old_dependencies:
            merge_dependencies(ensure_section(gen_project, *path), old_dependencies)

    old_filters = packaging_filters(old_project)
    if old_filters:
        plugin = find_plugin(gen_project, FILEVAULT_PLUGIN)
        if plugin is not None:
            merge_filters(ensure_section(plugin.children, "configuration", "filters"), old_filters)
        else:
            logger.debug("Generated descriptor has no %s; existing filters dropped", FILEVAULT_PLUGIN)

    return generated
