"""Ordered descriptor tree for ``pom.xml`` files.

Descriptors are parsed into a small tree of :class:`Node` objects in which
every element keeps its children as an ordered list.  Sibling sections with
the same tag (``<dependency>``, ``<plugin>``, ``<module>`` ...) simply appear
as consecutive entries, and their order survives a parse -> mutate ->
serialize round-trip.

Only the narrow shape used by build descriptors is understood: an element
either carries text (a leaf) or child elements and comments (a container).
Mixed content is not preserved.

Typical usage::

    document = parse(pom_text)
    dependencies = find_section(document.nodes, "project", "dependencies")
    text = serialize(document)
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

COMMENT = "#comment"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


# ---------------------------------------------------------------------------
# Tree model
# ---------------------------------------------------------------------------


@dataclass
class Node:
    """A single element or comment in a descriptor.

    ``children is None`` marks a leaf carrying ``text``.  Comments use the
    ``#comment`` tag and keep their text verbatim.
    """

    tag: str
    text: str | None = None
    attrib: dict[str, str] = field(default_factory=dict)
    children: list[Node] | None = None

    @property
    def is_comment(self) -> bool:
        return self.tag == COMMENT

    @property
    def is_leaf(self) -> bool:
        return self.children is None


@dataclass
class Document:
    """Top-level nodes of a descriptor: leading comments followed by the root."""

    nodes: list[Node] = field(default_factory=list)

    @property
    def root(self) -> Node | None:
        return next((n for n in self.nodes if not n.is_comment), None)


def leaf(tag: str, text: str | None = None) -> Node:
    """Build a text-carrying element."""
    return Node(tag, text=text)


def element(tag: str, *children: Node, attrib: dict[str, str] | None = None) -> Node:
    """Build a container element from *children*."""
    return Node(tag, attrib=dict(attrib or {}), children=list(children))


def comment(text: str) -> Node:
    return Node(COMMENT, text=text)


# ---------------------------------------------------------------------------
# Path lookup
# ---------------------------------------------------------------------------


def find_node(nodes: list[Node] | None, *path: str) -> Node | None:
    """Descend through *path*, taking the first matching tag at each level.

    Returns ``None`` as soon as a segment is absent (or a leaf is reached
    before the path is exhausted); never raises for a missing section.
    """
    current: Node | None = None
    siblings = nodes
    for tag in path:
        if siblings is None:
            return None
        current = next((n for n in siblings if n.tag == tag), None)
        if current is None:
            return None
        siblings = current.children
    return current


def find_section(nodes: list[Node] | None, *path: str) -> list[Node] | None:
    """Return the child list of the container found at *path*.

    The returned list is the live list held by the tree, so appending to it
    mutates the descriptor in place.
    """
    node = find_node(nodes, *path)
    if node is None:
        return None
    return node.children


def find_text(nodes: list[Node] | None, *path: str) -> str | None:
    """Return the text of the leaf found at *path*, or ``None``."""
    node = find_node(nodes, *path)
    if node is None or not node.is_leaf:
        return None
    return node.text


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _NodeBuilder:
    """``XMLParser`` target that builds :class:`Node` trees directly.

    Namespace declarations are turned back into plain ``xmlns`` attributes on
    the element declaring them, and qualified names are rewritten with their
    original prefix so the serialized output matches the input.
    """

    def __init__(self) -> None:
        self._top: list[Node] = []
        self._stack: list[Node] = []
        self._text: list[str] = []
        self._pending_ns: list[tuple[str, str]] = []
        self._prefixes: dict[str, str] = {}

    def start_ns(self, prefix: str, uri: str) -> None:
        self._pending_ns.append((prefix, uri))
        self._prefixes.setdefault(uri, prefix)

    def start(self, tag: str, attrib: dict[str, str]) -> None:
        attrs: dict[str, str] = {}
        for prefix, uri in self._pending_ns:
            attrs[f"xmlns:{prefix}" if prefix else "xmlns"] = uri
        self._pending_ns = []
        for key, value in attrib.items():
            attrs[self._qualify(key)] = value

        node = Node(self._qualify(tag), attrib=attrs)
        self._append(node)
        self._stack.append(node)
        self._text = []

    def end(self, tag: str) -> None:
        node = self._stack.pop()
        if node.children is None:
            node.text = "".join(self._text).strip() or None
        self._text = []

    def data(self, data: str) -> None:
        self._text.append(data)

    def comment(self, text: str) -> None:
        self._append(comment(text))
        self._text = []

    def close(self) -> Document:
        return Document(self._top)

    def _append(self, node: Node) -> None:
        if not self._stack:
            self._top.append(node)
            return
        parent = self._stack[-1]
        if parent.children is None:
            parent.children = []
        parent.children.append(node)

    def _qualify(self, name: str) -> str:
        if not name.startswith("{"):
            return name
        uri, local = name[1:].split("}", 1)
        prefix = self._prefixes.get(uri, "")
        return f"{prefix}:{local}" if prefix else local


def parse(text: str) -> Document:
    """Parse descriptor markup into a :class:`Document`.

    Raises:
        xml.etree.ElementTree.ParseError: If *text* is not well-formed.
    """
    parser = ET.XMLParser(target=_NodeBuilder())
    parser.feed(text)
    return parser.close()


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _to_element(node: Node) -> ET.Element:
    if node.is_comment:
        return ET.Comment(node.text)
    el = ET.Element(node.tag, dict(node.attrib))
    if node.children is None:
        el.text = node.text
    else:
        for child in node.children:
            el.append(_to_element(child))
    return el


def serialize(document: Document) -> str:
    """Serialize *document* to indented markup.

    The raw ``ElementTree`` output still carries its formatting quirks; pass
    the result through :func:`mvnscaffold.pom.fixups.fix_serialized_output`
    before writing it to disk.
    """
    parts = [XML_DECLARATION]
    for node in document.nodes:
        el = _to_element(node)
        if not node.is_comment:
            ET.indent(el, space="  ")
        parts.append(ET.tostring(el, encoding="unicode"))
    return "\n".join(parts) + "\n"
