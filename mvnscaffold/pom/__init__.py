"""Descriptor (``pom.xml``) parsing, merging and serialization.

Quick usage::

    from mvnscaffold.pom import parse, serialize, fix_serialized_output

    document = parse(existing_text)
    merge_descriptor(generated, document)
    text = fix_serialized_output(serialize(generated))
"""

from mvnscaffold.pom.fixups import fix_serialized_output
from mvnscaffold.pom.merge import (
    Coordinates,
    add_module,
    dependency_equals,
    filter_equals,
    merge_dependencies,
    merge_descriptor,
    merge_filters,
    merge_section,
    module_equals,
    packaging_filters,
    plugin_equals,
    profile_equals,
    property_equals,
    remove_dependencies,
)
from mvnscaffold.pom.tree import (
    Document,
    Node,
    comment,
    element,
    find_node,
    find_section,
    find_text,
    leaf,
    parse,
    serialize,
)

__all__ = [
    "Coordinates",
    "Document",
    "Node",
    "add_module",
    "comment",
    "dependency_equals",
    "element",
    "filter_equals",
    "find_node",
    "find_section",
    "find_text",
    "fix_serialized_output",
    "leaf",
    "merge_dependencies",
    "merge_descriptor",
    "merge_filters",
    "merge_section",
    "module_equals",
    "packaging_filters",
    "parse",
    "plugin_equals",
    "profile_equals",
    "property_equals",
    "remove_dependencies",
    "serialize",
]
