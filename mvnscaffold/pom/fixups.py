"""Text normalization applied to serialized descriptors.

``ElementTree`` produces a handful of formatting artifacts that hand-written
``pom.xml`` files never contain.  The substitutions below target exactly those
shapes and nothing else; this is not a pretty-printer.

1. Empty attribute-less elements are written as ``<tag />``.  Maven tooling
   and the templates use ``<tag></tag>``.
2. Packaging filters holding only a ``<root>`` are expanded over three lines;
   the hand-authored convention keeps them on one.
3. ``>`` is escaped as ``&gt;`` in element text, which is legal but noisy.
   Comments and attribute values are written as they are.
4. Trailing whitespace is removed and the file ends with one newline.

Every rule is idempotent, so the function may be applied to its own output.
"""

from __future__ import annotations

import re

_SELF_CLOSING = re.compile(r"<([A-Za-z_][\w.:-]*) />")
_FILTER_ROOT = re.compile(r"<filter>\s*<root>([^<]*)</root>\s*</filter>")
_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_COMMENT = re.compile(r"(<!--.*?-->)", re.DOTALL)
_ELEMENT_TEXT = re.compile(r"(^|>)([^<]+)")


def fix_serialized_output(text: str) -> str:
    """Normalize serializer output before it is written to disk."""
    text = _SELF_CLOSING.sub(r"<\1></\1>", text)
    text = _FILTER_ROOT.sub(r"<filter><root>\1</root></filter>", text)
    text = _unescape_element_text(text)
    text = _TRAILING_WS.sub("", text)
    return text.rstrip("\n") + "\n"


def _unescape_element_text(text: str) -> str:
    parts = _COMMENT.split(text)
    return "".join(
        part if part.startswith("<!--") else _ELEMENT_TEXT.sub(
            lambda match: match.group(1) + match.group(2).replace("&gt;", ">"), part
        )
        for part in parts
    )
