"""
Selector Path - canonical CSS path for a picked element

Walks from the element up to the document root, one segment per level:
``tag``, ``tag:nth-of-type(n)`` or a terminal ``#id``. Ascent stops at the
first element carrying an id.

Known limitation: the id short-circuit trusts document-wide id uniqueness.
On pages with duplicate ids the returned path is ambiguous.
"""

import re
from typing import Any, List

from .dom import element_children, element_id, is_element, parent_element, tag_name

PATH_SEPARATOR = " > "

_ID_SPECIAL_CHARS = re.compile(r"([:.\[\],=])")


def escape_identifier(value: str) -> str:
    """Backslash-escape ``: . [ ] , =`` for use after ``#`` or ``.``"""
    return _ID_SPECIAL_CHARS.sub(r"\\\1", value)


def _nth_of_type(node) -> int:
    """1-based position among same-tag siblings, 0 when the tag is unique."""
    parent = parent_element(node)
    if parent is None:
        return 0
    name = tag_name(node)
    same = [sibling for sibling in element_children(parent) if tag_name(sibling) == name]
    if len(same) <= 1:
        return 0
    for index, sibling in enumerate(same, start=1):
        if sibling is node:
            return index
    return 0


def css_path(node: Any) -> str:
    """
    Build the canonical selector path for ``node``.

    Returns an empty string for anything that is not an element.
    """
    if not is_element(node):
        return ""

    segments: List[str] = []
    current = node
    while current is not None:
        el_id = element_id(current)
        if el_id:
            segments.insert(0, "#" + escape_identifier(el_id))
            break
        segment = tag_name(current)
        nth = _nth_of_type(current)
        if nth:
            segment += f":nth-of-type({nth})"
        segments.insert(0, segment)
        current = parent_element(current)

    return PATH_SEPARATOR.join(segments)
