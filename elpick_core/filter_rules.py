"""
Filter Rules - cosmetic filter candidates for a picked element

Produces ``domain##selector`` rules, strongest first:

1. By id
2. By class list (generated / volatile classes dropped)
3. By stable attribute (data-testid, aria-label, name, title, data-cy)
4. By direct text (``:has-text(/.../)``)
5. By parent scoping and position
6. By identifying descendant (``:has(...)``)
7. Fallback: the canonical selector path

Every strategy is surfaced so a human can pick the rule most likely to survive
DOM churn on the target site. Rule text is unique within one call.
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Optional

from bs4.element import Tag

from .config import config
from .dom import (
    class_list,
    element_children,
    element_id,
    is_element,
    parent_element,
    tag_name,
    text_children,
)
from .selector_path import css_path, escape_identifier

logger = logging.getLogger(__name__)


STABLE_ATTRIBUTES = ("data-testid", "aria-label", "name", "title", "data-cy")

VOLATILE_CLASS_PREFIXES = (
    "css-",      # emotion
    "sc-",       # styled-components
    "jsx-",      # styled-jsx
    "svelte-",
    "emotion-",
    "ng-tns-",   # angular animations
    "ng-star-",
)

_HASHED_CLASS = re.compile(r"^[A-Za-z0-9]{20,}$")

# Parents that make a scoped rule meaningless
_SCOPE_STOP_TAGS = ("body", "html")


@dataclass(frozen=True)
class FilterCandidate:
    """One cosmetic filter suggestion"""
    description: str
    rule: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def is_noise_class(class_name: str, highlight_class: Optional[str] = None) -> bool:
    """Generated, hashed or tool-owned class names that make brittle rules."""
    if highlight_class and class_name.startswith(highlight_class):
        return True
    if _HASHED_CLASS.match(class_name):
        return True
    return class_name.startswith(VOLATILE_CLASS_PREFIXES)


def stable_classes(node: Tag, highlight_class: Optional[str] = None) -> List[str]:
    return [c for c in class_list(node) if not is_noise_class(c, highlight_class)]


def _quote_attribute(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _class_selector(node: Tag, classes: List[str]) -> str:
    return tag_name(node) + "".join("." + escape_identifier(c) for c in classes)


def _text_pattern(text: str, max_length: int) -> str:
    escaped = re.sub(r'([\\"])', r"\\\1", text.strip())[:max_length]
    # a cut in the middle of an escape pair leaves a dangling backslash
    trailing = len(escaped) - len(escaped.rstrip("\\"))
    if trailing % 2:
        escaped = escaped[:-1]
    return escaped.replace("/", "\\/")


def _element_index(node: Tag) -> int:
    parent = parent_element(node)
    if parent is None:
        return 0
    for index, child in enumerate(element_children(parent), start=1):
        if child is node:
            return index
    return 0


# =============================================================================
# STRATEGIES
# =============================================================================

def _by_id(node: Tag, **_: Any) -> List[FilterCandidate]:
    el_id = element_id(node)
    if not el_id:
        return []
    return [FilterCandidate("By ID (strongest)", f"{tag_name(node)}#{escape_identifier(el_id)}")]


def _by_classes(node: Tag, highlight_class: Optional[str] = None, **_: Any) -> List[FilterCandidate]:
    classes = stable_classes(node, highlight_class)
    if not classes:
        return []
    return [FilterCandidate("By Classes", _class_selector(node, classes))]


def _by_attributes(node: Tag, **_: Any) -> List[FilterCandidate]:
    out = []
    for attr in STABLE_ATTRIBUTES:
        if not node.has_attr(attr):
            continue
        value = node.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        out.append(FilterCandidate(
            f"By Attribute [{attr}]",
            f'{tag_name(node)}[{attr}="{_quote_attribute(str(value))}"]',
        ))
    return out


def _by_text(node: Tag, max_text_length: int = 50, **_: Any) -> List[FilterCandidate]:
    direct = next((t for t in text_children(node) if t.strip()), None)
    if direct is None:
        return []
    pattern = _text_pattern(str(direct), max_text_length)
    if not pattern:
        return []
    return [FilterCandidate("By Text Content", f"{tag_name(node)}:has-text(/{pattern}/)")]


def _by_parent(node: Tag, highlight_class: Optional[str] = None, **_: Any) -> List[FilterCandidate]:
    parent = parent_element(node)
    if parent is None or tag_name(parent) in _SCOPE_STOP_TAGS:
        return []

    tag = tag_name(node)
    parent_tag = tag_name(parent)
    out = []

    parent_id = element_id(parent)
    parent_classes = stable_classes(parent, highlight_class)
    if parent_id:
        out.append(FilterCandidate("By Parent ID", f"{parent_tag}#{escape_identifier(parent_id)} > {tag}"))
    elif parent_classes:
        out.append(FilterCandidate("By Parent Class", f"{_class_selector(parent, parent_classes)} > {tag}"))
    else:
        ancestor = parent_element(parent)
        while ancestor is not None and not element_id(ancestor):
            ancestor = parent_element(ancestor)
        if ancestor is not None:
            out.append(FilterCandidate(
                "By Ancestor ID",
                f"{tag_name(ancestor)}#{escape_identifier(element_id(ancestor))} {tag}",
            ))

    index = _element_index(node)
    if index:
        out.append(FilterCandidate("By Position", f"{parent_tag} > {tag}:nth-child({index})"))
    return out


def _identifying_selector(candidate: Tag, attr: str) -> str:
    value = _quote_attribute(str(candidate.get(attr)))
    return f'{tag_name(candidate)}[{attr}="{value}"]'


# (description, predicate, attribute used in the sub-selector)
_DESCENDANT_PATTERNS = (
    ("aria-label", lambda el: el.has_attr("aria-label"), "aria-label"),
    ("image", lambda el: tag_name(el) == "img" and el.has_attr("src"), "src"),
    ("data-testid", lambda el: el.has_attr("data-testid"), "data-testid"),
)


def _by_descendant(node: Tag, **_: Any) -> List[FilterCandidate]:
    descendants = [el for el in node.find_all(True) if el is not node]
    if not descendants:
        return []
    for label, predicate, attr in _DESCENDANT_PATTERNS:
        match = next((el for el in descendants if predicate(el)), None)
        if match is None:
            continue
        sub = _identifying_selector(match, attr)
        combinator = "> " if parent_element(match) is node else ""
        return [FilterCandidate(
            f"By Descendant ({label})",
            f"{tag_name(node)}:has({combinator}{sub})",
        )]
    return []


STRATEGIES: List[Callable[..., List[FilterCandidate]]] = [
    _by_id,
    _by_classes,
    _by_attributes,
    _by_text,
    _by_parent,
    _by_descendant,
]


def generate_filters(
    node: Any,
    domain: str = "",
    highlight_class: Optional[str] = None,
    max_text_length: Optional[int] = None,
) -> List[FilterCandidate]:
    """
    Generate cosmetic filter candidates for ``node`` scoped to ``domain``.

    Args:
        node: Picked element (anything else yields the fallback only)
        domain: Hostname the rules apply to; empty gives generic rules
        highlight_class: Picker highlight class to ignore in class rules
        max_text_length: Cap for the ``:has-text`` pattern

    Returns:
        Non-empty list of FilterCandidate with unique rule text
    """
    domain = domain or ""
    highlight_class = config.highlight_class if highlight_class is None else highlight_class
    max_text_length = config.text_rule_max_length if max_text_length is None else max_text_length

    by_rule: Dict[str, FilterCandidate] = {}
    if is_element(node):
        for strategy in STRATEGIES:
            for candidate in strategy(node, highlight_class=highlight_class, max_text_length=max_text_length):
                rule = f"{domain}##{candidate.rule}"
                by_rule.setdefault(rule, FilterCandidate(candidate.description, rule))

    if not by_rule:
        rule = f"{domain}##{css_path(node)}"
        by_rule[rule] = FilterCandidate("Generic fallback", rule)

    logger.debug(f"Generated {len(by_rule)} filter candidates for {domain or '<any domain>'}")
    return list(by_rule.values())
