"""
Host document - BeautifulSoup element tree plus a DOM-like event stream

The picker consumes pointer events (``mousemove`` / ``click``) the same way a
content script does in a browser: listeners are registered on the document in
the capture or bubble phase and ``dispatch`` delivers an event to them.

Usage:
    from elpick_core.dom import HostDocument

    doc = HostDocument.from_html(html, url="https://example.com/page")
    button = doc.query("#buy")
    doc.dispatch("click", button)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag
from soupsieve import SelectorSyntaxError

from .config import config
from .exceptions import DocumentError, ElementNotFoundError, InvalidSelectorError

logger = logging.getLogger(__name__)

EventHandler = Callable[["PointerEvent"], None]


# =============================================================================
# ELEMENT HELPERS
# =============================================================================

def is_element(node: Any) -> bool:
    """True for element nodes; False for text, the document object, None."""
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def tag_name(node: Tag) -> str:
    return (node.name or "").lower()


def element_id(node: Tag) -> str:
    value = node.get("id")
    if not isinstance(value, str):
        return ""
    return value.strip()


def class_list(node: Tag) -> List[str]:
    value = node.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split()
    return [c for c in value if c]


def parent_element(node: Any) -> Optional[Tag]:
    parent = getattr(node, "parent", None)
    return parent if is_element(parent) else None


def element_children(node: Tag) -> List[Tag]:
    return [child for child in node.children if is_element(child)]


def text_children(node: Tag) -> List[NavigableString]:
    """Direct text nodes, excluding comments, CDATA and doctype strings."""
    return [
        child for child in node.children
        if isinstance(child, NavigableString) and not isinstance(child, PreformattedString)
    ]


def closest_with_attribute(node: Any, attribute: str) -> Optional[Tag]:
    """Nearest element (self included) carrying ``attribute``."""
    current = node if is_element(node) else parent_element(node)
    while current is not None:
        if current.has_attr(attribute):
            return current
        current = parent_element(current)
    return None


def add_class(node: Tag, class_name: str) -> None:
    classes = class_list(node)
    if class_name not in classes:
        node["class"] = classes + [class_name]


def remove_class(node: Tag, class_name: str) -> None:
    classes = class_list(node)
    if class_name not in classes:
        return
    remaining = [c for c in classes if c != class_name]
    if remaining:
        node["class"] = remaining
    else:
        del node["class"]


def outer_html(node: Any) -> str:
    if not is_element(node):
        return ""
    return str(node)


# =============================================================================
# EVENTS
# =============================================================================

@dataclass
class PointerEvent:
    """A pointer event flowing through the host document"""
    type: str
    target: Any
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass
class HostDocument:
    """
    Parsed page the picker runs against.

    Listeners are kept per ``(event type, capture)`` pair. Adding the same
    handler twice for the same pair registers it once, as in the DOM.
    """
    soup: BeautifulSoup
    url: str = ""
    cursor: str = ""
    _listeners: Dict[Tuple[str, bool], List[EventHandler]] = field(default_factory=dict, repr=False)

    @classmethod
    def from_html(cls, html: str, url: str = "", parser: Optional[str] = None) -> "HostDocument":
        if not html or not html.strip():
            raise DocumentError("HTML input is empty")
        soup = BeautifulSoup(html, parser or config.html_parser)
        return cls(soup=soup, url=url or "")

    @property
    def hostname(self) -> str:
        if not self.url:
            return ""
        return urlparse(self.url).hostname or ""

    @property
    def body(self) -> Optional[Tag]:
        return self.soup.body

    def query(self, selector: str) -> Tag:
        """First element matching ``selector``; raises when nothing matches."""
        try:
            element = self.soup.select_one(selector)
        except SelectorSyntaxError as e:
            raise InvalidSelectorError(f"Invalid selector {selector!r}: {e}") from e
        if element is None:
            raise ElementNotFoundError(f"No element matches {selector!r}")
        return element

    # --- listeners ---

    def add_event_listener(self, event_type: str, handler: EventHandler, capture: bool = False) -> None:
        handlers = self._listeners.setdefault((event_type, capture), [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_event_listener(self, event_type: str, handler: EventHandler, capture: bool = False) -> None:
        handlers = self._listeners.get((event_type, capture), [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        return sum(
            len(handlers) for (etype, _), handlers in self._listeners.items()
            if event_type is None or etype == event_type
        )

    def dispatch(self, event_type: str, target: Any) -> PointerEvent:
        """Deliver an event: capture listeners first, then bubble listeners."""
        event = PointerEvent(type=event_type, target=target)
        for capture in (True, False):
            for handler in list(self._listeners.get((event_type, capture), [])):
                handler(event)
            if event.propagation_stopped:
                break
        return event
