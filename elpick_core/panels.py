"""
Panels - consumers of the picker

Each panel satisfies the ``Panel`` protocol instead of extending a base
class. Shared behaviour (the pick button) is a small component the panels
hold.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from .dom import class_list, element_id, is_element, outer_html, tag_name
from .filter_rules import generate_filters
from .picker import PickCommit
from .selector_path import css_path

if TYPE_CHECKING:
    from .toolkit import Toolkit

logger = logging.getLogger(__name__)


class Panel(Protocol):
    id: str
    name: str
    pick_cursor: Optional[str]
    pick_highlight: Optional[bool]

    def render(self) -> Dict[str, Any]: ...

    def bind_events(self, toolkit: "Toolkit") -> None: ...

    def update(self, commit: PickCommit) -> None: ...

    def on_picker_state_changed(self, active: bool, source: Optional[str]) -> None: ...


@dataclass
class PickerButton:
    """Pick / cancel toggle shown by a panel"""
    default_text: str = "Pick"
    picking: bool = False

    @property
    def label(self) -> str:
        return "Cancel Picking" if self.picking else self.default_text

    def sync(self, owner_id: str, active: bool, source: Optional[str]) -> None:
        self.picking = active and source == owner_id

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "picking": self.picking, "active_dot": self.picking}


def rgb_to_hex(value: str) -> str:
    """``rgb(255, 0, 0)`` -> ``#FF0000``; anything else is returned unchanged."""
    if not value or not value.startswith("rgb"):
        return value
    match = re.search(r"(\d+),\s*(\d+),\s*(\d+)", value)
    if not match:
        return value
    r, g, b = (min(int(x), 255) for x in match.groups())
    return f"#{r:02X}{g:02X}{b:02X}"


_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_COLOR_TOKEN = re.compile(r"rgba?\([^)]*\)|#[0-9a-fA-F]+")


def hex_color(value: Optional[str]) -> Optional[str]:
    """Upper-case hex for a hex or ``rgb()`` colour; None for anything else."""
    if not value:
        return None
    value = rgb_to_hex(value.strip())
    if not _HEX_COLOR.match(value):
        return None
    return value.upper()


def inline_style(element: Any) -> Dict[str, str]:
    """Declarations of the ``style`` attribute, property names lower-cased."""
    if not is_element(element):
        return {}
    style = element.get("style") or ""
    out: Dict[str, str] = {}
    for declaration in style.split(";"):
        prop, sep, value = declaration.partition(":")
        if sep and prop.strip():
            out[prop.strip().lower()] = value.strip()
    return out


def element_summary(element: Any) -> str:
    summary = f"Tag: <{tag_name(element)}>"
    el_id = element_id(element)
    if el_id:
        summary += f" | ID: #{el_id}"
    classes = class_list(element)
    if classes:
        summary += " | Class: ." + ".".join(classes)
    return summary


class InspectorPanel:
    """Tag summary, canonical path and raw markup of the picked element."""

    id = "inspector"
    name = "Inspector"
    pick_cursor: Optional[str] = None
    pick_highlight: Optional[bool] = None

    def __init__(self):
        self.toolkit: Optional["Toolkit"] = None
        self.button = PickerButton("Pick Element")
        self.result: Optional[Dict[str, str]] = None

    def bind_events(self, toolkit: "Toolkit") -> None:
        self.toolkit = toolkit

    def update(self, commit: PickCommit) -> None:
        element = commit.element
        if not is_element(element):
            return
        self.result = {
            "summary": element_summary(element),
            "css_path": css_path(element),
            "outer_html": outer_html(element),
        }
        # the filter panel follows whatever the inspector picked
        filters = self.toolkit.panel("filters") if self.toolkit else None
        if filters is not None and filters is not self:
            filters.update(commit)

    def on_picker_state_changed(self, active: bool, source: Optional[str]) -> None:
        self.button.sync(self.id, active, source)

    def render(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "button": self.button.to_dict(), "result": self.result}


class FilterPanel:
    """Cosmetic filter candidates for the picked element."""

    id = "filters"
    name = "Filters"
    pick_cursor: Optional[str] = None
    pick_highlight: Optional[bool] = None

    def __init__(self):
        self.toolkit: Optional["Toolkit"] = None
        self.button = PickerButton("Pick Element")
        self.candidates: List[Dict[str, str]] = []

    def bind_events(self, toolkit: "Toolkit") -> None:
        self.toolkit = toolkit

    def update(self, commit: PickCommit) -> None:
        if not is_element(commit.element):
            return
        domain = self.toolkit.domain if self.toolkit else ""
        highlight_class = self.toolkit.highlighter.class_name if self.toolkit else None
        self.candidates = [
            c.to_dict() for c in generate_filters(commit.element, domain, highlight_class=highlight_class)
        ]

    def on_picker_state_changed(self, active: bool, source: Optional[str]) -> None:
        self.button.sync(self.id, active, source)

    def render(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "button": self.button.to_dict(),
            "candidates": self.candidates,
        }


class ColorPanel:
    """Background colour of the picked element, from its inline style."""

    id = "colors"
    name = "Colors"
    pick_cursor: Optional[str] = "copy"
    pick_highlight: Optional[bool] = False

    def __init__(self):
        self.toolkit: Optional["Toolkit"] = None
        self.button = PickerButton("Pick Element Color")
        self.color: Optional[str] = None

    def bind_events(self, toolkit: "Toolkit") -> None:
        self.toolkit = toolkit

    def update(self, commit: PickCommit) -> None:
        style = inline_style(commit.element)
        self.color = hex_color(style.get("background-color"))
        if self.color is None:
            # shorthand: first colour token
            for token in _COLOR_TOKEN.findall(style.get("background", "")):
                self.color = hex_color(token)
                if self.color:
                    break
        logger.debug(f"Picked color {self.color} from <{tag_name(commit.element) if is_element(commit.element) else '?'}>")

    def on_picker_state_changed(self, active: bool, source: Optional[str]) -> None:
        self.button.sync(self.id, active, source)

    def render(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "button": self.button.to_dict(), "color": self.color}


def default_panels() -> List[Panel]:
    return [InspectorPanel(), FilterPanel(), ColorPanel()]
