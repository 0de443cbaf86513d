"""
elpick_core package: element picking, selector paths and cosmetic filters

Usage:
    from elpick_core import HostDocument, Toolkit, css_path, generate_filters

    doc = HostDocument.from_html(html, url="https://example.com/")
    element = doc.query("li.item")
    css_path(element)
    generate_filters(element, doc.hostname)
"""

__version__ = "1.0.0"

from .config import Config, config
from .exceptions import ElpickError, DocumentError, InvalidSelectorError, ElementNotFoundError
from .dom import HostDocument, PointerEvent
from .selector_path import css_path, escape_identifier
from .filter_rules import FilterCandidate, generate_filters, is_noise_class
from .highlight import ClassHighlighter, HighlightRenderer
from .picker import PickCommit, PickerController, PickerSession, PickerState
from .preferences import (
    JSONFileBackend,
    MemoryBackend,
    PreferenceStore,
    build_defaults,
    merge_preferences,
)
from .panels import ColorPanel, FilterPanel, InspectorPanel, Panel, default_panels
from .toolkit import Toolkit

__all__ = [
    # Core
    "Config",
    "config",
    "HostDocument",
    "PointerEvent",
    "css_path",
    "escape_identifier",
    "FilterCandidate",
    "generate_filters",
    "is_noise_class",
    # Picker
    "PickCommit",
    "PickerController",
    "PickerSession",
    "PickerState",
    "ClassHighlighter",
    "HighlightRenderer",
    # Preferences
    "PreferenceStore",
    "MemoryBackend",
    "JSONFileBackend",
    "build_defaults",
    "merge_preferences",
    # Panels
    "Panel",
    "InspectorPanel",
    "FilterPanel",
    "ColorPanel",
    "default_panels",
    "Toolkit",
    # Errors
    "ElpickError",
    "DocumentError",
    "InvalidSelectorError",
    "ElementNotFoundError",
]
