"""
Toolkit - composes panels around one picker and one preference store

Usage:
    from elpick_core.toolkit import Toolkit

    toolkit = Toolkit(doc)
    toolkit.toggle_picker("inspector")
    doc.dispatch("click", element)
    toolkit.panel("filters").render()
"""

import logging
from typing import Any, Dict, List, Optional

from .dom import HostDocument, PointerEvent
from .highlight import ClassHighlighter
from .panels import Panel, default_panels
from .picker import CLICK_EVENT, HOVER_EVENT, PickerController
from .preferences import PreferenceStore

logger = logging.getLogger(__name__)


class Toolkit:
    """Owns the document's picker and routes its messages to panels."""

    def __init__(
        self,
        document: HostDocument,
        panels: Optional[List[Panel]] = None,
        prefs: Optional[PreferenceStore] = None,
        highlighter: Optional[ClassHighlighter] = None,
    ):
        self.document = document
        self.prefs = prefs
        self.highlighter = highlighter or ClassHighlighter()
        self.picker = PickerController(document, highlighter=self.highlighter)
        self.panels: Dict[str, Panel] = {}
        for panel in panels if panels is not None else default_panels():
            self.panels[panel.id] = panel
        self.active_tab: Optional[str] = None

        self.picker.add_state_listener(self._on_picker_state_changed)
        for panel in self.panels.values():
            panel.bind_events(self)

    @property
    def domain(self) -> str:
        return self.document.hostname

    @property
    def component_ids(self) -> List[str]:
        return list(self.panels)

    def panel(self, panel_id: str) -> Optional[Panel]:
        return self.panels.get(panel_id)

    # --- picking ---

    def _pref(self, key: str, default: Any = None) -> Any:
        if self.prefs is None:
            return default
        return self.prefs.get(key, default)

    def toggle_picker(self, panel_id: str) -> bool:
        """
        Start picking for ``panel_id``, or stop the running session.

        Returns whether a session is active afterwards.
        """
        if self.picker.is_active:
            self.picker.stop()
            return False
        panel = self.panel(panel_id)
        if panel is None:
            logger.warning(f"Unknown panel {panel_id!r}, picker not started")
            return False
        cursor = panel.pick_cursor or self._pref("picker.cursor")
        highlight = panel.pick_highlight if panel.pick_highlight is not None else self._pref("picker.highlight")
        return self.picker.start(panel.update, cursor_style=cursor, highlight_enabled=highlight, source=panel.id)

    def pick(self, element: Any, panel_id: str = "inspector") -> PointerEvent:
        """Hover then click ``element`` on behalf of ``panel_id``."""
        if not self.picker.is_active:
            self.toggle_picker(panel_id)
        self.document.dispatch(HOVER_EVENT, element)
        return self.document.dispatch(CLICK_EVENT, element)

    def _on_picker_state_changed(self, active: bool, source: Optional[str]) -> None:
        for panel in self.panels.values():
            panel.on_picker_state_changed(active, source)

    # --- tabs ---

    def visible_panels(self) -> List[Panel]:
        if self.prefs is None:
            return list(self.panels.values())
        order = self.prefs.get("component_order") or self.component_ids
        visible = []
        for panel_id in order:
            panel = self.panels.get(panel_id)
            state = self.prefs.get_component_state(panel_id) or {}
            if panel is not None and state.get("show_in_toolbar", True):
                visible.append(panel)
        return visible

    def set_panel_visible(self, panel_id: str, show: bool) -> None:
        if self.prefs is None:
            return
        state = dict(self.prefs.get_component_state(panel_id) or {})
        state["show_in_toolbar"] = show
        self.prefs.set_component_state(panel_id, state)

    def set_active_tab(self, panel_id: str) -> Optional[str]:
        """Activate ``panel_id``; hidden or unknown ids fall back to the first visible panel."""
        visible = [p.id for p in self.visible_panels()]
        if panel_id not in visible:
            panel_id = visible[0] if visible else None
        if panel_id is None:
            return None
        self.active_tab = panel_id
        if self.prefs is not None:
            self.prefs.set("active_tab", panel_id)
        return panel_id

    def render(self) -> Dict[str, Any]:
        session = self.picker.session
        return {
            "domain": self.domain,
            "active_tab": self.active_tab,
            "picker": {
                "state": self.picker.state.value,
                "source": session.source if session else None,
                "cursor": self.document.cursor,
            },
            "panels": [panel.render() for panel in self.visible_panels()],
        }
