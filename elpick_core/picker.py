"""
Picker - interactive element selection over a host document

One ``PickerController`` drives at most one ``PickerSession``. While a
session is active the controller listens to ``mousemove`` and ``click`` in
the capture phase, highlights the hovered element and, on the first click
outside the tool's own chrome, tears itself down and hands a ``PickCommit``
to the registered handler.

Usage:
    from elpick_core.picker import PickerController

    picker = PickerController(doc)
    picker.start(lambda commit: print(css_path(commit.element)))
    doc.dispatch("click", element)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from .config import config
from .dom import HostDocument, PointerEvent, closest_with_attribute, is_element, parent_element
from .highlight import ClassHighlighter, HighlightRenderer

logger = logging.getLogger(__name__)

HOVER_EVENT = "mousemove"
CLICK_EVENT = "click"


class PickerState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class PickCommit:
    """The element a pick session ended on"""
    element: Any
    source: Optional[str] = None


CommitHandler = Callable[[PickCommit], None]
StateListener = Callable[[bool, Optional[str]], None]


@dataclass
class PickerSession:
    """State of one pick interaction"""
    on_commit: Optional[CommitHandler]
    cursor_style: str = "crosshair"
    highlight_enabled: bool = True
    source: Optional[str] = None
    active: bool = True
    current_hover_target: Any = None


class PickerController:
    """
    Owns the single optional pick session for a document.

    Consumers receive the controller by reference (no module-level state) and
    learn about start/stop through ``add_state_listener``.
    """

    def __init__(
        self,
        document: HostDocument,
        highlighter: Optional[HighlightRenderer] = None,
        chrome_marker: Optional[str] = None,
    ):
        self.document = document
        self.highlighter = highlighter or ClassHighlighter()
        self.chrome_marker = chrome_marker or config.chrome_marker
        self._session: Optional[PickerSession] = None
        self._state_listeners: List[StateListener] = []
        # bound once so the same objects are added and removed
        self._hover_handler = self._on_hover
        self._click_handler = self._on_click

    @property
    def session(self) -> Optional[PickerSession]:
        return self._session

    @property
    def state(self) -> PickerState:
        return PickerState.ACTIVE if self._session is not None else PickerState.IDLE

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def add_state_listener(self, listener: StateListener) -> None:
        if listener not in self._state_listeners:
            self._state_listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._state_listeners:
            self._state_listeners.remove(listener)

    def start(
        self,
        on_commit: Optional[CommitHandler],
        cursor_style: Optional[str] = None,
        highlight_enabled: Optional[bool] = None,
        source: Optional[str] = None,
    ) -> bool:
        """
        Begin a pick session.

        Returns False (and changes nothing) when a session is already active.
        """
        if self._session is not None:
            logger.debug(f"Picker already active (source={self._session.source}), ignoring start from {source}")
            return False

        self._session = PickerSession(
            on_commit=on_commit,
            cursor_style=cursor_style or config.default_cursor,
            highlight_enabled=config.highlight_enabled if highlight_enabled is None else highlight_enabled,
            source=source,
        )
        self.document.cursor = self._session.cursor_style
        self.document.add_event_listener(HOVER_EVENT, self._hover_handler, capture=True)
        self.document.add_event_listener(CLICK_EVENT, self._click_handler, capture=True)
        logger.debug(f"Picker started (source={source}, cursor={self._session.cursor_style})")
        self._notify(True, source)
        return True

    def stop(self) -> None:
        session = self._session
        if session is None:
            return
        self.document.remove_event_listener(HOVER_EVENT, self._hover_handler, capture=True)
        self.document.remove_event_listener(CLICK_EVENT, self._click_handler, capture=True)
        self._clear_hover(session)
        self.document.cursor = ""
        session.active = False
        self._session = None
        logger.debug(f"Picker stopped (source={session.source})")
        self._notify(False, session.source)

    # --- event handling ---

    def _resolve_target(self, target: Any) -> Any:
        return target if is_element(target) else parent_element(target)

    def _is_chrome(self, element: Any) -> bool:
        return closest_with_attribute(element, self.chrome_marker) is not None

    def _clear_hover(self, session: PickerSession) -> None:
        if session.current_hover_target is not None and session.highlight_enabled:
            self.highlighter.clear(session.current_hover_target)
        session.current_hover_target = None

    def _on_hover(self, event: PointerEvent) -> None:
        session = self._session
        if session is None:
            return
        target = self._resolve_target(event.target)
        if target is None:
            return
        if self._is_chrome(target):
            self._clear_hover(session)
            return
        if target is session.current_hover_target:
            return
        self._clear_hover(session)
        session.current_hover_target = target
        if session.highlight_enabled:
            self.highlighter.show(target)

    def _on_click(self, event: PointerEvent) -> None:
        session = self._session
        if session is None:
            return
        target = self._resolve_target(event.target)
        if target is None or self._is_chrome(target):
            return
        event.prevent_default()
        event.stop_propagation()
        # tear down first so the handler may start a new session
        self.stop()
        if session.on_commit is not None:
            session.on_commit(PickCommit(element=target, source=session.source))

    def _notify(self, active: bool, source: Optional[str]) -> None:
        for listener in list(self._state_listeners):
            listener(active, source)
