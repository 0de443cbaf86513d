"""
Highlight - hover indicator seam

The picker only toggles a CSS class on the hovered element and tells an
optional overlay hook what is highlighted now. Drawing the box is the
overlay's business.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from .config import config
from .dom import add_class, is_element, remove_class

logger = logging.getLogger(__name__)


class HighlightRenderer(Protocol):
    def show(self, element: Any) -> None: ...

    def clear(self, element: Any) -> None: ...


class ClassHighlighter:
    """Marks the hovered element with a class and notifies ``on_update``."""

    def __init__(
        self,
        class_name: Optional[str] = None,
        on_update: Optional[Callable[[Any], None]] = None,
    ):
        self.class_name = class_name or config.highlight_class
        self.on_update = on_update

    def show(self, element: Any) -> None:
        if not is_element(element):
            return
        add_class(element, self.class_name)
        if self.on_update:
            self.on_update(element)

    def clear(self, element: Any) -> None:
        if not is_element(element):
            return
        remove_class(element, self.class_name)
        if self.on_update:
            self.on_update(None)
