"""
elpick exceptions

Raised only by the outer surfaces (CLI, HTTP API). Path and filter
synthesis never raise.
"""


class ElpickError(Exception):
    """Base exception for elpick"""
    pass


class DocumentError(ElpickError):
    """Empty or unusable HTML input"""
    pass


class InvalidSelectorError(ElpickError):
    """CSS selector could not be parsed"""
    pass


class ElementNotFoundError(ElpickError):
    """Selector matched no element in the document"""
    pass
