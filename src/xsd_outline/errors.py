"""Exception hierarchy for the outline engine.

Every failure raised inside the core derives from :class:`XsdOutlineError`
so hosts can catch the whole family at one boundary. None of them is fatal:
the component that owns the failing step catches it, reports it and keeps
going with whatever it could load.
"""

from __future__ import annotations

from typing import Optional


class XsdOutlineError(Exception):
    """Base class for all outline errors."""


class SchemaParseError(XsdOutlineError):
    """Raised when schema text is not well-formed XML.

    Attributes:
        location: Source location of the text, ``None`` for in-memory buffers.
    """

    def __init__(self, message: str, location: Optional[str] = None) -> None:
        super().__init__(message)
        self.location = location


class ImportResolutionError(XsdOutlineError):
    """Raised when an ``import``/``include`` hint cannot be located or loaded."""

    def __init__(self, hint: str, reason: str) -> None:
        super().__init__(f"Can't load imported schema: {hint} ({reason})")
        self.hint = hint
        self.reason = reason


class QuerySyntaxError(XsdOutlineError):
    """Raised by the expression parser for malformed query strings."""

    def __init__(self, expression: str, position: int, reason: str) -> None:
        super().__init__(f"{reason} at position {position} in {expression!r}")
        self.expression = expression
        self.position = position


class TypeResolutionError(XsdOutlineError):
    """Raised when a simpleType restriction chain loops back on itself."""

    def __init__(self, type_name: str, chain: Optional[list] = None) -> None:
        self.type_name = type_name
        self.chain = list(chain or [])
        path = " -> ".join(self.chain + [type_name])
        super().__init__(f"Circular restriction chain for type '{type_name}': {path}")
