"""Resolve type references against the loaded schema family.

Two questions come up for every element shown in the outline: what primitive
type does its declared type ultimately boil down to, and is that type an
enumeration. Both look definitions up by local name across every loaded
document (root first, then imports), so a simpleType defined in an imported
file is found exactly like a local one.

Example:
        resolver = TypeResolver(QueryEngine(document_set))
        resolver.resolve_base_type("tns:StatusEnum")   # -> "string"
        resolver.is_enumeration_type("StatusEnum")     # -> True
"""

from __future__ import annotations

from typing import List, Optional

from lxml import etree

from .errors import TypeResolutionError
from .query import QueryEngine, quote_literal, strip_prefix

STRING_TYPES = ("string", "anyURI", "dateTime", "date", "token", "ID", "IDREF", "NCName")
NUMERIC_TYPES = ("decimal", "integer", "int", "long", "short", "byte", "float", "double")
BOOLEAN_TYPES = ("boolean",)
BUILTIN_TYPES = frozenset(STRING_TYPES + NUMERIC_TYPES + BOOLEAN_TYPES)


class TypeResolver:
    """Base-type and enumeration lookups over a :class:`QueryEngine`."""

    def __init__(self, engine: QueryEngine) -> None:
        self.engine = engine

    def find_simple_type(self, type_ref: Optional[str]) -> Optional[etree._Element]:
        name = strip_prefix(type_ref)
        if not name:
            return None
        return self.engine.first_across_all(f"//simpleType[@name={quote_literal(name)}]")

    def find_complex_type(self, type_ref: Optional[str]) -> Optional[etree._Element]:
        name = strip_prefix(type_ref)
        if not name:
            return None
        return self.engine.first_across_all(f"//complexType[@name={quote_literal(name)}]")

    def resolve_base_type(self, type_ref: Optional[str]) -> str:
        """Follow simpleType restrictions down to a built-in primitive name.

        Unknown names come back bare (prefix stripped) as opaque custom types.

        Raises:
            TypeResolutionError: If the restriction chain loops.
        """
        chain: List[str] = []
        name = strip_prefix(type_ref)
        while name and name not in BUILTIN_TYPES:
            if name in chain:
                raise TypeResolutionError(name, chain)
            chain.append(name)
            simple_type = self.find_simple_type(name)
            if simple_type is None:
                break
            restriction = self.engine.first("restriction", scope=simple_type)
            base = restriction.get("base") if restriction is not None else None
            if not base:
                break
            name = strip_prefix(base)
        return name

    def is_enumeration_type(self, type_ref: Optional[str]) -> bool:
        """True iff a simpleType of that name restricts with >= 1 enumeration."""
        simple_type = self.find_simple_type(type_ref)
        if simple_type is None:
            return False
        return bool(self.engine.select("restriction/enumeration", scope=simple_type))

    def enumeration_values(self, type_ref: Optional[str]) -> List[etree._Element]:
        """Return the ``enumeration`` elements of the named simpleType."""
        simple_type = self.find_simple_type(type_ref)
        if simple_type is None:
            return []
        return self.engine.select("restriction/enumeration", scope=simple_type)
