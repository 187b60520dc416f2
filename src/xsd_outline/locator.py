"""Structural addresses for schema constructs.

A locator is a path in the :mod:`xsd_outline.query` language built only from
local names and ``name`` attribute values, e.g.::

    //complexType[@name='OrderType']/sequence/element[@name='Status']
    //simpleType[@name='StatusEnum']//enumeration[@value='NEW']

Because prefixes never appear, a locator keeps working after the schema is
reformatted or re-prefixed as long as structural names stay the same. For
schemas whose names are unique, ``resolve(generate(c))`` gives back ``c``;
duplicated unnamed siblings resolve to the first match.
"""

from __future__ import annotations

from typing import Optional, Tuple

from lxml import etree

from .models import SchemaDocument
from .query import QueryEngine, local_name, quote_literal


def generate_locator(element: etree._Element) -> str:
    """Build the locator for ``element``."""
    name = local_name(element)
    if name == "enumeration":
        return _enumeration_locator(element)

    step = _step(element)
    parent = element.getparent()
    if parent is None:
        return f"//{step}"

    if parent.get("name"):
        anchor = _named(parent)
    else:
        grandparent = parent.getparent()
        if grandparent is not None and grandparent.get("name"):
            anchor = f"{_named(grandparent)}/{local_name(parent)}"
        else:
            anchor = f"//{local_name(parent)}"
    return f"{anchor}/{step}"


def _enumeration_locator(element: etree._Element) -> str:
    value = quote_literal(element.get("value") or "")
    for ancestor in element.iterancestors():
        if local_name(ancestor) == "simpleType" and ancestor.get("name"):
            return f"{_named(ancestor)}//enumeration[@value={value}]"
    return f"//enumeration[@value={value}]"


def _named(element: etree._Element) -> str:
    return f"//{local_name(element)}[@name={quote_literal(element.get('name'))}]"


def _step(element: etree._Element) -> str:
    name = local_name(element)
    if element.get("name"):
        return f"{name}[@name={quote_literal(element.get('name'))}]"
    if element.get("ref"):
        return f"{name}[@ref={quote_literal(element.get('ref'))}]"
    return name


def line_of(element: etree._Element) -> int:
    """Zero-based line where ``element`` starts (0 when unknown)."""
    line = element.sourceline
    return line - 1 if line else 0


class NodeLocator:
    """Generate locators and resolve them across a document set."""

    def __init__(self, engine: QueryEngine) -> None:
        self.engine = engine

    @staticmethod
    def generate(element: etree._Element) -> str:
        return generate_locator(element)

    def resolve(
        self, locator: str
    ) -> Optional[Tuple[etree._Element, SchemaDocument]]:
        """Find the construct addressed by ``locator``.

        Searches the root document first, then each import in binding order.
        """
        for document in self.engine.documents.documents():
            matches = self.engine.select(locator, document)
            if matches:
                return matches[0], document
        return None
