"""Namespace-agnostic structural queries over schema documents.

Schema authors pick whatever prefix they like for the XML Schema namespace
(``xs``, ``xsd``, none at all), so every lookup in this package matches on
*local* names only. Rather than depending on a general XPath engine, the
matcher below understands a deliberately small path language:

    /schema/element                 child steps from the document
    //complexType[@name='Order']    descendant step with an attribute predicate
    sequence|choice|all/element     relative to a scope element, alternatives
    //*[@name='Id']                 wildcard step

Literals may use single or double quotes; a quote character inside a literal
is written twice (``'it''s'``).

Results always come back in document order without duplicates. A malformed
expression is logged and yields an empty result; it never propagates.

Example:
        from xsd_outline.query import QueryEngine

        engine = QueryEngine(document_set)
        types = engine.select_across_all("//complexType[@name='OrderType']")
        members = engine.select("sequence|choice|all/element", scope=types[0])
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple, Union

from lxml import etree

from .errors import QuerySyntaxError
from .models import DocumentSet, SchemaDocument

logger = logging.getLogger(__name__)

XS_NAMESPACE = "http://www.w3.org/2001/XMLSchema"

_NAME_RE = re.compile(r"\*|[A-Za-z_][\w.\-]*(?:\|[A-Za-z_][\w.\-]*)*")
_ATTR_RE = re.compile(r"\[@([A-Za-z_][\w.\-:]*)=")

Scope = Union[SchemaDocument, etree._Element, None]


def local_name(element: etree._Element) -> str:
    """Return the unprefixed tag of ``element`` ('' for comments/PIs)."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def strip_prefix(value: Optional[str]) -> str:
    """Drop a namespace prefix from a QName-valued attribute ("xs:string" -> "string")."""
    if not value:
        return ""
    return value.rsplit(":", 1)[-1]


def quote_literal(value: str) -> str:
    """Quote ``value`` for use inside an ``[@attr=...]`` predicate."""
    return "'" + value.replace("'", "''") + "'"


@dataclass(frozen=True)
class Step:
    descendant: bool
    names: Tuple[str, ...]
    predicates: Tuple[Tuple[str, str], ...] = ()

    def matches(self, element: etree._Element) -> bool:
        name = local_name(element)
        if not name:
            return False
        if self.names != ("*",) and name not in self.names:
            return False
        return all(element.get(attr) == value for attr, value in self.predicates)


@dataclass(frozen=True)
class Query:
    expression: str
    absolute: bool
    steps: Tuple[Step, ...]


@lru_cache(maxsize=512)
def parse_query(expression: str) -> Query:
    """Parse ``expression`` into a :class:`Query`.

    Raises:
        QuerySyntaxError: If the expression does not follow the path language.
    """
    text = expression.strip()
    length = len(text)
    pos = 0
    steps: List[Step] = []
    while pos < length:
        if text.startswith("//", pos):
            descendant = True
            pos += 2
        elif text[pos] == "/":
            descendant = False
            pos += 1
        elif not steps:
            descendant = False
        else:
            raise QuerySyntaxError(expression, pos, "expected '/' or '//'")

        match = _NAME_RE.match(text, pos)
        if match is None:
            raise QuerySyntaxError(expression, pos, "expected a name or '*'")
        names = tuple(match.group().split("|"))
        pos = match.end()

        predicates: List[Tuple[str, str]] = []
        while pos < length and text[pos] == "[":
            attr_match = _ATTR_RE.match(text, pos)
            if attr_match is None:
                raise QuerySyntaxError(expression, pos, "expected [@attribute=")
            value, pos = _read_literal(expression, text, attr_match.end())
            if pos >= length or text[pos] != "]":
                raise QuerySyntaxError(expression, pos, "expected ']'")
            pos += 1
            predicates.append((attr_match.group(1), value))
        steps.append(Step(descendant, names, tuple(predicates)))

    if not steps:
        raise QuerySyntaxError(expression, 0, "empty expression")
    return Query(expression, text.startswith("/"), tuple(steps))


def _read_literal(expression: str, text: str, pos: int) -> Tuple[str, int]:
    if pos >= len(text) or text[pos] not in "'\"":
        raise QuerySyntaxError(expression, pos, "expected a quoted literal")
    quote = text[pos]
    pos += 1
    chars: List[str] = []
    while pos < len(text):
        char = text[pos]
        if char == quote:
            if text.startswith(quote * 2, pos):
                chars.append(quote)
                pos += 2
                continue
            return "".join(chars), pos + 1
        chars.append(char)
        pos += 1
    raise QuerySyntaxError(expression, pos, "unterminated literal")


def evaluate(query: Query, scope: Union[SchemaDocument, etree._Element]) -> List[etree._Element]:
    """Evaluate a parsed query against one document or element."""
    if isinstance(scope, SchemaDocument):
        root = scope.root
        start: Optional[etree._Element] = None
    else:
        root = scope.getroottree().getroot()
        start = None if query.absolute else scope

    contexts: List[Optional[etree._Element]] = [start]
    for step in query.steps:
        found: List[etree._Element] = []
        seen = set()
        for context in contexts:
            for candidate in _axis(root, context, step.descendant):
                if candidate not in seen and step.matches(candidate):
                    seen.add(candidate)
                    found.append(candidate)
        if len(contexts) > 1 and len(found) > 1:
            found = _document_order(root, seen)
        contexts = found
        if not contexts:
            break
    return [element for element in contexts if element is not None]


def _axis(
    root: etree._Element, context: Optional[etree._Element], descendant: bool
) -> Iterable[etree._Element]:
    # ``None`` stands for the document node above the root element.
    if context is None:
        return root.iter() if descendant else [root]
    return context.iterdescendants() if descendant else context.iterchildren()


def _document_order(root: etree._Element, wanted: set) -> List[etree._Element]:
    return [element for element in root.iter() if element in wanted]


class QueryEngine:
    """Run path queries against a :class:`DocumentSet`.

    Args:
        documents: Root document plus loaded imports. ``select`` defaults to
            the root document; ``select_across_all`` spans every document.
    """

    def __init__(self, documents: DocumentSet) -> None:
        self.documents = documents

    def select(self, expression: str, scope: Scope = None) -> List[etree._Element]:
        """Evaluate ``expression`` against ``scope`` (default: root document)."""
        target = self.documents.root if scope is None else scope
        try:
            return evaluate(parse_query(expression), target)
        except QuerySyntaxError as e:
            logger.error(f"Query error: {e}")
            return []

    def select_across_all(self, expression: str) -> List[etree._Element]:
        """Evaluate against the root document, then each import in binding order."""
        return [element for element, _ in self.select_with_owner(expression)]

    def select_with_owner(
        self, expression: str
    ) -> List[Tuple[etree._Element, SchemaDocument]]:
        results: List[Tuple[etree._Element, SchemaDocument]] = []
        for document in self.documents.documents():
            for element in self.select(expression, document):
                results.append((element, document))
        return results

    def first(self, expression: str, scope: Scope = None) -> Optional[etree._Element]:
        matches = self.select(expression, scope)
        return matches[0] if matches else None

    def first_across_all(self, expression: str) -> Optional[etree._Element]:
        matches = self.select_across_all(expression)
        return matches[0] if matches else None
