"""Lazy outline tree construction over a loaded schema family.

The tree builder answers two questions for a tree view: what are the roots,
and what are the children of a node the user just expanded. Nothing is
computed ahead of time; a node only knows whether it *can* be expanded.

Child computation for an element merges several sources, in this order:

1. an inline ``complexType`` (final when it yields anything);
2. enumeration values when the declared type is an enumerated simpleType
   (final when it yields anything);
3. members of the named ``complexType`` the element refers to;
4. element/choice declarations found directly under the construct, with
   ``sequence``/``all`` wrappers flattened away.

Complex type members are collected as: inherited members (extension base
first, then the extension's own groups), then the type's own groups, then
elements declared directly under the type. Choice groups inside a type show
up as a ``<choice>`` node that expands to its alternatives.

Example:
        builder = TreeBuilder(document_set)
        for root in builder.get_root_nodes():
                print(root.name, [c.name for c in builder.get_children(root)])
"""

from __future__ import annotations

import logging
from typing import Callable, FrozenSet, List, Optional

from lxml import etree

from .errors import TypeResolutionError
from .locator import generate_locator
from .models import (
    CHOICE,
    CHOICE_LABEL,
    ELEMENT,
    ENUMERATION,
    DocumentSet,
    SchemaDocument,
    SchemaNode,
)
from .query import QueryEngine, local_name, quote_literal, strip_prefix
from .type_resolver import TypeResolver

logger = logging.getLogger(__name__)

GROUPS = ("sequence", "choice", "all")


class TreeBuilder:
    """Compute outline nodes for one :class:`DocumentSet`.

    The builder only reads the document set; it can be shared between
    threads for as long as the set is alive.

    Args:
        documents: Loaded root document and imports.
        engine: Query engine over ``documents`` (created when omitted).
        resolver: Type resolver over ``engine`` (created when omitted).
        notify: Callback receiving a message for each reported problem
            (restriction or extension cycles).
    """

    def __init__(
        self,
        documents: DocumentSet,
        engine: Optional[QueryEngine] = None,
        resolver: Optional[TypeResolver] = None,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.documents = documents
        self.engine = engine or QueryEngine(documents)
        self.resolver = resolver or TypeResolver(self.engine)
        self.notify = notify

    # ---------------- Node creation ---------------- #

    def get_root_nodes(self) -> List[SchemaNode]:
        """Global element declarations of the root document."""
        return [self.create_node(element) for element in self.engine.select("/*/element")]

    def create_node(self, element: etree._Element) -> SchemaNode:
        """Wrap an ``element`` declaration (or ``element ref``)."""
        source = self._content_of(element)
        name = element.get("name") or strip_prefix(element.get("ref"))
        type_ref = source.get("type") or None
        return SchemaNode(
            construct=element,
            name=name,
            kind=ELEMENT,
            document=self._owner(element),
            locator=generate_locator(element),
            has_children=self._element_has_children(source, type_ref),
            type_ref=type_ref,
            base_type=self._base_type(type_ref),
            declaration=source if source is not element else None,
        )

    def create_choice_node(self, choice: etree._Element) -> SchemaNode:
        has_children = any(local_name(child) == "element" for child in choice.iterchildren())
        return SchemaNode(
            construct=choice,
            name=CHOICE_LABEL,
            kind=CHOICE,
            document=self._owner(choice),
            locator=generate_locator(choice),
            has_children=has_children,
        )

    def create_enumeration_leaf(self, enumeration: etree._Element) -> SchemaNode:
        return SchemaNode(
            construct=enumeration,
            name=enumeration.get("value") or "",
            kind=ENUMERATION,
            document=self._owner(enumeration),
            locator=generate_locator(enumeration),
        )

    def node_for(self, construct: etree._Element) -> SchemaNode:
        """Build the node for any construct, e.g. one reached through a locator.

        Elements, choices and enumeration values get their usual nodes; a
        ``complexType`` becomes a node expanding to its members; anything else
        is a leaf named after its ``name`` attribute or local name.
        """
        kind = local_name(construct)
        if kind == ELEMENT:
            return self.create_node(construct)
        if kind == CHOICE:
            return self.create_choice_node(construct)
        if kind == ENUMERATION:
            return self.create_enumeration_leaf(construct)
        has_children = kind == "complexType" and self._type_has_members(construct)
        return SchemaNode(
            construct=construct,
            name=construct.get("name") or kind,
            kind=kind,
            document=self._owner(construct),
            locator=generate_locator(construct),
            has_children=has_children,
        )

    # ---------------- Children ---------------- #

    def get_children(self, node: SchemaNode) -> List[SchemaNode]:
        """Children of ``node``; always empty when ``node.has_children`` is False."""
        if not node.has_children:
            return []
        if node.kind == "complexType":
            return self.get_type_children(node.construct)

        source = node.content
        type_ref = source.get("type")
        children: List[SchemaNode] = []

        if local_name(source) == ELEMENT:
            inline = self.engine.first("complexType", scope=source)
            if inline is not None:
                children.extend(self.get_type_children(inline))
                if children:
                    return children
            if type_ref and self.resolver.is_enumeration_type(type_ref):
                children = [
                    self.create_enumeration_leaf(value)
                    for value in self.resolver.enumeration_values(type_ref)
                ]
                if children:
                    return children

        if type_ref:
            complex_type = self.resolver.find_complex_type(type_ref)
            if complex_type is not None:
                children.extend(self.get_type_children(complex_type))

        for child in source.iterchildren():
            child_name = local_name(child)
            if child_name == ELEMENT:
                children.append(self.create_node(child))
            elif child_name == CHOICE:
                children.append(self.create_choice_node(child))
            elif child_name in ("sequence", "all"):
                children.extend(self._members(child))
        return children

    def get_type_children(
        self, complex_type: etree._Element, _chain: FrozenSet = frozenset()
    ) -> List[SchemaNode]:
        """Members of a complexType: inherited, then grouped, then direct."""
        chain = _chain | {complex_type}
        children: List[SchemaNode] = []

        for extension in self.engine.select("complexContent/extension", scope=complex_type):
            base = extension.get("base")
            base_type = self.resolver.find_complex_type(base) if base else None
            if base_type is not None:
                if base_type in chain:
                    self._report(
                        f"Circular extension: complexType '{complex_type.get('name')}' "
                        f"extends '{strip_prefix(base)}'"
                    )
                else:
                    children.extend(self.get_type_children(base_type, chain))
            children.extend(self._groups(extension))

        children.extend(self._groups(complex_type))
        children.extend(self._members(complex_type))
        return children

    def _groups(self, parent: etree._Element) -> List[SchemaNode]:
        nodes: List[SchemaNode] = []
        for group in self.engine.select("sequence|choice|all", scope=parent):
            if local_name(group) == CHOICE:
                nodes.append(self.create_choice_node(group))
            else:
                nodes.extend(self._members(group))
        return nodes

    def _members(self, container: etree._Element) -> List[SchemaNode]:
        members: List[SchemaNode] = []
        for child in container.iterchildren():
            child_name = local_name(child)
            if child_name == ELEMENT:
                members.append(self.create_node(child))
            elif child_name == CHOICE:
                members.append(self.create_choice_node(child))
        return members

    # ---------------- Expandability ---------------- #

    def _element_has_children(self, element: etree._Element, type_ref: Optional[str]) -> bool:
        if type_ref:
            complex_type = self.resolver.find_complex_type(type_ref)
            if complex_type is not None and self._type_has_members(complex_type):
                return True
        for child in element.iterchildren():
            if local_name(child) == "complexType" and self._type_has_members(child):
                return True
        if _contains_element(element):
            return True
        return bool(type_ref) and self.resolver.is_enumeration_type(type_ref)

    def _type_has_members(self, complex_type: etree._Element) -> bool:
        if _contains_element(complex_type):
            return True
        return bool(self.engine.select("complexContent/extension", scope=complex_type))

    # ---------------- Helpers ---------------- #

    def _content_of(self, element: etree._Element) -> etree._Element:
        """Follow ``element ref="X"`` to the global declaration of ``X``."""
        ref = element.get("ref")
        if not ref or local_name(element) != ELEMENT:
            return element
        target = self.engine.first_across_all(
            f"/*/element[@name={quote_literal(strip_prefix(ref))}]"
        )
        return target if target is not None else element

    def _base_type(self, type_ref: Optional[str]) -> Optional[str]:
        if not type_ref:
            return None
        try:
            return self.resolver.resolve_base_type(type_ref)
        except TypeResolutionError as e:
            self._report(str(e))
            return strip_prefix(type_ref)

    def _owner(self, element: etree._Element) -> SchemaDocument:
        return self.documents.owner_of(element) or self.documents.root

    def _report(self, message: str) -> None:
        logger.warning(message)
        if self.notify is not None:
            self.notify(message)


def _contains_element(container: etree._Element) -> bool:
    """True if ``container`` has an element child, directly or via nested groups."""
    for child in container.iterchildren():
        child_name = local_name(child)
        if child_name == ELEMENT:
            return True
        if child_name in GROUPS and _contains_element(child):
            return True
    return False
