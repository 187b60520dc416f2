"""Render :class:`SchemaNode` objects into :class:`TreeItem` records.

Rendering is where the outline meets the UI, so it is also where occurrence
badges and nillable hints get registered with the decoration store: the
decoration key is the item's node id, which only exists once the item has
been built.
"""

from __future__ import annotations

from typing import Optional

from lxml import etree

from .annotations import get_documentation
from .decorations import DecorationStore
from .models import ELEMENT, IconKind, SchemaNode, TreeItem
from .query import local_name
from .type_resolver import BOOLEAN_TYPES, NUMERIC_TYPES, STRING_TYPES, TypeResolver


def node_id_for(node: SchemaNode, ordinal: int) -> str:
    """Deterministic identity of a rendered node: ``<locator>#<ordinal>``."""
    return f"{node.locator}#{ordinal}"


def value_category(base_type: Optional[str]) -> Optional[str]:
    if not base_type:
        return None
    if base_type in STRING_TYPES:
        return "text"
    if base_type in NUMERIC_TYPES:
        return "number"
    if base_type in BOOLEAN_TYPES:
        return "boolean"
    return None


class TreeItemFactory:
    """Build tree items and publish their decorations.

    Args:
        resolver: Type resolver of the current document set.
        decorations: Store receiving badges and nillable hints (optional).
    """

    def __init__(
        self, resolver: TypeResolver, decorations: Optional[DecorationStore] = None
    ) -> None:
        self.resolver = resolver
        self.decorations = decorations

    def create(self, node: SchemaNode, ordinal: int = 0) -> TreeItem:
        node_id = node_id_for(node, ordinal)
        documentation = get_documentation(node.content)
        icon, category = self.icon_for(node)
        self._decorate(node, node_id)
        return TreeItem(
            node_id=node_id,
            label=node.name,
            description=node.type_ref or "",
            tooltip=documentation or node.name,
            icon=icon,
            locator=node.locator,
            collapsible=node.has_children,
            documentation=documentation,
            value_category=category,
            source_location=node.source_location,
        )

    def icon_for(self, node: SchemaNode):
        """Return ``(icon, value_category)`` for ``node``."""
        kind = local_name(node.construct)
        if kind == "complexType":
            return IconKind.TYPE_DEFINITION, None
        if kind == "simpleType":
            if self.resolver.is_enumeration_type(node.name):
                return IconKind.ENUMERATION_KIND, None
            return IconKind.FIELD, None
        if kind == ELEMENT:
            return self._element_icon(node)
        if kind == "choice":
            return IconKind.CHOICE_GROUP, None
        if kind == "attribute":
            return IconKind.ATTRIBUTE, None
        if kind == "enumeration":
            return IconKind.ENUMERATION_VALUE, None
        return IconKind.DEFAULT, None

    def _element_icon(self, node: SchemaNode):
        if node.type_ref:
            if self.resolver.is_enumeration_type(node.type_ref):
                return IconKind.ENUMERATION_KIND, None
            category = value_category(node.base_type)
            return IconKind.FIELD, category
        if _has_inline_type(node.content):
            return IconKind.ELEMENT, None
        return IconKind.FIELD, None

    def _decorate(self, node: SchemaNode, node_id: str) -> None:
        if self.decorations is None:
            return
        construct = node.construct
        if node.content.get("nillable") == "true":
            self.decorations.update_nillable(node_id, True)
        if local_name(construct) == ELEMENT:
            min_occurs = construct.get("minOccurs")
            max_occurs = construct.get("maxOccurs")
            if min_occurs or max_occurs:
                self.decorations.update_occurrences(node_id, min_occurs, max_occurs)


def _has_inline_type(element: etree._Element) -> bool:
    return any(local_name(child) == "complexType" for child in element.iterchildren())
