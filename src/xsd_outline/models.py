"""Core data structures shared by the outline components.

These are plain dataclasses so they can be produced by the document store and
tree builder, handed to a host UI or the HTTP layer, and thrown away on the
next recompute without any framework coupling.

Overview:
        * ``SchemaDocument`` wraps one parsed source text (root document or an
            imported/included one).
        * ``ImportBinding`` ties a namespace string to the document loaded for it.
        * ``SchemaNode`` is the immutable tree-view entity over one construct
            (element, choice group, enumeration value).
        * ``TreeItem`` is the rendered surface of a node for a UI layer.
        * ``NavigationTarget`` is where a locator points to in source.

Typical flow::

        from xsd_outline.outline import SchemaOutline

        outline = SchemaOutline()
        outline.update(text, location="/schemas/order.xsd")
        roots = outline.get_children()
        items = [outline.get_tree_item(node, i) for i, node in enumerate(roots)]
        print([item.to_dict() for item in items])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lxml import etree

ELEMENT = "element"
CHOICE = "choice"
ENUMERATION = "enumeration"

CHOICE_LABEL = "<choice>"


class IconKind:
    """Icon categories understood by tree renderers."""

    TYPE_DEFINITION = "type-definition"
    ENUMERATION_KIND = "enumeration-kind"
    FIELD = "field"
    ELEMENT = "element"
    CHOICE_GROUP = "choice-group"
    ATTRIBUTE = "attribute"
    ENUMERATION_VALUE = "enumeration-value"
    DEFAULT = "default"

    ALL = (
        TYPE_DEFINITION,
        ENUMERATION_KIND,
        FIELD,
        ELEMENT,
        CHOICE_GROUP,
        ATTRIBUTE,
        ENUMERATION_VALUE,
        DEFAULT,
    )


@dataclass
class SchemaDocument:
    """A parsed schema source.

    Attributes:
        root: Root element of the parsed tree.
        location: Path or URI the text came from (``None`` for unsaved buffers).
        mtime: Modification timestamp for file-backed sources, else ``None``.
    """

    root: etree._Element
    location: Optional[str] = None
    mtime: Optional[float] = None

    @property
    def identity(self) -> str:
        return self.location or "<memory>"

    def owns(self, element: etree._Element) -> bool:
        """Return True if ``element`` belongs to this document's tree."""
        return element.getroottree().getroot() is self.root


@dataclass
class ImportBinding:
    namespace: str
    document: SchemaDocument
    location: str


@dataclass
class DocumentSet:
    """The root document plus every successfully loaded import.

    ``bindings`` preserves registration order: a namespace re-bound by a later
    directive keeps its original position but points at the new document.
    """

    root: SchemaDocument
    bindings: Dict[str, ImportBinding] = field(default_factory=dict)

    def documents(self) -> List[SchemaDocument]:
        """Root first, then imported documents in binding order."""
        return [self.root] + [binding.document for binding in self.bindings.values()]

    def owner_of(self, element: etree._Element) -> Optional[SchemaDocument]:
        for document in self.documents():
            if document.owns(element):
                return document
        return None


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """View of one schema construct inside the outline tree.

    Nodes are created by :class:`~xsd_outline.tree.TreeBuilder` when their
    parent is expanded and are never mutated afterwards.

    Attributes:
        construct: Underlying ``element``/``choice``/``enumeration`` element.
        name: Display name (``<choice>`` for choice groups, the literal for
            enumeration values).
        kind: One of ``element``, ``choice`` or ``enumeration``.
        type_ref: Declared ``type`` attribute as written (may be prefixed).
        base_type: Ultimate base type of ``type_ref`` (``None`` when untyped).
        has_children: Expandability, computed once at creation.
        document: Document that owns ``construct``.
        locator: Structural address that resolves back to ``construct``.
        declaration: Global declaration an ``element ref`` points at, if any.
    """

    construct: etree._Element
    name: str
    kind: str
    document: SchemaDocument
    locator: str
    has_children: bool = False
    type_ref: Optional[str] = None
    base_type: Optional[str] = None
    declaration: Optional[etree._Element] = None

    @property
    def content(self) -> etree._Element:
        """The declaration carrying the node's type, docs and nillability."""
        return self.declaration if self.declaration is not None else self.construct

    @property
    def source_location(self) -> Optional[str]:
        return self.document.location


@dataclass
class TreeItem:
    """Rendered representation of a :class:`SchemaNode` for a UI layer.

    Attributes:
        node_id: Deterministic identity (``<locator>#<ordinal>``) used to key
            decorations.
        label: Display name.
        description: Type description shown next to the label.
        tooltip: Documentation text, falling back to the label.
        documentation: Raw documentation text (``None`` when absent).
        icon: One of :attr:`IconKind.ALL`.
        value_category: ``text``, ``number`` or ``boolean`` for primitive
            fields, otherwise ``None``.
        locator: Navigation locator passed back to ``focus``.
        collapsible: Whether the node can be expanded.
        source_location: Location of the owning document.
    """

    node_id: str
    label: str
    description: str
    tooltip: str
    icon: str
    locator: str
    collapsible: bool
    documentation: Optional[str] = None
    value_category: Optional[str] = None
    source_location: Optional[str] = None
    children: list = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the item (and any expanded children) to primitives."""
        return {
            "node_id": self.node_id,
            "label": self.label,
            "description": self.description,
            "tooltip": self.tooltip,
            "documentation": self.documentation,
            "icon": self.icon,
            "value_category": self.value_category,
            "locator": self.locator,
            "collapsible": self.collapsible,
            "source_location": self.source_location,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class NavigationTarget:
    """Where a locator points: owning document location and zero-based line."""

    location: Optional[str]
    line: int
    locator: str
    name: Optional[str] = None
