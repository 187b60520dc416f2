"""Tests for tree item rendering and decoration registration."""

from pathlib import Path

import pytest

from xsd_outline.decorations import DecorationStore
from xsd_outline.documents import parse_schema_text
from xsd_outline.models import CHOICE_LABEL, DocumentSet, IconKind
from xsd_outline.presentation import TreeItemFactory, node_id_for, value_category
from xsd_outline.tree import TreeBuilder

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


@pytest.fixture
def catalog():
    path = FIXTURES / "catalog.xsd"
    builder = TreeBuilder(DocumentSet(root=parse_schema_text(path.read_bytes(), str(path))))
    decorations = DecorationStore()
    return builder, TreeItemFactory(builder.resolver, decorations), decorations


def _by_name(nodes):
    return {node.name: node for node in nodes}


def test_value_categories():
    assert value_category("token") == "text"
    assert value_category("double") == "number"
    assert value_category("boolean") == "boolean"
    assert value_category("ProductType") is None
    assert value_category(None) is None


def test_root_item(catalog):
    builder, items, _ = catalog
    catalog_node = builder.get_root_nodes()[0]

    item = items.create(catalog_node, 0)

    assert item.node_id == "//schema/element[@name='Catalog']#0"
    assert item.node_id == node_id_for(catalog_node, 0)
    assert item.label == "Catalog"
    assert item.description == ""
    assert item.tooltip == "Product catalog. Second paragraph."
    assert item.icon == IconKind.ELEMENT
    assert item.collapsible is True
    assert item.source_location.endswith("catalog.xsd")


def test_tooltip_falls_back_to_label(catalog):
    builder, items, _ = catalog
    wrapper = builder.get_root_nodes()[2]
    item = items.create(wrapper, 2)
    assert item.documentation is None
    assert item.tooltip == "Wrapper"
    assert item.icon == IconKind.FIELD


def test_member_icons(catalog):
    builder, items, _ = catalog
    children = _by_name(builder.get_children(builder.get_root_nodes()[0]))

    title = items.create(children["Title"])
    assert (title.icon, title.value_category, title.description) == (IconKind.FIELD, "text", "string")

    product = items.create(children["Product"])
    assert (product.icon, product.value_category) == (IconKind.FIELD, None)

    assert items.create(children[CHOICE_LABEL]).icon == IconKind.CHOICE_GROUP

    alternatives = _by_name(builder.get_children(children[CHOICE_LABEL]))
    assert items.create(alternatives["Pickup"]).value_category == "boolean"
    assert items.create(alternatives["Price"]).value_category == "number"

    size = _by_name(builder.get_children(children["Product"]))["Size"]
    assert items.create(size).icon == IconKind.ENUMERATION_KIND
    value = builder.get_children(size)[0]
    assert items.create(value).icon == IconKind.ENUMERATION_VALUE


def test_type_and_attribute_icons(catalog):
    builder, items, _ = catalog
    product_type = builder.node_for(builder.engine.first("//complexType[@name='ProductType']"))
    size_enum = builder.node_for(builder.engine.first("//simpleType[@name='SizeEnum']"))
    sku_code = builder.node_for(builder.engine.first("//simpleType[@name='SkuCode']"))
    attribute = builder.node_for(builder.engine.first("//attribute"))
    sequence = builder.node_for(builder.engine.first("//sequence"))

    assert items.create(product_type).icon == IconKind.TYPE_DEFINITION
    assert items.create(size_enum).icon == IconKind.ENUMERATION_KIND
    assert items.create(sku_code).icon == IconKind.FIELD
    assert items.create(attribute).icon == IconKind.ATTRIBUTE
    assert items.create(sequence).icon == IconKind.DEFAULT


def test_decorations_are_registered(catalog):
    builder, items, decorations = catalog
    roots = builder.get_root_nodes()
    children = builder.get_children(roots[0])
    product = items.create(children[1], 1)
    note = items.create(roots[1], 1)
    title = items.create(children[0], 0)

    assert decorations.get(product.node_id).badge == "0∞"
    assert decorations.get(note.node_id).nillable is True
    assert decorations.get(title.node_id) is None

    sku = items.create(builder.get_children(children[1])[0], 0)
    assert decorations.get(sku.node_id) is None


def test_rendered_icons_are_known_kinds(catalog):
    builder, items, _ = catalog
    pending = builder.get_root_nodes()
    icons = set()
    while pending:
        node = pending.pop()
        icons.add(items.create(node).icon)
        pending.extend(builder.get_children(node))

    assert icons <= set(IconKind.ALL)
    assert IconKind.ENUMERATION_VALUE in icons


def test_to_dict_includes_children(catalog):
    builder, items, _ = catalog
    root = items.create(builder.get_root_nodes()[0], 0)
    root.children = [items.create(builder.get_children(builder.get_root_nodes()[0])[0], 0)]

    data = root.to_dict()

    assert data["label"] == "Catalog"
    assert data["children"][0]["label"] == "Title"
    assert data["children"][0]["children"] == []


def test_element_ref_renders_referenced_declaration():
    text = b"""<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="Shipment">
    <xs:complexType>
      <xs:sequence>
        <xs:element ref="Address"/>
      </xs:sequence>
    </xs:complexType>
  </xs:element>
  <xs:element name="Address" nillable="true">
    <xs:annotation><xs:documentation>Delivery address.</xs:documentation></xs:annotation>
    <xs:complexType>
      <xs:sequence><xs:element name="Street" type="xs:string"/></xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>"""
    builder = TreeBuilder(DocumentSet(root=parse_schema_text(text, "untitled:/ship.xsd")))
    decorations = DecorationStore()
    items = TreeItemFactory(builder.resolver, decorations)
    address = builder.get_children(builder.get_root_nodes()[0])[0]

    item = items.create(address, 0)

    assert item.label == "Address"
    assert item.tooltip == "Delivery address."
    assert item.icon == IconKind.ELEMENT
    assert item.collapsible is True
    assert decorations.get(item.node_id).nillable is True
