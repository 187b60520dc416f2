"""Tests for lazy outline tree construction."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from xsd_outline.documents import DocumentStore, parse_schema_text
from xsd_outline.files import LocalFileSystem
from xsd_outline.models import CHOICE, CHOICE_LABEL, ELEMENT, ENUMERATION, DocumentSet
from xsd_outline.tree import TreeBuilder

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


def _builder(name: str, notify=None) -> TreeBuilder:
    path = FIXTURES / name
    document = parse_schema_text(path.read_bytes(), str(path))
    return TreeBuilder(DocumentSet(root=document), notify=notify)


def _root(builder: TreeBuilder, name: str):
    return next(node for node in builder.get_root_nodes() if node.name == name)


def _child(builder: TreeBuilder, node, name: str):
    return next(child for child in builder.get_children(node) if child.name == name)


def _names(nodes):
    return [node.name for node in nodes]


class TestOrdersScenario:
    @pytest.fixture
    def builder(self):
        return _builder("orders.xsd")

    def test_roots_are_global_elements(self, builder):
        roots = builder.get_root_nodes()
        assert _names(roots) == ["Order"]
        assert roots[0].has_children is True
        assert roots[0].type_ref == "tns:OrderType"

    def test_named_complex_type_members(self, builder):
        order = _root(builder, "Order")
        children = builder.get_children(order)
        assert _names(children) == ["Id", "Status"]
        assert children[0].has_children is False
        assert children[0].base_type == "string"

    def test_enumeration_leaves(self, builder):
        status = _child(builder, _root(builder, "Order"), "Status")
        assert status.has_children is True
        assert status.base_type == "string"

        values = builder.get_children(status)
        assert _names(values) == ["NEW", "DONE"]
        assert all(value.kind == ENUMERATION for value in values)
        assert all(value.has_children is False for value in values)
        assert values[0].locator == "//simpleType[@name='StatusEnum']//enumeration[@value='NEW']"

    def test_leaf_has_no_children(self, builder):
        identifier = _child(builder, _root(builder, "Order"), "Id")
        assert builder.get_children(identifier) == []


class TestInheritance:
    @pytest.fixture
    def builder(self):
        return _builder("inheritance.xsd")

    def test_base_members_come_first(self, builder):
        assert _names(builder.get_children(_root(builder, "Item"))) == ["X", "Y"]

    def test_extension_without_own_members_is_expandable(self, builder):
        marker = _root(builder, "Marker")
        assert marker.has_children is True
        assert _names(builder.get_children(marker)) == ["X"]

    def test_type_children_of_base(self, builder):
        base = builder.engine.first("//complexType[@name='A']")
        assert _names(builder.get_type_children(base)) == ["X"]


class TestCatalog:
    @pytest.fixture
    def builder(self):
        return _builder("catalog.xsd")

    def test_roots(self, builder):
        assert _names(builder.get_root_nodes()) == ["Catalog", "Note", "Wrapper"]

    def test_inline_complex_type_with_ref_and_choice(self, builder):
        children = builder.get_children(_root(builder, "Catalog"))
        assert _names(children) == ["Title", "Product", "Note", CHOICE_LABEL]
        assert children[3].kind == CHOICE
        assert children[3].has_children is True

    def test_choice_expands_to_alternatives(self, builder):
        choice = _child(builder, _root(builder, "Catalog"), CHOICE_LABEL)
        assert _names(builder.get_children(choice)) == ["Pickup", "Price"]

    def test_element_ref_follows_global_declaration(self, builder):
        note = _child(builder, _root(builder, "Catalog"), "Note")
        assert note.kind == ELEMENT
        assert note.type_ref == "string"
        assert note.locator == "//sequence/element[@ref='Note']"

    def test_group_directly_under_element_is_flattened(self, builder):
        wrapper = _root(builder, "Wrapper")
        assert wrapper.has_children is True
        assert _names(builder.get_children(wrapper)) == ["Loose"]

    def test_nested_named_type(self, builder):
        product = _child(builder, _root(builder, "Catalog"), "Product")
        children = builder.get_children(product)
        assert _names(children) == ["Sku", "Size"]
        assert children[0].base_type == "token"
        assert _names(builder.get_children(children[1])) == ["S", "it's"]

    def test_node_for_complex_type(self, builder):
        product_type = builder.engine.first("//complexType[@name='ProductType']")
        node = builder.node_for(product_type)
        assert node.kind == "complexType"
        assert node.has_children is True
        assert _names(builder.get_children(node)) == ["Sku", "Size"]

    def test_node_for_attribute_is_a_leaf(self, builder):
        attribute = builder.engine.first("//attribute[@name='discontinued']")
        node = builder.node_for(attribute)
        assert node.name == "discontinued"
        assert node.has_children is False


class TestCycles:
    def test_restriction_cycle_falls_back_to_bare_name(self):
        notify = Mock()
        builder = _builder("cycles.xsd", notify=notify)

        broken = _root(builder, "Broken")

        assert broken.base_type == "SelfRef"
        assert broken.has_children is False
        assert builder.get_children(broken) == []
        assert any("SelfRef" in call.args[0] for call in notify.call_args_list)

    def test_extension_cycle_is_cut_and_reported(self):
        notify = Mock()
        builder = _builder("cycles.xsd", notify=notify)

        loop = _root(builder, "Loop")

        assert loop.has_children is True
        assert _names(builder.get_children(loop)) == ["FromD", "FromC"]
        assert any("Circular extension" in call.args[0] for call in notify.call_args_list)


def test_imported_types_drive_children():
    main = FIXTURES / "imports" / "main.xsd"
    result = DocumentStore(LocalFileSystem()).load(main.read_bytes(), str(main))
    builder = TreeBuilder(result.document_set)

    color, shade = builder.get_root_nodes()

    values = builder.get_children(color)
    assert _names(values) == ["red", "green"]
    assert values[0].source_location.endswith("other.xsd")
    assert _names(builder.get_children(shade)) == ["Level"]
    assert builder.get_children(shade)[0].base_type == "decimal"


def test_has_children_false_implies_no_children():
    for name in ("orders.xsd", "inheritance.xsd", "catalog.xsd", "cycles.xsd"):
        builder = _builder(name)
        pending = list(builder.get_root_nodes())
        seen = 0
        while pending and seen < 200:
            node = pending.pop()
            seen += 1
            children = builder.get_children(node)
            if not node.has_children:
                assert children == []
            pending.extend(children)


def test_mixed_inline_type_and_enumeration_type():
    text = (
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
        '<xs:element name="Odd" type="E"><xs:complexType/></xs:element>'
        '<xs:simpleType name="E"><xs:restriction base="xs:string">'
        '<xs:enumeration value="a"/></xs:restriction></xs:simpleType>'
        "</xs:schema>"
    )
    builder = TreeBuilder(DocumentSet(root=parse_schema_text(text)))
    [odd] = builder.get_root_nodes()
    # An empty inline type does not stop the enumeration branch.
    assert _names(builder.get_children(odd)) == ["a"]
