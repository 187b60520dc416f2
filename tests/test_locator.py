"""Tests for locator generation and resolution."""

from pathlib import Path

import pytest

from xsd_outline.documents import DocumentStore, parse_schema_text
from xsd_outline.files import LocalFileSystem
from xsd_outline.locator import NodeLocator, generate_locator, line_of
from xsd_outline.models import DocumentSet
from xsd_outline.query import QueryEngine

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


def _engine(name: str) -> QueryEngine:
    path = FIXTURES / name
    return QueryEngine(DocumentSet(root=parse_schema_text(path.read_bytes(), str(path))))


class TestGenerate:
    @pytest.fixture
    def engine(self):
        return _engine("orders.xsd")

    def test_global_element(self, engine):
        order = engine.first("/*/element")
        assert generate_locator(order) == "//schema/element[@name='Order']"

    def test_member_of_named_type(self, engine):
        status = engine.first("//element[@name='Status']")
        assert (
            generate_locator(status)
            == "//complexType[@name='OrderType']/sequence/element[@name='Status']"
        )

    def test_named_parent(self, engine):
        restriction = engine.first("//restriction")
        assert generate_locator(restriction) == "//simpleType[@name='StatusEnum']/restriction"

    def test_schema_root(self, engine):
        assert generate_locator(engine.documents.root.root) == "//schema"

    def test_enumeration_without_named_type(self):
        text = (
            '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">'
            '<xs:element name="A"><xs:simpleType><xs:restriction base="xs:string">'
            '<xs:enumeration value="x"/></xs:restriction></xs:simpleType></xs:element>'
            "</xs:schema>"
        )
        engine = QueryEngine(DocumentSet(root=parse_schema_text(text)))
        assert generate_locator(engine.first("//enumeration")) == "//enumeration[@value='x']"

    def test_quotes_in_values_are_escaped(self):
        engine = _engine("catalog.xsd")
        value = engine.first("//enumeration[@value=\"it's\"]")
        assert (
            generate_locator(value)
            == "//simpleType[@name='SizeEnum']//enumeration[@value='it''s']"
        )


@pytest.mark.parametrize("name", ["orders.xsd", "catalog.xsd", "inheritance.xsd"])
def test_round_trip_for_unique_names(name):
    engine = _engine(name)
    locator = NodeLocator(engine)
    for expression in ("//element", "//complexType", "//simpleType", "//enumeration", "//choice"):
        for construct in engine.select(expression):
            resolved, document = locator.resolve(locator.generate(construct))
            assert resolved is construct
            assert document is engine.documents.root


def test_resolve_searches_imports_after_root():
    main = FIXTURES / "imports" / "main.xsd"
    result = DocumentStore(LocalFileSystem()).load(main.read_bytes(), str(main))
    locator = NodeLocator(QueryEngine(result.document_set))

    construct, document = locator.resolve(
        "//simpleType[@name='ColorCode']//enumeration[@value='red']"
    )

    assert construct.get("value") == "red"
    assert document.location.endswith("other.xsd")
    assert line_of(construct) == 5


def test_resolve_missing_and_malformed():
    locator = NodeLocator(_engine("orders.xsd"))
    assert locator.resolve("//element[@name='Nope']") is None
    assert locator.resolve("//element[") is None


def test_line_of_is_zero_based():
    engine = _engine("orders.xsd")
    assert line_of(engine.first("/*/element")) == 5
