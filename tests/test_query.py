"""Tests for the local-name path matcher."""

from pathlib import Path

import pytest

from xsd_outline.documents import DocumentStore, parse_schema_text
from xsd_outline.errors import QuerySyntaxError
from xsd_outline.files import LocalFileSystem
from xsd_outline.models import DocumentSet
from xsd_outline.query import (
    QueryEngine,
    local_name,
    parse_query,
    quote_literal,
    strip_prefix,
)

FIXTURES = Path(__file__).resolve().parent / "fixtures" / "schema"


@pytest.fixture
def orders_engine():
    document = parse_schema_text((FIXTURES / "orders.xsd").read_bytes(), "orders.xsd")
    return QueryEngine(DocumentSet(root=document))


@pytest.fixture
def imports_engine():
    main = FIXTURES / "imports" / "main.xsd"
    result = DocumentStore(LocalFileSystem()).load(main.read_bytes(), str(main))
    return QueryEngine(result.document_set)


def _names(elements):
    return [e.get("name") or e.get("value") for e in elements]


class TestParseQuery:
    def test_steps_and_predicates(self):
        query = parse_query("//complexType[@name='OrderType']/sequence/element")
        assert query.absolute is True
        assert [step.descendant for step in query.steps] == [True, False, False]
        assert query.steps[0].predicates == (("name", "OrderType"),)

    def test_relative_expression(self):
        query = parse_query("sequence|choice|all/element")
        assert query.absolute is False
        assert query.steps[0].names == ("sequence", "choice", "all")

    def test_doubled_quote_escape(self):
        query = parse_query("//enumeration[@value='it''s']")
        assert query.steps[0].predicates == (("value", "it's"),)

    def test_double_quoted_literal(self):
        query = parse_query('//element[@name="Id"]')
        assert query.steps[0].predicates == (("name", "Id"),)

    @pytest.mark.parametrize(
        "expression",
        ["", "//", "//element[@name='x'", "//element[name='x']", "a//", "//element[@name=x]"],
    )
    def test_malformed_expressions(self, expression):
        with pytest.raises(QuerySyntaxError):
            parse_query(expression)


def test_helpers():
    assert strip_prefix("xs:string") == "string"
    assert strip_prefix("string") == "string"
    assert strip_prefix(None) == ""
    assert quote_literal("it's") == "'it''s'"


class TestSelect:
    def test_absolute_child_steps(self, orders_engine):
        assert _names(orders_engine.select("/*/element")) == ["Order"]
        assert _names(orders_engine.select("/schema/complexType")) == ["OrderType"]

    def test_descendant_step_in_document_order(self, orders_engine):
        assert _names(orders_engine.select("//element")) == ["Order", "Id", "Status"]
        assert _names(orders_engine.select("//enumeration")) == ["NEW", "DONE"]

    def test_wildcard_with_predicate(self, orders_engine):
        assert _names(orders_engine.select("//*[@name='StatusEnum']")) == ["StatusEnum"]

    def test_relative_to_scope(self, orders_engine):
        order_type = orders_engine.first("//complexType[@name='OrderType']")
        members = orders_engine.select("sequence|choice|all/element", scope=order_type)
        assert _names(members) == ["Id", "Status"]
        assert orders_engine.select("element", scope=order_type) == []

    def test_absolute_expression_ignores_scope_element(self, orders_engine):
        order_type = orders_engine.first("//complexType")
        assert _names(orders_engine.select("/*/element", scope=order_type)) == ["Order"]

    def test_results_are_unique(self, orders_engine):
        # Every ancestor of an enumeration matches the first step.
        matches = orders_engine.select("//*//enumeration")
        assert _names(matches) == ["NEW", "DONE"]

    def test_no_match_is_empty(self, orders_engine):
        assert orders_engine.select("//group") == []
        assert orders_engine.first("//group") is None

    def test_malformed_expression_returns_empty(self, orders_engine, caplog):
        assert orders_engine.select("//element[") == []
        assert "Query error" in caplog.text

    def test_prefix_agnostic(self):
        for prefix in ("", "xs:", "xsd:"):
            xmlns = f"xmlns{':' + prefix[:-1] if prefix else ''}"
            text = (
                f'<{prefix}schema {xmlns}="http://www.w3.org/2001/XMLSchema">'
                f'<{prefix}element name="A"/></{prefix}schema>'
            )
            engine = QueryEngine(DocumentSet(root=parse_schema_text(text)))
            assert _names(engine.select("/schema/element")) == ["A"]
            assert local_name(engine.documents.root.root) == "schema"


class TestSelectAcrossAll:
    def test_root_first_then_imports(self, imports_engine):
        assert _names(imports_engine.select_across_all("/*/element|simpleType|complexType")) == [
            "Color",
            "Shade",
            "ColorCode",
            "ShadeType",
        ]

    def test_select_defaults_to_root_document(self, imports_engine):
        assert imports_engine.select("//simpleType") == []
        assert _names(imports_engine.select_across_all("//simpleType")) == ["ColorCode"]

    def test_owner_is_reported(self, imports_engine):
        [(element, owner)] = imports_engine.select_with_owner("//enumeration[@value='red']")
        assert element.get("value") == "red"
        assert owner.location.endswith("other.xsd")
