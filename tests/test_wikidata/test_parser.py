"""Tests for explorer/wikidata/parser.py and the WikidataRow accessors."""

from __future__ import annotations

import pytest

from explorer.wikidata.models import Binding, BindingKind, WikidataRow
from explorer.wikidata.parser import WikidataResultsParser

ENTITY = "http://www.wikidata.org/entity/"


# ---------------------------------------------------------------------------
# Helpers — raw SPARQL JSON cells
# ---------------------------------------------------------------------------


def _uri(item_id: str) -> dict:
    return {"type": "uri", "value": f"{ENTITY}{item_id}"}


def _label(text: str, lang: str) -> dict:
    return {"type": "literal", "value": text, "xml:lang": lang}


def _row(**cells) -> dict:
    return dict(cells)


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


class TestBinding:
    def test_uri_is_iri(self) -> None:
        b = Binding.from_json(_uri("Q1"))
        assert b.kind is BindingKind.IRI
        assert b.item_id == "Q1"

    def test_typed_literal_is_literal(self) -> None:
        cell = {"type": "literal", "value": "2019-01-01T00:00:00Z",
                "datatype": "http://www.w3.org/2001/XMLSchema#dateTime"}
        b = Binding.from_json(cell)
        assert b.kind is BindingKind.LITERAL
        assert b.value == "2019-01-01T00:00:00Z"
        assert b.language is None

    def test_language_from_xml_lang(self) -> None:
        assert Binding.from_json(_label("Alice", "en")).language == "en"

    def test_language_from_lang_key(self) -> None:
        assert Binding.from_json({"value": "Alice", "lang": "en"}).language == "en"

    def test_missing_type_is_literal(self) -> None:
        assert Binding.from_json({"value": "Q1"}).kind is BindingKind.LITERAL

    def test_bare_item_id(self) -> None:
        assert Binding(value="Q1").item_id == "Q1"

    def test_frozen(self) -> None:
        b = Binding(value="x")
        with pytest.raises(Exception):
            b.value = "y"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# WikidataResultsParser
# ---------------------------------------------------------------------------


class TestParser:
    def test_groups_language_variables(self) -> None:
        parser = WikidataResultsParser(languages=["en", "fr"])
        [row] = parser.parse([
            _row(person=_uri("Q1"), personLabel_en=_label("Alice", "en"), personLabel_fr=_label("Alice F", "fr")),
        ])
        assert set(row) == {"person", "personLabel"}
        assert row["personLabel"]["en"].value == "Alice"
        assert row["personLabel"]["fr"].value == "Alice F"

    def test_plain_variables_map_one_to_one(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        [row] = parser.parse([_row(term=_uri("Q5"), termStart={"type": "literal", "value": "2019"})])
        assert isinstance(row["term"], Binding)
        assert row.item_id("term") == "Q5"
        assert row.value("termStart") == "2019"

    def test_unbound_label_field_is_absent(self) -> None:
        parser = WikidataResultsParser(languages=["en", "fr"])
        [row] = parser.parse([_row(person=_uri("Q1"))])
        assert "personLabel" not in row
        assert row.labels("personLabel") == {}
        assert row.label("personLabel") is None

    def test_one_bound_language_is_enough(self) -> None:
        parser = WikidataResultsParser(languages=["en", "fr"])
        [row] = parser.parse([_row(person=_uri("Q1"), personLabel_fr=_label("Alice F", "fr"))])
        assert "personLabel" in row
        assert set(row["personLabel"]) == {"fr"}

    def test_none_cells_are_unbound(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        [row] = parser.parse([{"person": _uri("Q1"), "onBehalfOf": None}])
        assert "onBehalfOf" not in row

    def test_unconfigured_language_stays_plain(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        [row] = parser.parse([_row(personLabel_de=_label("Alice D", "de"))])
        assert "personLabel_de" in row
        assert "personLabel" not in row

    def test_accepts_binding_rows(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        [row] = parser.parse([{"person": Binding(kind=BindingKind.IRI, value=f"{ENTITY}Q1")}])
        assert row.item_id("person") == "Q1"

    def test_preserves_row_order(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        rows = parser.parse([_row(person=_uri(f"Q{i}")) for i in (3, 1, 2)])
        assert [r.item_id("person") for r in rows] == ["Q3", "Q1", "Q2"]

    def test_parse_is_idempotent(self) -> None:
        raw = [
            _row(person=_uri("Q1"), personLabel_en=_label("Alice", "en")),
            _row(person=_uri("Q2"), onBehalfOf=_uri("Q10")),
        ]
        parser = WikidataResultsParser(languages=["en", "fr"])
        assert parser.parse(raw) == parser.parse(raw)

    def test_hyphenated_language(self) -> None:
        parser = WikidataResultsParser(languages=["pt-br", "pt"])
        [row] = parser.parse([
            _row(termLabel_pt_br=_label("Legislatura", "pt-br"), termLabel_pt=_label("Legislatura PT", "pt")),
        ])
        assert row.labels("termLabel") == {"pt-br": "Legislatura", "pt": "Legislatura PT"}

    def test_empty_input(self) -> None:
        assert WikidataResultsParser(["en"]).parse([]) == []

    def test_language_map_wins_over_plain_variable_in_any_order(self) -> None:
        parser = WikidataResultsParser(languages=["en"])
        plain = {"type": "literal", "value": "B"}
        label_first = {"personLabel_en": _label("A", "en"), "personLabel": plain}
        plain_first = {"personLabel": plain, "personLabel_en": _label("A", "en")}

        [first], [second] = parser.parse([label_first]), parser.parse([plain_first])
        assert first == second
        assert first.labels("personLabel") == {"en": "A"}


# ---------------------------------------------------------------------------
# WikidataRow
# ---------------------------------------------------------------------------


class TestWikidataRow:
    def test_label_follows_language_priority(self) -> None:
        row = WikidataRow(
            {"termLabel": {"fr": Binding(value="Législature"), "en": Binding(value="Legislature")}},
            ["en", "fr"],
        )
        assert row.label("termLabel") == "Legislature"

    def test_label_falls_back_to_any_language(self) -> None:
        row = WikidataRow({"termLabel": {"de": Binding(value="Wahlperiode")}}, ["en"])
        assert row.label("termLabel") == "Wahlperiode"

    def test_single_label_binding(self) -> None:
        row = WikidataRow({"termLabel": Binding(value="Term", language="en")}, ["en"])
        assert row.labels("termLabel") == {"en": "Term"}

    def test_value_of_language_field_is_none(self) -> None:
        row = WikidataRow({"termLabel": {"en": Binding(value="Term")}}, ["en"])
        assert row.value("termLabel") is None

    def test_from_values(self) -> None:
        row = WikidataRow.from_values({"legislature": "Q11", "legislaturePost": "Q12"}, ["en"])
        assert row.item_id("legislature") == "Q11"
        assert row.item_id("legislaturePost") == "Q12"

    def test_equality_with_mapping(self) -> None:
        b = Binding(value="x")
        assert WikidataRow({"a": b}) == {"a": b}
