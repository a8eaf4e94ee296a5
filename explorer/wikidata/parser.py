"""Turn raw SPARQL result rows into WikidataRow objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union

from explorer.wikidata.models import Binding, FieldValue, RawResultRow, WikidataRow
from explorer.wikidata.sparql import split_language_variable

logger = logging.getLogger(__name__)

RawRowLike = Union[RawResultRow, Mapping[str, Mapping[str, Any]]]


class WikidataResultsParser:
    """
    Parses result rows for one set of requested languages.

    Variables named with the language naming rule (``personLabel_en``,
    ``personLabel_fr``) collapse into one field (``personLabel``) holding a
    language → Binding dict. All other variables map 1:1.
    """

    def __init__(self, languages: Sequence[str] = ()):
        self.languages: tuple[str, ...] = tuple(languages)

    def parse(self, rows: Iterable[RawRowLike]) -> list[WikidataRow]:
        return [self.parse_row(row) for row in rows]

    def parse_row(self, row: RawRowLike) -> WikidataRow:
        fields: dict[str, FieldValue] = {}
        for name, cell in row.items():
            if cell is None:
                continue
            binding = cell if isinstance(cell, Binding) else Binding.from_json(cell)
            split = split_language_variable(name, self.languages)
            if split is None:
                if isinstance(fields.get(name), dict):
                    logger.debug("Plain variable %s clashes with language variables; keeping language map", name)
                else:
                    fields[name] = binding
                continue
            field, lang = split
            existing = fields.get(field)
            if isinstance(existing, Binding):
                logger.debug("Variable %s shadows plain field %s; keeping language map", name, field)
            per_language = existing if isinstance(existing, dict) else {}
            per_language[lang] = binding
            fields[field] = per_language
        return WikidataRow(fields, self.languages)
