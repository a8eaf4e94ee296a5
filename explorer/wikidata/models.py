"""
Value types for Wikidata SPARQL results.

  Binding       — one typed cell of a result row (IRI or literal, optional language)
  RawResultRow  — variable name → Binding, exactly as the endpoint returned it
  WikidataRow   — logical field → Binding, or language → Binding for labels
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

ENTITY_PREFIX = "http://www.wikidata.org/entity/"


class BindingKind(str, Enum):
    IRI = "iri"
    LITERAL = "literal"


class Binding(BaseModel):
    """A single bound SPARQL variable."""

    model_config = ConfigDict(frozen=True)

    kind: BindingKind = BindingKind.LITERAL
    value: str
    language: Optional[str] = None

    @classmethod
    def from_json(cls, cell: Mapping[str, Any]) -> "Binding":
        """Build a Binding from a SPARQL JSON results cell.

        ``type == "uri"`` is an IRI; any other type (or none at all) is a
        literal. The language tag is read from ``xml:lang`` (or ``lang``).
        """
        kind = BindingKind.IRI if cell.get("type") == "uri" else BindingKind.LITERAL
        language = cell.get("xml:lang") or cell.get("lang")
        return cls(kind=kind, value=str(cell["value"]), language=language)

    @property
    def item_id(self) -> str:
        """The Q/P id of an entity binding ("Q42" from ".../entity/Q42")."""
        if self.value.startswith(ENTITY_PREFIX):
            return self.value[len(ENTITY_PREFIX):]
        return self.value.rsplit("/", 1)[-1]


RawResultRow = dict[str, Binding]
FieldValue = Union[Binding, dict[str, Binding]]


class WikidataRow(Mapping[str, FieldValue]):
    """
    One parsed result row.

    A key is present only when the underlying variable (or, for a label field,
    at least one of its per-language variables) was bound.
    """

    def __init__(self, fields: Mapping[str, FieldValue], languages: Sequence[str] = ()):
        self._fields: dict[str, FieldValue] = dict(fields)
        self.languages: tuple[str, ...] = tuple(languages)

    @classmethod
    def from_values(cls, values: Mapping[str, str], languages: Sequence[str] = ()) -> "WikidataRow":
        """Build a row of plain literal bindings, e.g. from URL parameters."""
        return cls({k: Binding(value=v) for k, v in values.items()}, languages)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> FieldValue:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, WikidataRow):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"WikidataRow({self._fields!r})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def binding(self, field: str) -> Optional[Binding]:
        """The single Binding of a plain field, or None when unbound."""
        entry = self._fields.get(field)
        if entry is None or isinstance(entry, dict):
            return None
        return entry

    def value(self, field: str) -> Optional[str]:
        entry = self.binding(field)
        return entry.value if entry else None

    def item_id(self, field: str) -> Optional[str]:
        entry = self.binding(field)
        return entry.item_id if entry else None

    def labels(self, field: str) -> dict[str, str]:
        """Language → text for a label field (empty when unbound)."""
        entry = self._fields.get(field)
        if entry is None:
            return {}
        if isinstance(entry, Binding):
            lang = entry.language or (self.languages[0] if self.languages else "")
            return {lang: entry.value}
        return {lang: b.value for lang, b in entry.items()}

    def label(self, field: str) -> Optional[str]:
        """The best label for a field, following language priority order."""
        labels = self.labels(field)
        for lang in self.languages:
            if lang in labels:
                return labels[lang]
        return next(iter(labels.values()), None)
