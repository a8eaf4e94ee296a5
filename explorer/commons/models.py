"""
Pydantic models for the commons pages.

Record types:
  Config        — country + ordered display languages, one per request
  Term          — one legislative term (or the single executive "term")
  Position      — a position belonging to an executive
  Person        — a position holder, name keyed by language
  Organization  — the party/group a person sits for
  Membership    — person ↔ position for a term, with foreign keys to the above
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from explorer.wikidata.sparql import is_language_code


class Config(BaseModel):
    """Country identifier and display languages (first = preferred)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    country_wikidata_id: str
    languages: tuple[str, ...] = ()

    @field_validator("languages", mode="before")
    @classmethod
    def _check_languages(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        languages = tuple(dict.fromkeys(str(v) for v in value if v))
        # "-" is the only separator allowed, so language_suffix stays one-to-one
        for lang in languages:
            if not is_language_code(lang):
                raise ValueError(f"Not a language code: {lang!r}")
        return languages

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Config":
        """Build from a country repository's config.json document."""
        return cls.model_validate(data)


class Term(BaseModel):
    term_item_id: str
    comment: Optional[str] = None
    start_date: Optional[str] = None      # verbatim from Wikidata
    end_date: Optional[str] = None
    position_item_id: Optional[str] = None


class Position(BaseModel):
    position_item_id: str
    branch: Optional[str] = None          # head of government | head of state | member
    comment: Optional[str] = None


class _Named(BaseModel):
    id: str
    name: dict[str, str] = Field(default_factory=dict)

    def display_name(self, languages: Sequence[str] = ()) -> str:
        """Name in the first available language, falling back to the id."""
        for lang in languages:
            if lang in self.name:
                return self.name[lang]
        return next(iter(self.name.values()), self.id)

    @property
    def wikidata_url(self) -> str:
        return f"https://www.wikidata.org/wiki/{self.id}"


class Person(_Named):
    """A person holding a position."""


class Organization(_Named):
    """A party or group a person acts on behalf of."""


class Membership(BaseModel):
    person_id: str
    on_behalf_of_id: Optional[str] = None
    position_item_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    person: Optional[Person] = None
    on_behalf_of: Optional[Organization] = None
