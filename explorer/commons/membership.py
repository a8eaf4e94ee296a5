"""
Membership rows → persons, organizations and memberships.

Executive and legislative membership queries return different shapes, so each
row is first coerced into a tagged variant (ExecutiveRow / LegislativeRow)
carrying only the fields valid for its kind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from functools import cached_property
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from explorer.commons.models import Membership, Organization, Person
from explorer.sources.wikidata import ParseError
from explorer.wikidata.labels import WikidataLabels
from explorer.wikidata.models import BindingKind, WikidataRow

logger = logging.getLogger(__name__)


class MembershipKind(str, Enum):
    EXECUTIVE = "executive"
    LEGISLATIVE = "legislative"


class _MembershipRow(BaseModel):
    person_id: str
    person_labels: dict[str, str] = Field(default_factory=dict)
    on_behalf_of_id: Optional[str] = None
    on_behalf_of_labels: dict[str, str] = Field(default_factory=dict)
    position_item_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class ExecutiveRow(_MembershipRow):
    kind: Literal[MembershipKind.EXECUTIVE] = MembershipKind.EXECUTIVE


class LegislativeRow(_MembershipRow):
    kind: Literal[MembershipKind.LEGISLATIVE] = MembershipKind.LEGISLATIVE
    term_specific_position_item_id: Optional[str] = None


MembershipRow = Union[ExecutiveRow, LegislativeRow]


def _entity_id(row: WikidataRow, field: str) -> Optional[str]:
    binding = row.binding(field)
    if binding is None:
        return None
    if binding.kind is BindingKind.LITERAL and not binding.value.startswith("Q"):
        raise ParseError(f"{field} is not a Wikidata item: {binding.value!r}")
    return binding.item_id


def coerce_row(row: WikidataRow, kind: MembershipKind) -> MembershipRow:
    """Read one membership row for the given kind, or raise ParseError."""
    person_id = _entity_id(row, "person")
    if not person_id:
        raise ParseError("membership row has no person")
    common = dict(
        person_id=person_id,
        person_labels=row.labels("personLabel"),
        on_behalf_of_id=_entity_id(row, "onBehalfOf"),
        on_behalf_of_labels=row.labels("onBehalfOfLabel"),
        position_item_id=row.item_id("position"),
        start_date=row.value("start"),
        end_date=row.value("end"),
    )
    if kind is MembershipKind.EXECUTIVE:
        return ExecutiveRow(**common)
    return LegislativeRow(
        term_specific_position_item_id=row.item_id("termSpecificPosition"),
        **common,
    )


class MembershipData:
    """
    Persons, organizations and memberships for one membership query.

    Ids are deduplicated and every membership's person_id is guaranteed to
    be among `persons`. Joining the objects into memberships is left to the
    caller (see joined_memberships).
    """

    def __init__(
        self,
        rows: Iterable[WikidataRow],
        wikidata_labels: WikidataLabels,
        kind: Union[MembershipKind, str],
    ):
        self.kind = MembershipKind(kind)
        self.wikidata_labels = wikidata_labels
        self.languages: Sequence[str] = wikidata_labels.config.languages
        self.rows: list[MembershipRow] = []
        for index, row in enumerate(rows):
            try:
                self.rows.append(coerce_row(row, self.kind))
            except ParseError as exc:
                logger.warning("Dropping %s membership row %d: %s", self.kind.value, index, exc)

    def _name(self, item_id: str, row_labels: dict[str, str]) -> dict[str, str]:
        name: dict[str, str] = {}
        fallback: Optional[dict[str, str]] = None
        for lang in self.languages:
            if lang in row_labels:
                name[lang] = row_labels[lang]
                continue
            if fallback is None:
                fallback = self.wikidata_labels.label_for(item_id)
            if lang in fallback:
                name[lang] = fallback[lang]
        return name

    @cached_property
    def persons(self) -> list[Person]:
        persons: dict[str, Person] = {}
        for row in self.rows:
            if row.person_id not in persons:
                persons[row.person_id] = Person(
                    id=row.person_id, name=self._name(row.person_id, row.person_labels)
                )
        return list(persons.values())

    @cached_property
    def organizations(self) -> list[Organization]:
        organizations: dict[str, Organization] = {}
        for row in self.rows:
            org_id = row.on_behalf_of_id
            if org_id and org_id not in organizations:
                organizations[org_id] = Organization(
                    id=org_id, name=self._name(org_id, row.on_behalf_of_labels)
                )
        return list(organizations.values())

    @cached_property
    def memberships(self) -> list[Membership]:
        memberships = []
        for row in self.rows:
            if isinstance(row, LegislativeRow):
                position = row.term_specific_position_item_id or row.position_item_id
            else:
                position = row.position_item_id
            memberships.append(
                Membership(
                    person_id=row.person_id,
                    on_behalf_of_id=row.on_behalf_of_id,
                    position_item_id=position,
                    start_date=row.start_date,
                    end_date=row.end_date,
                )
            )
        return memberships

    @property
    def persons_by_id(self) -> dict[str, Person]:
        return {p.id: p for p in self.persons}

    @property
    def organizations_by_id(self) -> dict[str, Organization]:
        return {o.id: o for o in self.organizations}

    def joined_memberships(self) -> list[Membership]:
        """Copies of `memberships` with person and on_behalf_of embedded."""
        persons = self.persons_by_id
        organizations = self.organizations_by_id
        return [
            m.model_copy(
                update={
                    "person": persons[m.person_id],
                    "on_behalf_of": organizations.get(m.on_behalf_of_id) if m.on_behalf_of_id else None,
                }
            )
            for m in self.memberships
        ]
