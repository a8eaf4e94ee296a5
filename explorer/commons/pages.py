"""
Request-scoped assembly of the data behind each page.

Every function builds its own parser and label resolver, runs its queries
sequentially through the given client and returns plain models ready for
rendering. Nothing here is shared between requests.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Optional

from pydantic import BaseModel, Field

from explorer.commons.executive import Executive
from explorer.commons.legislature import LegislativeTerm, Legislature
from explorer.commons.membership import MembershipData, MembershipKind
from explorer.commons.models import Config, Membership, Organization, Person, Position
from explorer.commons.query import query_wikidata
from explorer.sources.wikidata import WikidataClient
from explorer.wikidata.labels import WikidataLabels

logger = logging.getLogger(__name__)


class CountryPage(BaseModel):
    executives: list[Executive] = Field(default_factory=list)
    legislatures: list[Legislature] = Field(default_factory=list)


class MembershipPage(BaseModel):
    persons: dict[str, Person] = Field(default_factory=dict)
    organizations: dict[str, Organization] = Field(default_factory=dict)
    memberships: list[Membership] = Field(default_factory=list)
    term: Optional[LegislativeTerm] = None
    executive: Optional[Executive] = None


def query_options(settings: Any) -> dict[str, Any]:
    """Diagnostics options for query_wikidata taken from Settings."""
    return {
        "output_dir": settings.queries_dir,
        "save_query_used": settings.save_query_used,
        "save_query_results": settings.save_query_results,
    }


def country_page(config: Config, wikidata_client: WikidataClient, **options: Any) -> CountryPage:
    return CountryPage(
        executives=Executive.list(config, wikidata_client, **options),
        legislatures=Legislature.list(config, wikidata_client, **options),
    )


def legislature_page(
    config: Config,
    house_item_id: str,
    position_item_id: str,
    wikidata_client: WikidataClient,
    strict: bool = False,
    **options: Any,
) -> Legislature:
    legislature = Legislature(house_item_id=house_item_id, position_item_id=position_item_id)
    term_rows = Legislature.terms_from_wikidata(config, strict, [legislature.row(config)], wikidata_client, **options)
    legislature.terms = Legislature.terms_from_rows(term_rows)
    return legislature


def _membership_page(
    sparql: str,
    kind: MembershipKind,
    config: Config,
    wikidata_client: WikidataClient,
    **options: Any,
) -> MembershipPage:
    wikidata_labels = WikidataLabels(config=config, wikidata_client=wikidata_client)
    membership_rows = query_wikidata(sparql, config, wikidata_client, **options)
    membership_data = MembershipData(membership_rows, wikidata_labels, kind)
    logger.info(
        "%s memberships: %d rows, %d persons, %d organizations",
        kind.value,
        len(membership_data.memberships),
        len(membership_data.persons),
        len(membership_data.organizations),
    )
    return MembershipPage(
        persons=membership_data.persons_by_id,
        organizations=membership_data.organizations_by_id,
        memberships=membership_data.joined_memberships(),
    )


def term_page(
    config: Config,
    house_item_id: str,
    term_item_id: str,
    position_item_id: str,
    wikidata_client: WikidataClient,
    legislature_position_item_id: Optional[str] = None,
    **options: Any,
) -> MembershipPage:
    """
    Memberships of one term.

    position_item_id may be a term-specific position; the legislature keeps
    legislature_position_item_id when given so links back to it stay valid.
    """
    legislature = Legislature(
        house_item_id=house_item_id,
        position_item_id=legislature_position_item_id or position_item_id,
    )
    term = legislature.term(term_item_id, position_item_id)
    page = _membership_page(term.query(config), MembershipKind.LEGISLATIVE, config, wikidata_client, **options)
    page.term = term
    return page


def executive_page(
    config: Config,
    executive_item_id: str,
    position_ids: Sequence[str],
    wikidata_client: WikidataClient,
    **options: Any,
) -> MembershipPage:
    executive = Executive(
        executive_item_id=executive_item_id,
        positions=[Position(position_item_id=pid) for pid in position_ids],
    )
    sparql = executive.terms[0].query(config)
    page = _membership_page(sparql, MembershipKind.EXECUTIVE, config, wikidata_client, **options)
    page.executive = executive
    return page
