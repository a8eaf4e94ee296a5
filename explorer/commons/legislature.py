"""
Legislatures and their terms.

Key Wikidata entity QIDs used:
  Q11204     — legislature
  Q4175034   — legislator (membership positions are subclasses of it)
  Q15238777  — legislative term
  Q4164871   — position
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from explorer.commons.models import Config, Term
from explorer.commons.query import query_wikidata
from explorer.sources.wikidata import WikidataClient
from explorer.wikidata.models import WikidataRow
from explorer.wikidata.sparql import PREFIXES, entity, label_optionals, label_select

logger = logging.getLogger(__name__)


class Legislature(BaseModel):
    """A legislative house together with its membership position."""

    house_item_id: str
    position_item_id: str
    comment: Optional[str] = None
    terms: List[Term] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    @staticmethod
    def list_query(config: Config) -> str:
        langs = config.languages
        return f"""{PREFIXES}
SELECT DISTINCT ?legislature {label_select("legislatureLabel", langs)} ?legislaturePost {label_select("legislaturePostLabel", langs)} WHERE {{
  ?legislature wdt:P31/wdt:P279* wd:Q11204 ;
               wdt:P1001 {entity(config.country_wikidata_id)} .
  ?legislaturePost wdt:P279* wd:Q4175034 ;
                   wdt:P361 ?legislature .
  FILTER NOT EXISTS {{ ?legislature wdt:P576 ?dissolved }}
{label_optionals("legislatureLabel", "?legislature", langs)}
{label_optionals("legislaturePostLabel", "?legislaturePost", langs)}
}}
ORDER BY ?legislature ?legislaturePost"""

    @classmethod
    def from_rows(cls, rows: Iterable[WikidataRow]) -> list["Legislature"]:
        """One Legislature per distinct (house, position) pair, first seen first."""
        legislatures: dict[tuple[str, str], Legislature] = {}
        for row in rows:
            house = row.item_id("legislature")
            post = row.item_id("legislaturePost")
            if not house or not post:
                logger.debug("Skipping legislature row without house/position: %r", row)
                continue
            if (house, post) not in legislatures:
                legislatures[(house, post)] = cls(
                    house_item_id=house,
                    position_item_id=post,
                    comment=row.label("legislatureLabel") or row.label("legislaturePostLabel"),
                )
        return list(legislatures.values())

    @classmethod
    def list(
        cls,
        config: Config,
        wikidata_client: WikidataClient,
        strict: bool = False,
        **query_options: Any,
    ) -> list["Legislature"]:
        """Every legislature of the country, each with its terms filled in."""
        rows = query_wikidata(cls.list_query(config), config, wikidata_client, **query_options)
        legislatures = cls.from_rows(rows)
        for legislature in legislatures:
            term_rows = cls.terms_from_wikidata(
                config, strict, [legislature.row(config)], wikidata_client, **query_options
            )
            legislature.terms = cls.terms_from_rows(term_rows)
        logger.info("Found %d legislatures for %s", len(legislatures), config.country_wikidata_id)
        return legislatures

    def row(self, config: Config) -> WikidataRow:
        """The (legislature, legislaturePost) row terms_from_wikidata expects."""
        return WikidataRow.from_values(
            {"legislature": self.house_item_id, "legislaturePost": self.position_item_id},
            config.languages,
        )

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    @staticmethod
    def terms_query(config: Config, house_item_id: str, position_item_id: str, strict: bool = False) -> str:
        """
        Legislative terms of one house.

        With strict=True only terms with a recorded start date are returned.
        """
        langs = config.languages
        start = "?term wdt:P571|wdt:P580 ?termStart ."
        if not strict:
            start = f"OPTIONAL {{ {start} }}"
        return f"""{PREFIXES}
SELECT DISTINCT ?term {label_select("termLabel", langs)} ?termStart ?termEnd ?termSpecificPosition WHERE {{
  VALUES (?legislature ?legislaturePost) {{ ({entity(house_item_id)} {entity(position_item_id)}) }}
  ?term p:P31 ?termStatement .
  ?termStatement ps:P31/wdt:P279* wd:Q15238777 ;
                 pq:P642 ?legislature .
  {start}
  OPTIONAL {{ ?term wdt:P576|wdt:P582 ?termEnd }}
  OPTIONAL {{
    ?termSpecificPosition wdt:P31/wdt:P279* wd:Q4164871 ;
                          p:P279 ?positionStatement .
    ?positionStatement ps:P279 ?legislaturePost ;
                       pq:P2937 ?term .
  }}
{label_optionals("termLabel", "?term", langs)}
}}
ORDER BY ?termStart ?term"""

    def query(self, config: Config, strict: bool = False) -> str:
        return self.terms_query(config, self.house_item_id, self.position_item_id, strict)

    @classmethod
    def terms_from_wikidata(
        cls,
        config: Config,
        strict: bool,
        rows: Sequence[WikidataRow],
        wikidata_client: WikidataClient,
        **query_options: Any,
    ) -> list[WikidataRow]:
        """Term rows for every (legislature, legislaturePost) row given."""
        term_rows: list[WikidataRow] = []
        for row in rows:
            house = row.item_id("legislature")
            post = row.item_id("legislaturePost")
            if not house or not post:
                continue
            sparql = cls.terms_query(config, house, post, strict)
            term_rows.extend(query_wikidata(sparql, config, wikidata_client, **query_options))
        return term_rows

    @staticmethod
    def terms_from_rows(rows: Iterable[WikidataRow]) -> list[Term]:
        terms: list[Term] = []
        seen: set[tuple[str, Optional[str]]] = set()
        for row in rows:
            term_id = row.item_id("term")
            if not term_id:
                continue
            position = row.item_id("termSpecificPosition")
            if (term_id, position) in seen:
                continue
            seen.add((term_id, position))
            terms.append(
                Term(
                    term_item_id=term_id,
                    comment=row.label("termLabel") or term_id,
                    start_date=row.value("termStart"),
                    end_date=row.value("termEnd"),
                    position_item_id=position,
                )
            )
        return terms

    def term(self, term_item_id: str, position_item_id: Optional[str] = None) -> "LegislativeTerm":
        return LegislativeTerm(
            legislature=self,
            term_item_id=term_item_id,
            position_item_id=position_item_id or self.position_item_id,
        )


class LegislativeTerm(BaseModel):
    """One term of a legislature; builds the query for its memberships."""

    legislature: Legislature
    term_item_id: str
    position_item_id: str
    comment: Optional[str] = None

    def query(self, config: Config) -> str:
        langs = config.languages
        return f"""{PREFIXES}
SELECT DISTINCT ?statement ?person {label_select("personLabel", langs)} ?position ?termSpecificPosition ?start ?end ?onBehalfOf {label_select("onBehalfOfLabel", langs)} WHERE {{
  VALUES (?position ?term) {{ ({entity(self.position_item_id)} {entity(self.term_item_id)}) }}
  ?person p:P39 ?statement .
  {{
    ?statement ps:P39 ?position .
  }} UNION {{
    ?statement ps:P39 ?termSpecificPosition .
    ?termSpecificPosition wdt:P279 ?position .
  }}
  ?statement pq:P2937 ?term .
  FILTER NOT EXISTS {{ ?statement wikibase:rank wikibase:DeprecatedRank }}
  OPTIONAL {{ ?statement pq:P580 ?start }}
  OPTIONAL {{ ?statement pq:P582 ?end }}
  OPTIONAL {{
    ?statement pq:P4100 ?onBehalfOf .
{label_optionals("onBehalfOfLabel", "?onBehalfOf", langs, indent="    ")}
  }}
{label_optionals("personLabel", "?person", langs)}
}}
ORDER BY ?person ?start"""
