"""
Executives and the positions that make them up.

Key Wikidata properties used:
  P208   — executive body (country → executive)
  P1313  — office held by head of government
  P1906  — office held by head of state
  P102   — member of political party (shown as "on behalf of")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from explorer.commons.models import Config, Position
from explorer.commons.query import query_wikidata
from explorer.sources.wikidata import WikidataClient
from explorer.wikidata.models import WikidataRow
from explorer.wikidata.sparql import PREFIXES, entity, label_optionals, label_select

logger = logging.getLogger(__name__)


class Executive(BaseModel):
    executive_item_id: str
    comment: Optional[str] = None
    positions: List[Position] = Field(default_factory=list)

    @property
    def positions_item_ids(self) -> List[str]:
        return [p.position_item_id for p in self.positions]

    @property
    def terms(self) -> List["ExecutiveTerm"]:
        """An executive has a single, open-ended term: its current holders."""
        return [ExecutiveTerm(executive=self)]

    @staticmethod
    def list_query(config: Config) -> str:
        langs = config.languages
        country = entity(config.country_wikidata_id)
        return f"""{PREFIXES}
SELECT DISTINCT ?executive {label_select("executiveLabel", langs)} ?position {label_select("positionLabel", langs)} ?branch WHERE {{
  {country} wdt:P208 ?executive .
  {{
    {country} wdt:P1313 ?position .
    BIND("head of government" AS ?branch)
  }} UNION {{
    {country} wdt:P1906 ?position .
    BIND("head of state" AS ?branch)
  }} UNION {{
    ?position wdt:P361 ?executive ;
              wdt:P31/wdt:P279* wd:Q4164871 .
    BIND("member" AS ?branch)
  }}
{label_optionals("executiveLabel", "?executive", langs)}
{label_optionals("positionLabel", "?position", langs)}
}}
ORDER BY ?executive ?branch ?position"""

    @classmethod
    def from_rows(cls, rows: Iterable[WikidataRow]) -> List["Executive"]:
        """Group discovery rows into one Executive per executive item."""
        executives: dict[str, Executive] = {}
        for row in rows:
            executive_id = row.item_id("executive")
            position_id = row.item_id("position")
            if not executive_id or not position_id:
                continue
            executive = executives.get(executive_id)
            if executive is None:
                executive = executives[executive_id] = cls(
                    executive_item_id=executive_id,
                    comment=row.label("executiveLabel"),
                )
            if position_id in executive.positions_item_ids:
                continue
            executive.positions.append(
                Position(
                    position_item_id=position_id,
                    branch=row.value("branch"),
                    comment=row.label("positionLabel"),
                )
            )
        return list(executives.values())

    @classmethod
    def list(cls, config: Config, wikidata_client: WikidataClient, **query_options: Any) -> List["Executive"]:
        rows = query_wikidata(cls.list_query(config), config, wikidata_client, **query_options)
        executives = cls.from_rows(rows)
        logger.info("Found %d executives for %s", len(executives), config.country_wikidata_id)
        return executives


class ExecutiveTerm(BaseModel):
    """Current holders of an executive's positions."""

    executive: Executive

    @property
    def comment(self) -> Optional[str]:
        return self.executive.comment

    def query(self, config: Config) -> str:
        if not self.executive.positions:
            raise ValueError(f"Executive {self.executive.executive_item_id} has no positions")
        langs = config.languages
        positions = " ".join(entity(p) for p in self.executive.positions_item_ids)
        return f"""{PREFIXES}
SELECT DISTINCT ?statement ?person {label_select("personLabel", langs)} ?position ?start ?end ?onBehalfOf {label_select("onBehalfOfLabel", langs)} WHERE {{
  VALUES ?position {{ {positions} }}
  ?person p:P39 ?statement .
  ?statement ps:P39 ?position .
  FILTER NOT EXISTS {{ ?statement wikibase:rank wikibase:DeprecatedRank }}
  OPTIONAL {{ ?statement pq:P580 ?start }}
  OPTIONAL {{ ?statement pq:P582 ?end }}
  FILTER(!BOUND(?end) || ?end > NOW())
  OPTIONAL {{
    ?person wdt:P102 ?onBehalfOf .
{label_optionals("onBehalfOfLabel", "?onBehalfOf", langs, indent="    ")}
  }}
{label_optionals("personLabel", "?person", langs)}
}}
ORDER BY ?position ?start ?person"""
