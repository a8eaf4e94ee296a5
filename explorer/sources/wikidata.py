"""
Wikidata SPARQL client.

Uses the public Wikidata Query Service — no API key required.
Endpoint: https://query.wikidata.org/sparql

Every page request runs its queries sequentially through one WikidataClient.
Nothing is retried: any failure is fatal for the request that issued it
(label lookups excepted, see explorer.wikidata.labels).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from explorer.wikidata.models import Binding, RawResultRow

logger = logging.getLogger(__name__)

SPARQL_ENDPOINT = "https://query.wikidata.org/sparql"

_HEADERS = {
    "Accept": "application/sparql-results+json",
    "User-Agent": "CommonsExplorer/1.0 (https://github.com/everypolitician) Python/httpx",
}
_TIMEOUT = 60.0  # seconds


class WikidataError(Exception):
    """Base class for failures talking to, or reading from, Wikidata."""


class EndpointError(WikidataError):
    """The endpoint failed or returned something that is not a SPARQL JSON result."""


class QueryTimeoutError(WikidataError, TimeoutError):
    """The endpoint did not answer within the client timeout."""


class ParseError(WikidataError):
    """A result row does not have the shape the caller expects."""


class LabelResolutionError(WikidataError):
    """A label lookup failed; callers treat the label as missing."""


class WikidataClient:
    """Executes SPARQL SELECT queries and returns typed result rows."""

    def __init__(
        self,
        endpoint: str = SPARQL_ENDPOINT,
        timeout: float = _TIMEOUT,
        user_agent: Optional[str] = None,
    ):
        headers = dict(_HEADERS)
        if user_agent:
            headers["User-Agent"] = user_agent
        self.endpoint = endpoint
        self._client = httpx.Client(headers=headers, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Any) -> "WikidataClient":
        return cls(
            endpoint=settings.sparql_endpoint,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )

    def fetch(self, sparql: str) -> dict:
        """Execute SPARQL and return the decoded JSON payload."""
        try:
            response = self._client.get(
                self.endpoint,
                params={"query": sparql, "format": "json"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise QueryTimeoutError(f"Wikidata SPARQL request timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise EndpointError(f"Wikidata SPARQL request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise EndpointError(f"Wikidata SPARQL response is not JSON: {exc}") from exc
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, dict) or not isinstance(results.get("bindings"), list):
            raise EndpointError("Wikidata SPARQL response has no results.bindings")
        return payload

    def execute(self, sparql: str) -> list[RawResultRow]:
        """Execute SPARQL and return one RawResultRow per solution."""
        payload = self.fetch(sparql)
        try:
            rows = [
                {name: Binding.from_json(cell) for name, cell in b.items()}
                for b in payload["results"]["bindings"]
            ]
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise EndpointError(f"Malformed SPARQL binding: {exc}") from exc
        logger.debug("SPARQL query returned %d rows", len(rows))
        return rows

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "WikidataClient":
        return self

    def __exit__(self, *_) -> None:
        self.close()


class Query:
    """
    A SPARQL query plus an optional diagnostics side channel.

    When asked, the query text and the raw rows are written to `output_dir`
    as query-used.rq and query-results.json. Write failures are logged and
    never affect the returned rows.
    """

    QUERY_FILENAME = "query-used.rq"
    RESULTS_FILENAME = "query-results.json"

    def __init__(self, sparql_query: str, output_dir: Optional[Path] = None):
        self.sparql_query = sparql_query
        self.output_dir = output_dir

    def run(
        self,
        wikidata_client: WikidataClient,
        save_query_used: bool = False,
        save_query_results: bool = False,
    ) -> list[RawResultRow]:
        if save_query_used:
            self._save(self.QUERY_FILENAME, self.sparql_query)
        results = wikidata_client.execute(self.sparql_query)
        if save_query_results:
            dump = [{name: b.model_dump(mode="json") for name, b in row.items()} for row in results]
            self._save(self.RESULTS_FILENAME, json.dumps(dump, ensure_ascii=False, indent=2))
        return results

    def _save(self, filename: str, text: str) -> None:
        if self.output_dir is None:
            return
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            (self.output_dir / filename).write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save %s to %s: %s", filename, self.output_dir, exc)
