"""Run one SPARQL query and parse the results for a country config."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from explorer.commons.models import Config
from explorer.sources.wikidata import Query, WikidataClient
from explorer.wikidata.models import WikidataRow
from explorer.wikidata.parser import WikidataResultsParser


def query_wikidata(
    sparql_query: str,
    config: Config,
    wikidata_client: WikidataClient,
    output_dir: Optional[Path] = None,
    save_query_used: bool = False,
    save_query_results: bool = False,
) -> list[WikidataRow]:
    query = Query(sparql_query=sparql_query, output_dir=output_dir)
    results = query.run(
        wikidata_client=wikidata_client,
        save_query_used=save_query_used,
        save_query_results=save_query_results,
    )
    return WikidataResultsParser(languages=config.languages).parse(results)
