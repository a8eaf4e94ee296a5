"""External data sources — Wikidata SPARQL endpoint and country repositories."""
