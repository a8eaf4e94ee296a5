"""On-demand label lookup for entities a query did not label itself."""

from __future__ import annotations

import logging

from explorer.commons.models import Config
from explorer.sources.wikidata import LabelResolutionError, WikidataClient, WikidataError
from explorer.wikidata.sparql import PREFIXES, entity, language_literal

logger = logging.getLogger(__name__)


class WikidataLabels:
    """
    Resolves labels in the configured languages, one query per entity.

    Results are memoized on the instance, so create one per request: labels
    must not outlive the page they were fetched for. Lookups are best-effort;
    a failed lookup yields an empty mapping.
    """

    def __init__(self, config: Config, wikidata_client: WikidataClient):
        self.config = config
        self.wikidata_client = wikidata_client
        self._cache: dict[str, dict[str, str]] = {}

    def query(self, entity_id: str) -> str:
        langs = ", ".join(language_literal(lang) for lang in self.config.languages)
        return (
            f"{PREFIXES}\n"
            "SELECT ?label WHERE {\n"
            f"  {entity(entity_id)} rdfs:label ?label .\n"
            f"  FILTER(LANG(?label) IN ({langs}))\n"
            "}"
        )

    def label_for(self, entity_id: str) -> dict[str, str]:
        if entity_id in self._cache:
            return dict(self._cache[entity_id])
        labels: dict[str, str] = {}
        if self.config.languages:
            try:
                labels = self._resolve(entity_id)
            except LabelResolutionError as exc:
                logger.warning("%s", exc)
        self._cache[entity_id] = labels
        return dict(labels)

    def _resolve(self, entity_id: str) -> dict[str, str]:
        try:
            rows = self.wikidata_client.execute(self.query(entity_id))
        except (WikidataError, ValueError) as exc:
            raise LabelResolutionError(f"Label lookup for {entity_id} failed: {exc}") from exc
        labels: dict[str, str] = {}
        for row in rows:
            binding = row.get("label")
            if binding is not None and binding.language in self.config.languages:
                labels.setdefault(binding.language, binding.value)
        return {lang: labels[lang] for lang in self.config.languages if lang in labels}
