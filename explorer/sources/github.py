"""
Country repository listing.

Each EveryPolitician country lives in its own GitHub repository; the ones
tagged with the `commons-data` topic carry a config.json with the country's
Wikidata id and display languages.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from explorer.commons.models import Config

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
RAW_URL = "https://raw.githubusercontent.com"

_HEADERS = {
    # topics are only included with this preview media type
    "Accept": "application/vnd.github.mercy-preview+json",
    "User-Agent": "CommonsExplorer/1.0 Python/httpx",
}
_TIMEOUT = 15.0  # seconds


class RepositoryError(Exception):
    """Raised when the repository listing or a country config cannot be fetched."""


class CountryEntry(BaseModel):
    name: str
    full_name: str

    @property
    def url(self) -> str:
        return f"/country/{self.name}"


class CountryRepositories:
    """Lists country repositories and loads their config.json."""

    def __init__(self, user: str = "everypolitician", topic: str = "commons-data", timeout: float = _TIMEOUT):
        self.user = user
        self.topic = topic
        self._client = httpx.Client(headers=_HEADERS, timeout=timeout)

    def _get_json(self, url: str, params: Optional[dict] = None):
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise RepositoryError(f"GitHub request failed: {exc}") from exc
        except ValueError as exc:
            raise RepositoryError(f"GitHub response is not JSON: {url}") from exc

    def list_countries(self) -> list[CountryEntry]:
        repos = self._get_json(f"{API_URL}/users/{self.user}/repos", params={"per_page": 1000})
        countries = [
            CountryEntry(name=repo["name"], full_name=repo["full_name"])
            for repo in repos
            if self.topic in (repo.get("topics") or [])
        ]
        logger.info("Found %d %s repositories for %s", len(countries), self.topic, self.user)
        return countries

    def config_for_country(self, name: str) -> Config:
        data = self._get_json(f"{RAW_URL}/{self.user}/{name}/master/config.json")
        try:
            return Config.from_json(data)
        except ValueError as exc:
            raise RepositoryError(f"Invalid config.json for {name}: {exc}") from exc

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CountryRepositories":
        return self

    def __exit__(self, *_) -> None:
        self.close()
