"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from explorer.commons.models import Config


@pytest.fixture
def config() -> Config:
    return Config(country_wikidata_id="Q30", languages=["en", "fr"])


@pytest.fixture
def english() -> Config:
    return Config(country_wikidata_id="Q30", languages=["en"])


@pytest.fixture
def client() -> MagicMock:
    """A WikidataClient stand-in; set .execute.return_value / side_effect per test."""
    mock = MagicMock()
    mock.execute.return_value = []
    return mock
