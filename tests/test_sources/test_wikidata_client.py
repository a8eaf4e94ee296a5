"""
Tests for explorer/sources/wikidata.py — WikidataClient and Query.
All HTTP requests are mocked; no live network calls.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from explorer.sources.wikidata import (
    EndpointError,
    Query,
    QueryTimeoutError,
    WikidataClient,
    WikidataError,
)
from explorer.wikidata.models import Binding, BindingKind


# ---------------------------------------------------------------------------
# Helpers — fake SPARQL responses
# ---------------------------------------------------------------------------


def _sparql_response(bindings: list[dict]) -> dict:
    return {"head": {"vars": ["person", "personLabel_en"]}, "results": {"bindings": bindings}}


def _client_returning(payload=None, json_error: Exception | None = None) -> WikidataClient:
    mock_resp = MagicMock()
    mock_resp.raise_for_status.return_value = None
    if json_error is not None:
        mock_resp.json.side_effect = json_error
    else:
        mock_resp.json.return_value = payload

    client = WikidataClient()
    client._client = MagicMock()
    client._client.get.return_value = mock_resp
    return client


PERSON_BINDING = {
    "person": {"type": "uri", "value": "http://www.wikidata.org/entity/Q1"},
    "personLabel_en": {"type": "literal", "value": "Alice", "xml:lang": "en"},
}


# ---------------------------------------------------------------------------
# WikidataClient.execute
# ---------------------------------------------------------------------------


class TestExecute:
    def test_returns_typed_rows(self) -> None:
        client = _client_returning(_sparql_response([PERSON_BINDING]))
        rows = client.execute("SELECT * WHERE { }")

        assert len(rows) == 1
        assert rows[0]["person"] == Binding(kind=BindingKind.IRI, value="http://www.wikidata.org/entity/Q1")
        assert rows[0]["personLabel_en"].language == "en"

    def test_requests_json(self) -> None:
        client = _client_returning(_sparql_response([]))
        client.execute("SELECT ?x WHERE { }")

        _, kwargs = client._client.get.call_args
        assert kwargs["params"] == {"query": "SELECT ?x WHERE { }", "format": "json"}

    def test_sends_accept_header(self) -> None:
        client = WikidataClient()
        assert client._client.headers["Accept"] == "application/sparql-results+json"
        client.close()

    def test_custom_user_agent(self) -> None:
        client = WikidataClient(user_agent="tests/1.0")
        assert client._client.headers["User-Agent"] == "tests/1.0"
        client.close()

    def test_connection_failure_is_endpoint_error(self) -> None:
        client = WikidataClient()
        client._client = MagicMock()
        client._client.get.side_effect = httpx.ConnectError("Connection refused")

        with pytest.raises(EndpointError, match="SPARQL"):
            client.execute("SELECT * WHERE { }")

    def test_http_status_is_endpoint_error(self) -> None:
        request = httpx.Request("GET", "https://query.wikidata.org/sparql")
        response = httpx.Response(500, request=request)
        client = WikidataClient()
        client._client = MagicMock()
        client._client.get.return_value = response

        with pytest.raises(EndpointError):
            client.execute("SELECT * WHERE { }")

    def test_timeout_is_timeout_error(self) -> None:
        client = WikidataClient()
        client._client = MagicMock()
        client._client.get.side_effect = httpx.ReadTimeout("too slow")

        with pytest.raises(QueryTimeoutError) as info:
            client.execute("SELECT * WHERE { }")
        assert isinstance(info.value, TimeoutError)
        assert isinstance(info.value, WikidataError)

    def test_non_json_body_is_endpoint_error(self) -> None:
        client = _client_returning(json_error=ValueError("Expecting value"))
        with pytest.raises(EndpointError, match="not JSON"):
            client.execute("SELECT * WHERE { }")

    @pytest.mark.parametrize("payload", [[], {}, {"results": []}, {"results": {"bindings": None}}])
    def test_missing_bindings_is_endpoint_error(self, payload) -> None:
        client = _client_returning(payload)
        with pytest.raises(EndpointError):
            client.execute("SELECT * WHERE { }")

    def test_malformed_cell_is_endpoint_error(self) -> None:
        client = _client_returning(_sparql_response([{"person": {"type": "uri"}}]))
        with pytest.raises(EndpointError, match="Malformed"):
            client.execute("SELECT * WHERE { }")

    def test_from_settings(self) -> None:
        settings = MagicMock(sparql_endpoint="http://localhost/sparql", request_timeout=5.0, user_agent="x/1")
        client = WikidataClient.from_settings(settings)
        assert client.endpoint == "http://localhost/sparql"
        client.close()

    def test_context_manager_closes(self) -> None:
        client = WikidataClient()
        client._client = MagicMock()
        with client:
            pass
        client._client.close.assert_called_once()


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class TestQuery:
    def _rows(self) -> list[dict]:
        return [{"person": Binding(kind=BindingKind.IRI, value="http://www.wikidata.org/entity/Q1")}]

    def test_run_delegates_to_client(self) -> None:
        client = MagicMock()
        client.execute.return_value = self._rows()
        result = Query("SELECT 1").run(wikidata_client=client)

        client.execute.assert_called_once_with("SELECT 1")
        assert result == self._rows()

    def test_no_files_by_default(self, tmp_path: Path) -> None:
        client = MagicMock()
        client.execute.return_value = self._rows()
        Query("SELECT 1", output_dir=tmp_path).run(wikidata_client=client)
        assert list(tmp_path.iterdir()) == []

    def test_saves_query_and_results(self, tmp_path: Path) -> None:
        client = MagicMock()
        client.execute.return_value = self._rows()
        Query("SELECT 1", output_dir=tmp_path / "q").run(
            wikidata_client=client, save_query_used=True, save_query_results=True
        )

        assert (tmp_path / "q" / "query-used.rq").read_text() == "SELECT 1"
        saved = json.loads((tmp_path / "q" / "query-results.json").read_text())
        assert saved[0]["person"]["kind"] == "iri"

    def test_save_failure_does_not_change_result(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        client = MagicMock()
        client.execute.return_value = self._rows()

        result = Query("SELECT 1", output_dir=blocker).run(
            wikidata_client=client, save_query_used=True, save_query_results=True
        )
        assert result == self._rows()

    def test_query_saved_even_if_execution_fails(self, tmp_path: Path) -> None:
        client = MagicMock()
        client.execute.side_effect = EndpointError("down")
        with pytest.raises(EndpointError):
            Query("SELECT 1", output_dir=tmp_path).run(wikidata_client=client, save_query_used=True)
        assert (tmp_path / "query-used.rq").exists()
