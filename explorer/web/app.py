"""
Flask front end.

Routes:
  /                                                 → country repositories
  /country/<country>                                → executives + legislatures
  /legislature/<country>/<legislature>/<position>   → terms of one legislature
  /term/<country>/<legislature>/<term>/<position>   → memberships for one term
  /executive/<country>/<executive>?position_ids=... → current executive members

Settings are handed to create_app once at startup and stored read-only in
app.config["EXPLORER_SETTINGS"]; every request builds its own clients.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from flask import Flask, abort, current_app, render_template, request

from explorer.commons import pages
from explorer.sources.github import CountryRepositories, RepositoryError
from explorer.sources.wikidata import WikidataClient, WikidataError
from explorer.wikidata.sparql import InvalidItemId

logger = logging.getLogger(__name__)


def _settings() -> Any:
    return current_app.config["EXPLORER_SETTINGS"]


def _repositories() -> CountryRepositories:
    return current_app.config["REPOSITORIES_FACTORY"](_settings())


def _wikidata_client() -> WikidataClient:
    return current_app.config["WIKIDATA_CLIENT_FACTORY"](_settings())


def _config_for_country(country: str):
    with _repositories() as repositories:
        return repositories.config_for_country(country)


def create_app(
    settings: Optional[Any] = None,
    wikidata_client_factory: Optional[Callable[[Any], WikidataClient]] = None,
    repositories_factory: Optional[Callable[[Any], CountryRepositories]] = None,
) -> Flask:
    if settings is None:
        from config.settings import settings  # noqa: PLC0415

    app = Flask(__name__)
    app.config["EXPLORER_SETTINGS"] = settings
    app.config["WIKIDATA_CLIENT_FACTORY"] = wikidata_client_factory or WikidataClient.from_settings
    app.config["REPOSITORIES_FACTORY"] = repositories_factory or (
        lambda s: CountryRepositories(user=s.github_user, topic=s.github_topic)
    )

    @app.context_processor
    def _inject_site_title() -> dict:
        return {"site_title": "EveryPolitician commons explorer"}

    @app.errorhandler(WikidataError)
    def _wikidata_failed(exc: WikidataError):
        logger.error("Wikidata query failed for %s: %s", request.path, exc)
        return render_template("error.html", message="The Wikidata query service request failed."), 502

    @app.errorhandler(RepositoryError)
    def _repository_failed(exc: RepositoryError):
        logger.error("Repository lookup failed for %s: %s", request.path, exc)
        return render_template("error.html", message="The country repository could not be loaded."), 502

    @app.errorhandler(InvalidItemId)
    def _bad_identifier(exc: InvalidItemId):
        return render_template("error.html", message=str(exc)), 400

    @app.route("/")
    def index():
        with _repositories() as repositories:
            countries = repositories.list_countries()
        return render_template("index.html", countries=countries)

    @app.route("/country/<country>")
    def country(country: str):
        config = _config_for_country(country)
        with _wikidata_client() as client:
            page = pages.country_page(config, client, **pages.query_options(_settings()))
        return render_template("country.html", country=country, config=config, page=page)

    @app.route("/legislature/<country>/<legislature>/<position>")
    def legislature(country: str, legislature: str, position: str):
        config = _config_for_country(country)
        with _wikidata_client() as client:
            house = pages.legislature_page(
                config, legislature, position, client, **pages.query_options(_settings())
            )
        return render_template("legislature.html", country=country, config=config, legislature=house)

    @app.route("/term/<country>/<legislature>/<term>/<position>")
    def term(country: str, legislature: str, term: str, position: str):
        config = _config_for_country(country)
        with _wikidata_client() as client:
            page = pages.term_page(
                config,
                legislature,
                term,
                position,
                client,
                legislature_position_item_id=request.args.get("legislature_position") or None,
                **pages.query_options(_settings()),
            )
        return render_template("term.html", country=country, config=config, page=page)

    @app.route("/executive/<country>/<executive>")
    def executive(country: str, executive: str):
        position_ids = [p for p in request.args.get("position_ids", "").split(",") if p]
        if not position_ids:
            abort(400, description="position_ids is required")
        config = _config_for_country(country)
        with _wikidata_client() as client:
            page = pages.executive_page(
                config, executive, position_ids, client, **pages.query_options(_settings())
            )
        return render_template("term.html", country=country, config=config, page=page)

    return app
