"""
Main CLI entry point.
Usage: uv run explorer [COMMAND]

Commands:
  serve         → run the web site
  countries     → list country repositories tagged commons-data
  country       → executives and legislatures of a country
  legislature   → terms of one legislature
  term          → memberships of one legislative term
  executive     → current members of an executive
  sparql        → print a generated query without running it
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from config.settings import settings

app = typer.Typer(
    name="explorer",
    help="🏛️  Browse EveryPolitician commons data from Wikidata",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Override LOG_LEVEL"),
) -> None:
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(country: str, languages: Optional[str]):
    from explorer.commons.models import Config
    from explorer.sources.github import CountryRepositories, RepositoryError

    try:
        with CountryRepositories(user=settings.github_user, topic=settings.github_topic) as repos:
            config = repos.config_for_country(country)
    except RepositoryError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    if languages:
        try:
            config = Config(country_wikidata_id=config.country_wikidata_id, languages=languages.split(","))
        except ValueError as exc:
            console.print(f"[red]Invalid --languages: {exc}[/red]")
            raise typer.Exit(1)
    return config


def _client():
    from explorer.sources.wikidata import WikidataClient
    return WikidataClient.from_settings(settings)


def _options() -> dict:
    from explorer.commons.pages import query_options
    return query_options(settings)


def _fail(exc: Exception) -> None:
    console.print(f"[red]Wikidata query failed: {exc}[/red]")
    raise typer.Exit(1)


def _membership_table(title: str, page, languages) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True)
    table.add_column("Person", style="bold cyan")
    table.add_column("Name")
    table.add_column("On behalf of", style="magenta")
    table.add_column("Position")
    table.add_column("Start", style="green")
    table.add_column("End", style="yellow")
    for m in page.memberships:
        table.add_row(
            m.person_id,
            m.person.display_name(languages) if m.person else "—",
            m.on_behalf_of.display_name(languages) if m.on_behalf_of else "—",
            m.position_item_id or "—",
            m.start_date or "—",
            m.end_date or "—",
        )
    return table


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: settings.host)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: settings.port)"),
    debug: bool = typer.Option(False, "--debug", help="Enable the Flask debugger"),
) -> None:
    """Run the web site."""
    from explorer.web.app import create_app

    create_app(settings).run(host=host or settings.host, port=port or settings.port, debug=debug)


# ---------------------------------------------------------------------------
# countries / country
# ---------------------------------------------------------------------------


@app.command()
def countries() -> None:
    """List country repositories tagged with the commons-data topic."""
    from explorer.sources.github import CountryRepositories, RepositoryError

    try:
        with CountryRepositories(user=settings.github_user, topic=settings.github_topic) as repos:
            entries = repos.list_countries()
    except RepositoryError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    table = Table(title="🌍 Countries", box=box.ROUNDED)
    table.add_column("Name", style="bold cyan")
    table.add_column("Repository")
    for entry in entries:
        table.add_row(entry.name, entry.full_name)
    console.print(table)


@app.command()
def country(
    name: str = typer.Argument(..., help="Country repository name, e.g. 'canada'"),
    languages: Optional[str] = typer.Option(None, "--languages", "-L", help="Comma-separated language codes"),
) -> None:
    """Show the executives and legislatures of a country."""
    from explorer.commons.pages import country_page
    from explorer.sources.wikidata import WikidataError

    config = _config(name, languages)
    try:
        with _client() as client:
            page = country_page(config, client, **_options())
    except WikidataError as exc:
        _fail(exc)

    table = Table(title=f"🏛️  {name}", box=box.ROUNDED)
    table.add_column("Kind", style="dim")
    table.add_column("Item", style="bold cyan")
    table.add_column("Label")
    table.add_column("Positions")
    table.add_column("Terms", justify="right")
    for e in page.executives:
        table.add_row("executive", e.executive_item_id, e.comment or "—", ", ".join(e.positions_item_ids), "—")
    for leg in page.legislatures:
        table.add_row("legislature", leg.house_item_id, leg.comment or "—", leg.position_item_id, str(len(leg.terms)))
    console.print(table)


# ---------------------------------------------------------------------------
# legislature / term / executive
# ---------------------------------------------------------------------------


@app.command()
def legislature(
    name: str = typer.Argument(..., help="Country repository name"),
    house: str = typer.Argument(..., help="Legislature item id"),
    position: str = typer.Argument(..., help="Membership position item id"),
    strict: bool = typer.Option(False, "--strict", help="Only terms with a start date"),
    languages: Optional[str] = typer.Option(None, "--languages", "-L"),
) -> None:
    """List the terms of one legislature."""
    from explorer.commons.pages import legislature_page
    from explorer.sources.wikidata import WikidataError

    config = _config(name, languages)
    try:
        with _client() as client:
            result = legislature_page(config, house, position, client, strict=strict, **_options())
    except WikidataError as exc:
        _fail(exc)

    table = Table(title=f"📜 Terms of {house}", box=box.ROUNDED)
    table.add_column("Term", style="bold cyan")
    table.add_column("Label")
    table.add_column("Start", style="green")
    table.add_column("End", style="yellow")
    table.add_column("Position")
    for t in result.terms:
        table.add_row(t.term_item_id, t.comment or "—", t.start_date or "—", t.end_date or "—", t.position_item_id or "—")
    console.print(table)


@app.command()
def term(
    name: str = typer.Argument(..., help="Country repository name"),
    house: str = typer.Argument(..., help="Legislature item id"),
    term_id: str = typer.Argument(..., help="Legislative term item id"),
    position: str = typer.Argument(..., help="Membership position item id"),
    languages: Optional[str] = typer.Option(None, "--languages", "-L"),
) -> None:
    """List the members of one legislative term."""
    from explorer.commons.pages import term_page
    from explorer.sources.wikidata import WikidataError

    config = _config(name, languages)
    try:
        with _client() as client:
            page = term_page(config, house, term_id, position, client, **_options())
    except WikidataError as exc:
        _fail(exc)
    console.print(_membership_table(f"👥 {term_id}", page, config.languages))


@app.command()
def executive(
    name: str = typer.Argument(..., help="Country repository name"),
    executive_id: str = typer.Argument(..., help="Executive item id"),
    position_ids: str = typer.Option(..., "--positions", "-P", help="Comma-separated position item ids"),
    languages: Optional[str] = typer.Option(None, "--languages", "-L"),
) -> None:
    """List the current members of an executive."""
    from explorer.commons.pages import executive_page
    from explorer.sources.wikidata import WikidataError

    config = _config(name, languages)
    ids = [p for p in position_ids.split(",") if p]
    try:
        with _client() as client:
            page = executive_page(config, executive_id, ids, client, **_options())
    except WikidataError as exc:
        _fail(exc)
    console.print(_membership_table(f"👥 {executive_id}", page, config.languages))


# ---------------------------------------------------------------------------
# sparql
# ---------------------------------------------------------------------------


@app.command()
def sparql(
    kind: str = typer.Argument(..., help="legislatures | executives | terms | term | executive"),
    country_id: str = typer.Option(..., "--country-id", "-c", help="Country Wikidata id, e.g. Q16"),
    languages: str = typer.Option("en", "--languages", "-L", help="Comma-separated language codes"),
    item: Optional[list[str]] = typer.Option(None, "--item", "-i", help="Item ids the query needs, in order"),
) -> None:
    """
    Print the SPARQL a page would run, without running it.

    Item ids: terms → house position; term → house term position;
    executive → executive position...
    """
    from explorer.commons.executive import Executive
    from explorer.commons.legislature import Legislature
    from explorer.commons.models import Config, Position

    item = item or []
    try:
        config = Config(country_wikidata_id=country_id, languages=languages.split(","))
        if kind == "legislatures":
            text = Legislature.list_query(config)
        elif kind == "executives":
            text = Executive.list_query(config)
        elif kind == "terms":
            house, position = item
            text = Legislature.terms_query(config, house, position)
        elif kind == "term":
            house, term_id, position = item
            text = Legislature(house_item_id=house, position_item_id=position).term(term_id).query(config)
        elif kind == "executive":
            executive_id, *positions = item
            text = Executive(
                executive_item_id=executive_id,
                positions=[Position(position_item_id=p) for p in positions],
            ).terms[0].query(config)
        else:
            console.print(f"[red]Unknown query kind: {kind}[/red]")
            raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(Syntax(text, "sparql", word_wrap=True))


if __name__ == "__main__":
    app()
