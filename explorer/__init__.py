"""EveryPolitician commons explorer — political-office data from Wikidata."""

__version__ = "0.1.0"
