"""
SPARQL building blocks shared by the query builders and the results parser.

Language-dependent variables follow one naming rule:

    <field>_<suffix>

where <suffix> is the language code with every character outside
[A-Za-z0-9] replaced by "_" (en → personLabel_en, pt-br → personLabel_pt_br).
The parser recombines these variables into one field keyed by language.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Optional

_NON_VARIABLE_CHARS = re.compile(r"[^A-Za-z0-9]")
_LANGUAGE_CODE = re.compile(r"[A-Za-z]{2,8}(-[A-Za-z0-9]{1,8})*")
_ITEM_ID = re.compile(r"[QP]\d+")

PREFIXES = """PREFIX wd: <http://www.wikidata.org/entity/>
PREFIX wdt: <http://www.wikidata.org/prop/direct/>
PREFIX p: <http://www.wikidata.org/prop/>
PREFIX ps: <http://www.wikidata.org/prop/statement/>
PREFIX pq: <http://www.wikidata.org/prop/qualifier/>
PREFIX wikibase: <http://wikiba.se/ontology#>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>"""


class InvalidItemId(ValueError):
    """Raised for an item id that is not a Wikidata Q- or P-number."""


def is_language_code(lang: str) -> bool:
    """True for BCP47-style codes Wikidata uses (en, pt-br, be-tarask)."""
    return _LANGUAGE_CODE.fullmatch(lang) is not None


def language_literal(lang: str) -> str:
    """Quoted SPARQL string for a language code."""
    if not is_language_code(lang):
        raise ValueError(f"Not a language code: {lang!r}")
    return f'"{lang}"'


def language_suffix(lang: str) -> str:
    return _NON_VARIABLE_CHARS.sub("_", lang)


def language_variable(field: str, lang: str) -> str:
    """Variable name (without "?") carrying `field` in language `lang`."""
    return f"{field}_{language_suffix(lang)}"


def split_language_variable(name: str, languages: Sequence[str]) -> Optional[tuple[str, str]]:
    """
    Reverse of language_variable: return (field, lang) or None.

    Only configured languages are recognised; the longest matching suffix wins
    so that "pt_br" is preferred over "br" when both are configured.
    """
    for lang in sorted(languages, key=len, reverse=True):
        tail = "_" + language_suffix(lang)
        if name.endswith(tail) and len(name) > len(tail):
            return name[: -len(tail)], lang
    return None


def label_select(field: str, languages: Iterable[str]) -> str:
    """SELECT-list fragment with one variable per language."""
    return " ".join(f"?{language_variable(field, lang)}" for lang in languages)


def label_optionals(field: str, subject: str, languages: Iterable[str], indent: str = "  ") -> str:
    """One OPTIONAL rdfs:label block per language for `subject`."""
    blocks = []
    for lang in languages:
        var = language_variable(field, lang)
        blocks.append(
            f'{indent}OPTIONAL {{ {subject} rdfs:label ?{var} FILTER(LANG(?{var}) = {language_literal(lang)}) }}'
        )
    return "\n".join(blocks)


def entity(item_id: str) -> str:
    """Prefixed-name form of a Wikidata item ("wd:Q42")."""
    if not _ITEM_ID.fullmatch(item_id):
        raise InvalidItemId(f"Not a Wikidata item id: {item_id!r}")
    return f"wd:{item_id}"
