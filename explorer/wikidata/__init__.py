"""
Wikidata result handling — bindings, rows, parsing, labels and SPARQL helpers.
"""
