"""
Filter/sort engine.

Pure functions over a list of records: no I/O and no mutation of the input.
"""

import unicodedata
from typing import Iterable

from pokedex.models import FilterSpec, Pokemon, SortField, SortSpec
from pokedex.utils import parse_numeric_term


def name_sort_key(name: str) -> str:
    # Accent- and case-insensitive ordering, close to a locale compare
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def matches_search(record: Pokemon, term: str) -> bool:
    """Name contains the term (case-insensitive), or the id equals a numeric term."""
    term = term.strip()
    if term.lower() in record.name.lower():
        return True
    pokemon_id = parse_numeric_term(term)
    return pokemon_id is not None and record.id == pokemon_id


def matches(record: Pokemon, spec: FilterSpec) -> bool:
    """
    AND across populated fields, OR within a field.

    Generation and game selections only accept complete records, so a
    record still waiting on its species data never passes them.
    """
    if spec.has_search and not matches_search(record, spec.search_term):
        return False

    if spec.types and not any(t in record.types for t in spec.types):
        return False

    if spec.generations:
        if not record.is_complete or record.generation not in spec.generations:
            return False

    if spec.games:
        if not record.is_complete or not any(g in record.games for g in spec.games):
            return False

    return True


def sort_records(records: Iterable[Pokemon], sort: SortSpec) -> list[Pokemon]:
    """
    Stable sort by id (numeric) or name.

    Python's sort keeps equal keys in input order, including with
    reverse=True, so descending output is stable too.
    """
    descending = sort.sign < 0
    if sort.field == SortField.NAME:
        return sorted(records, key=lambda r: name_sort_key(r.name), reverse=descending)
    return sorted(records, key=lambda r: r.id, reverse=descending)


def apply(records: Iterable[Pokemon], spec: FilterSpec) -> list[Pokemon]:
    """Return the ordered subset of records to display for the given spec."""
    records = list(records)
    if not spec.is_active:
        return sort_records(records, spec.sort)
    return sort_records((r for r in records if matches(r, spec)), spec.sort)
