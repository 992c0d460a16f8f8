import logging
from typing import Iterable, Iterator

from pokedex.models import Pokemon
from pokedex.utils import parse_numeric_term

logger = logging.getLogger(__name__)


class RecordStore:
    """
    In-memory collection of fetched records, keyed by id.

    Append-only: merging never replaces an id that is already present,
    and iteration yields records in the order they were first merged.
    The only way to drop records is clear(), used by a filter reset.
    """

    def __init__(self) -> None:
        self._records: dict[int, Pokemon] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Pokemon]:
        return iter(list(self._records.values()))

    def __contains__(self, pokemon_id: object) -> bool:
        return pokemon_id in self._records

    def records(self) -> list[Pokemon]:
        return list(self._records.values())

    def get(self, pokemon_id: int) -> Pokemon | None:
        return self._records.get(pokemon_id)

    def find_by_name(self, name: str) -> Pokemon | None:
        wanted = name.strip().lower()
        for record in self._records.values():
            if record.name.lower() == wanted:
                return record
        return None

    def find_exact(self, term: str) -> Pokemon | None:
        """Record whose name equals the term, or whose id equals it when numeric."""
        pokemon_id = parse_numeric_term(term)
        if pokemon_id is not None and pokemon_id in self._records:
            return self._records[pokemon_id]
        return self.find_by_name(term)

    def merge(self, records: Iterable[Pokemon]) -> list[Pokemon]:
        """
        Append records whose id is not present yet.

        Returns the records actually added. Existing records keep their
        fields; incomplete records are never stored.
        """
        added: list[Pokemon] = []
        for record in records:
            if not record.is_complete:
                logger.debug("Skipping partial record #%s (%s)", record.id, record.name)
                continue
            if record.id in self._records:
                continue
            self._records[record.id] = record
            added.append(record)
        return added

    def covers(self, max_id: int) -> bool:
        """True when every id in 1..max_id is resident."""
        return all(i in self._records for i in range(1, max_id + 1))

    def missing_ids(self, ids: Iterable[int]) -> list[int]:
        return [i for i in ids if i not in self._records]

    def clear(self) -> None:
        self._records.clear()
