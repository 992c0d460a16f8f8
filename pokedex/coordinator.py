import asyncio
import logging

import httpx

from pokedex.config import BATCH_SIZE, MAX_POKEMON, POKEAPI_BASE_URL
from pokedex.errors import PokedexError, TransportError
from pokedex.models import BatchResult, ItemFailure, Pokemon
from pokedex.pokeapi_client import fetch_pokemon_details, fetch_pokemon_list, fetch_species
from pokedex.store import RecordStore
from pokedex.utils import id_from_url

logger = logging.getLogger(__name__)

# Failures that drop a single item from a batch instead of the whole batch
ITEM_ERRORS = (PokedexError, KeyError, ValueError, TypeError)


class FetchCoordinator:
    """
    Fetches pages or single records from PokeAPI and merges them into
    the record store.

    `loading` is True while a page or full-catalog fetch is in flight. It
    is set before the first await so a second trigger in the same event
    loop tick sees it, and cleared on every exit path.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: RecordStore,
        max_count: int = MAX_POKEMON,
        batch_size: int = BATCH_SIZE,
    ):
        self.client = client
        self.store = store
        self.max_count = max_count
        self.batch_size = batch_size
        self.loading = False

    async def fetch_page(self, offset: int, limit: int) -> BatchResult:
        """
        Fetch one page of summaries and resolve every item's detail and
        species resources concurrently.

        Items already in the store are not fetched again. A failed item
        is logged and left out; the rest of the page is still merged.
        Never raises for upstream failures.
        """
        self.loading = True
        try:
            try:
                page = await fetch_pokemon_list(self.client, limit=limit, offset=offset)
                ids = [id_from_url(item["url"]) for item in page.get("results", [])]
            except ITEM_ERRORS as e:
                logger.error("Failed to fetch page offset=%s limit=%s: %s", offset, limit, e)
                return BatchResult(page_error=str(e))

            result = await self._resolve_ids(ids)
            logger.info(
                "Fetched page offset=%s limit=%s: %s records, %s failed",
                offset, limit, result.fetched, result.failed,
            )
            return result
        finally:
            self.loading = False

    async def fetch_all(self) -> BatchResult:
        """
        Make the store hold the whole catalog (ids 1..max_count).

        The summary list is requested in one call, then missing records
        are resolved in waves of `batch_size` concurrent lookups.
        """
        self.loading = True
        try:
            try:
                page = await fetch_pokemon_list(self.client, limit=self.max_count, offset=0)
                ids = [id_from_url(item["url"]) for item in page.get("results", [])]
            except ITEM_ERRORS as e:
                logger.error("Failed to fetch catalog index: %s", e)
                return BatchResult(page_error=str(e))

            ids = [i for i in ids if i <= self.max_count]
            missing = self.store.missing_ids(ids)
            logger.info("Full catalog fetch: %s of %s records missing", len(missing), len(ids))

            total = BatchResult()
            for start in range(0, len(missing), self.batch_size):
                wave = await self._resolve_ids(missing[start:start + self.batch_size])
                total.records.extend(wave.records)
                total.failures.extend(wave.failures)

            logger.info("Full catalog fetch done: %s fetched, %s failed", total.fetched, total.failed)
            return total
        finally:
            self.loading = False

    async def fetch_one(self, id_or_name: str | int) -> Pokemon:
        """
        Resolve a single record directly by id or lowercased name and merge it.

        Raises:
            NotFoundError: upstream has no such Pokemon.
            TransportError: any other failure.
        """
        detail = await fetch_pokemon_details(self.client, id_or_name)
        try:
            species = await fetch_species(self.client, detail["id"])
            record = Pokemon.from_api(detail, species)
        except (KeyError, ValueError, TypeError) as e:
            raise TransportError(f"{POKEAPI_BASE_URL}/pokemon/{id_or_name}", f"malformed payload: {e}") from e

        self.merge_into_store([record])
        return self.store.get(record.id) or record

    def merge_into_store(self, records: list[Pokemon]) -> list[Pokemon]:
        added = self.store.merge(records)
        if len(added) < len(records):
            logger.debug("Merged %s of %s records, rest already present", len(added), len(records))
        return added

    async def _resolve_ids(self, ids: list[int]) -> BatchResult:
        """
        Fan out detail+species lookups for ids not yet stored, then merge.

        Results are collected in input order, so the merge does not depend
        on which request finished first.
        """
        to_fetch = self.store.missing_ids(ids)
        outcomes = await asyncio.gather(
            *(self._resolve_one(pokemon_id) for pokemon_id in to_fetch),
            return_exceptions=True,
        )

        fetched: list[Pokemon] = []
        failures: list[ItemFailure] = []
        for pokemon_id, outcome in zip(to_fetch, outcomes):
            if isinstance(outcome, Pokemon):
                fetched.append(outcome)
            elif isinstance(outcome, ITEM_ERRORS):
                logger.warning("Failed to fetch Pokemon #%s: %s", pokemon_id, outcome)
                failures.append(ItemFailure(ref=str(pokemon_id), reason=str(outcome)))
            else:
                raise outcome

        self.merge_into_store(fetched)

        records = [self.store.get(i) for i in ids]
        return BatchResult(records=[r for r in records if r is not None], failures=failures)

    async def _resolve_one(self, pokemon_id: int) -> Pokemon:
        detail, species = await asyncio.gather(
            fetch_pokemon_details(self.client, pokemon_id),
            fetch_species(self.client, pokemon_id),
        )
        return Pokemon.from_api(detail, species)
