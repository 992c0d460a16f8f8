"""
Application state and the commands that change it.

Consumers read an immutable AppState snapshot and request transitions by
dispatching typed commands to a PokedexSession. The session is the only
writer: the coordinator merges records, the filter engine recomputes the
display list, and every loading flag is cleared on all exit paths.
"""

import asyncio
import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field

from pokedex import filters
from pokedex.config import BATCH_SIZE, MAX_POKEMON, PAGE_LIMIT
from pokedex.coordinator import FetchCoordinator
from pokedex.detail import DetailController, DetailState
from pokedex.errors import NotFoundError, TransportError
from pokedex.loader import LoadOutcome, ScrollLoader, trigger_key
from pokedex.models import BatchResult, FilterSpec, Pokemon, SortDirection, SortField
from pokedex.store import RecordStore

logger = logging.getLogger(__name__)


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    filters: FilterSpec = Field(default_factory=FilterSpec)
    # full output of the filter engine; `items` is what is shown
    display: list[Pokemon] = Field(default_factory=list)
    visible_count: int = PAGE_LIMIT
    forward_cursor: int = 0
    backward_cursor: int = MAX_POKEMON
    record_count: int = 0
    selected_id: int | None = None

    loading: bool = False
    search_loading: bool = False
    search_not_found: bool = False

    last_fetched: int = 0
    last_failed: int = 0

    detail: DetailState = Field(default_factory=DetailState)

    @property
    def items(self) -> list[Pokemon]:
        """
        Records to render. Unfiltered name-sorted views expose a growing
        window; every other mode shows the whole display list.
        """
        if self.filters.sort.field == SortField.NAME and not self.filters.is_active:
            return self.display[: self.visible_count]
        return self.display

    @property
    def load_more_key(self) -> str:
        return trigger_key(self)

    @property
    def message(self) -> str | None:
        if self.loading or self.search_loading:
            return None
        if self.search_not_found:
            return f"No Pokemon named or numbered \"{self.filters.search_term.strip()}\" exists"
        if not self.display:
            return "No Pokemon found matching your filters"
        return None


# ---- Commands ----

class Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class RequestPage(Command):
    """Load the next id-ordered page in the current direction (initial load)."""


class ApplyFilter(Command):
    filters: FilterSpec


class ResetFilters(Command):
    pass


class LoadMore(Command):
    key: str | None = None


class SelectPokemon(Command):
    pokemon_id: int


class OpenDetail(Command):
    pokemon_id: int


class NavigateDetail(Command):
    direction: int


class JumpToEvolution(Command):
    pokemon_id: int


class CloseDetail(Command):
    pass


class KeyPress(Command):
    key: str


class PokedexSession:
    """
    One viewer's catalog session: record store, fetch coordinator,
    load-more trigger and detail controller behind a single dispatch().
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        limit: int = PAGE_LIMIT,
        max_count: int = MAX_POKEMON,
        batch_size: int = BATCH_SIZE,
    ):
        self.limit = limit
        self.max_count = max_count
        self.store = RecordStore()
        self.coordinator = FetchCoordinator(client, self.store, max_count=max_count, batch_size=batch_size)
        self.loader = ScrollLoader(self.coordinator, limit=limit, max_count=max_count)
        self.detail = DetailController(client)
        self._state = AppState(visible_count=limit, backward_cursor=max_count)
        # list commands run one at a time; detail commands have their own guard
        self._list_lock = asyncio.Lock()
        self._handlers = {
            RequestPage: self._request_page,
            ApplyFilter: self._apply_filter,
            ResetFilters: self._reset_filters,
            LoadMore: self._load_more,
            SelectPokemon: self._select,
            OpenDetail: self._open_detail,
            NavigateDetail: self._navigate_detail,
            JumpToEvolution: self._jump_to_evolution,
            CloseDetail: self._close_detail,
            KeyPress: self._key_press,
        }

    def snapshot(self) -> AppState:
        return self._state.model_copy(
            update={
                "loading": self.coordinator.loading,
                "record_count": len(self.store),
                "detail": self.detail.state,
            }
        )

    async def start(self) -> AppState:
        return await self.dispatch(RequestPage())

    async def dispatch(self, command: Command) -> AppState:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command: {type(command).__name__}")

        if isinstance(command, LoadMore):
            # checked before any await, so rapid triggers never overlap a fetch
            if self.coordinator.loading:
                return self.snapshot()

        await handler(command)
        return self.snapshot()

    # ---- list commands ----

    async def _request_page(self, command: RequestPage) -> None:
        async with self._list_lock:
            page = self.loader.next_page(self.snapshot())
            if page is None:
                return
            self._apply_outcome(await self.loader.fetch(self.snapshot(), page))
            self._refresh()

    async def _load_more(self, command: LoadMore) -> None:
        async with self._list_lock:
            outcome = await self.loader.on_trigger(self.snapshot(), key=command.key)
            self._apply_outcome(outcome)
            self._refresh()

    async def _apply_filter(self, command: ApplyFilter) -> None:
        spec = command.filters
        async with self._list_lock:
            self._update(filters=spec, visible_count=self.limit, search_not_found=False)

            missed = False
            if spec.is_search_only:
                missed = await self._search(spec.search_term)
            elif spec.has_catalog_filters or spec.sort.field == SortField.NAME:
                await self._ensure_catalog()
            else:
                page = self.loader.next_page(self.snapshot())
                if page is not None and not self._direction_started():
                    self._apply_outcome(await self.loader.fetch(self.snapshot(), page))

            self._refresh()
            if missed and not self._state.display:
                self._update(search_not_found=True)

    async def _reset_filters(self, command: ResetFilters) -> None:
        async with self._list_lock:
            self.store.clear()
            self._state = AppState(
                visible_count=self.limit,
                backward_cursor=self.max_count,
                selected_id=None,
            )
            page = self.loader.next_page(self.snapshot())
            if page is not None:
                self._apply_outcome(await self.loader.fetch(self.snapshot(), page))
            self._refresh()

    async def _select(self, command: SelectPokemon) -> None:
        """Jump to an id: make sure the record is resident, then select it."""
        pokemon_id = command.pokemon_id
        if pokemon_id < 1:
            return

        async with self._list_lock:
            if pokemon_id not in self.store:
                try:
                    await self.coordinator.fetch_one(pokemon_id)
                except NotFoundError:
                    logger.warning("Pokemon #%s not found", pokemon_id)
                    return
                except TransportError as e:
                    logger.error("Failed to fetch Pokemon #%s: %s", pokemon_id, e)
                    return
            self._update(selected_id=pokemon_id)
            self._refresh()

    # ---- detail commands ----

    async def _open_detail(self, command: OpenDetail) -> None:
        record = self.store.get(command.pokemon_id)
        if record is None:
            try:
                record = await self.coordinator.fetch_one(command.pokemon_id)
            except NotFoundError:
                logger.warning("Pokemon #%s not found", command.pokemon_id)
                self.detail.fail(f"Pokemon #{command.pokemon_id} not found")
                return
            except TransportError as e:
                logger.error("Failed to fetch Pokemon #%s: %s", command.pokemon_id, e)
                return
            self._refresh()
        await self.detail.open(record)

    async def _navigate_detail(self, command: NavigateDetail) -> None:
        await self.detail.navigate(command.direction)

    async def _jump_to_evolution(self, command: JumpToEvolution) -> None:
        await self.detail.jump_to_evolution(command.pokemon_id)

    async def _close_detail(self, command: CloseDetail) -> None:
        self.detail.close()

    async def _key_press(self, command: KeyPress) -> None:
        await self.detail.handle_key(command.key)

    # ---- helpers ----

    async def _search(self, term: str) -> bool:
        """
        Fetch a searched name/id that is not resident yet.

        Returns True when upstream reported it as not found.
        """
        if self.store.find_exact(term) is not None:
            return False

        self._update(search_loading=True)
        try:
            await self.coordinator.fetch_one(term)
        except NotFoundError:
            logger.warning("Search found nothing upstream for %r", term)
            return True
        except TransportError as e:
            logger.error("Search for %r failed: %s", term, e)
        finally:
            self._update(search_loading=False)
        return False

    async def _ensure_catalog(self) -> None:
        if self.store.covers(self.max_count):
            return
        self._record_batch(await self.coordinator.fetch_all())

    def _direction_started(self) -> bool:
        state = self._state
        if state.filters.sort.direction == SortDirection.DESC:
            return state.backward_cursor < self.max_count
        return state.forward_cursor > 0

    def _apply_outcome(self, outcome: LoadOutcome) -> None:
        changes = {}
        if outcome.forward_cursor is not None:
            changes["forward_cursor"] = outcome.forward_cursor
        if outcome.backward_cursor is not None:
            changes["backward_cursor"] = outcome.backward_cursor
        if outcome.visible_count is not None:
            changes["visible_count"] = outcome.visible_count
        if changes:
            self._update(**changes)
        if outcome.batch is not None:
            self._record_batch(outcome.batch)

    def _record_batch(self, batch: BatchResult) -> None:
        if batch.failed:
            logger.warning("%s of %s records failed to load", batch.failed, batch.failed + batch.fetched)
        self._update(last_fetched=batch.fetched, last_failed=batch.failed)

    def _refresh(self) -> None:
        self._update(display=filters.apply(self.store.records(), self._state.filters))

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
