"""
"Load more" trigger for the rendered list.

A renderer calls the trigger when the sentinel after the last rendered
item becomes visible, passing the key it was armed with. Whenever the
conditions that shape the next load change (loading flag, cursors, sort,
filter mode) the key changes too, so a trigger armed under old conditions
is ignored the same way a re-created watcher would be.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from pokedex.config import MAX_POKEMON, PAGE_LIMIT
from pokedex.coordinator import FetchCoordinator
from pokedex.models import BatchResult, SortDirection, SortField
from pokedex.pagination import (
    PageRequest,
    ascending_page,
    descending_page,
    next_ascending_cursor,
    next_descending_cursor,
)

if TYPE_CHECKING:
    from pokedex.state import AppState

logger = logging.getLogger(__name__)


class LoadAction(str, Enum):
    NONE = "none"
    FETCH_PAGE = "fetch_page"
    EXPAND_WINDOW = "expand_window"


class LoadDecision(NamedTuple):
    action: LoadAction
    page: PageRequest | None = None
    visible_count: int | None = None


class LoadOutcome(NamedTuple):
    """State changes a load produced; None means unchanged."""
    forward_cursor: int | None = None
    backward_cursor: int | None = None
    visible_count: int | None = None
    batch: BatchResult | None = None


NO_LOAD = LoadDecision(LoadAction.NONE)


def trigger_key(state: "AppState") -> str:
    filters = state.filters
    mode = "filtered" if filters.is_active else "paging"
    return ":".join(
        [
            "loading" if state.loading else "idle",
            mode,
            filters.sort.field.value,
            filters.sort.direction.value,
            str(state.forward_cursor),
            str(state.backward_cursor),
            str(state.visible_count),
        ]
    )


class ScrollLoader:
    def __init__(
        self,
        coordinator: FetchCoordinator,
        limit: int = PAGE_LIMIT,
        max_count: int = MAX_POKEMON,
    ):
        self.coordinator = coordinator
        self.limit = limit
        self.max_count = max_count

    def next_page(self, state: "AppState") -> PageRequest | None:
        """The id-ordered page that comes next in the current sort direction."""
        if state.filters.sort.direction == SortDirection.DESC:
            return descending_page(state.backward_cursor, self.limit)
        return ascending_page(state.forward_cursor, self.limit, self.max_count)

    def decide(self, state: "AppState", key: str | None = None) -> LoadDecision:
        """
        What a trigger should do given the current state.

        - stale key, or a fetch already in flight: nothing
        - filtered/search mode: nothing, the filtered list is complete
        - name sort: widen the visible window by one page
        - id sort: fetch the next page forward or mirrored backward
        """
        if key is not None and key != trigger_key(state):
            logger.debug("Ignoring stale load-more trigger %s", key)
            return NO_LOAD
        if state.loading or self.coordinator.loading:
            return NO_LOAD
        if state.filters.is_active:
            return NO_LOAD

        if state.filters.sort.field == SortField.NAME:
            total = len(state.display)
            if state.visible_count >= total:
                return NO_LOAD
            return LoadDecision(
                LoadAction.EXPAND_WINDOW,
                visible_count=min(state.visible_count + self.limit, total),
            )

        page = self.next_page(state)
        if page is None:
            return NO_LOAD
        return LoadDecision(LoadAction.FETCH_PAGE, page=page)

    async def fetch(self, state: "AppState", page: PageRequest) -> LoadOutcome:
        """
        Fetch an id-ordered page and report the advanced cursor.

        The cursor stays put when the summary list itself failed, so the
        next trigger asks for the same page again.
        """
        batch = await self.coordinator.fetch_page(page.offset, page.limit)
        if batch.page_error is not None:
            return LoadOutcome(batch=batch)

        if state.filters.sort.direction == SortDirection.DESC:
            return LoadOutcome(backward_cursor=next_descending_cursor(page), batch=batch)
        return LoadOutcome(forward_cursor=next_ascending_cursor(page), batch=batch)

    async def on_trigger(self, state: "AppState", key: str | None = None) -> LoadOutcome:
        decision = self.decide(state, key)

        if decision.action == LoadAction.EXPAND_WINDOW:
            return LoadOutcome(visible_count=decision.visible_count)
        if decision.action == LoadAction.FETCH_PAGE:
            return await self.fetch(state, decision.page)
        return LoadOutcome()
