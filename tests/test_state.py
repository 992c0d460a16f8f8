"""End-to-end tests of the catalog session against the fake API."""

import asyncio

import pytest

from fake_pokeapi import FakePokeAPI
from pokedex.models import FilterSpec, SortDirection, SortField, SortSpec
from pokedex.state import (
    ApplyFilter,
    CloseDetail,
    KeyPress,
    LoadMore,
    NavigateDetail,
    OpenDetail,
    PokedexSession,
    RequestPage,
    ResetFilters,
    SelectPokemon,
)


def make_session(count=30, limit=10, **api_kwargs):
    api = FakePokeAPI(count=count, **api_kwargs)
    session = PokedexSession(api.client(), limit=limit, max_count=count, batch_size=10)
    return session, api


def ids(state):
    return [r.id for r in state.items]


class TestInitialLoad:
    """Startup page and ascending load-more."""

    @pytest.mark.asyncio
    async def test_first_page_is_ids_one_to_ten_ascending(self):
        session, api = make_session()

        state = await session.start()

        assert ids(state) == list(range(1, 11))
        assert state.record_count == 10
        assert state.forward_cursor == 10
        assert not state.loading
        assert api.list_calls() == [(0, 10)]

    @pytest.mark.asyncio
    async def test_load_more_fetches_the_next_page(self):
        session, api = make_session()
        state = await session.start()

        state = await session.dispatch(LoadMore(key=state.load_more_key))

        assert ids(state) == list(range(1, 21))
        assert api.list_calls() == [(0, 10), (10, 10)]

    @pytest.mark.asyncio
    async def test_stale_load_more_key_does_nothing(self):
        session, api = make_session()
        first = await session.start()
        await session.dispatch(LoadMore(key=first.load_more_key))

        state = await session.dispatch(LoadMore(key=first.load_more_key))

        assert state.record_count == 20
        assert len(api.list_calls()) == 2

    @pytest.mark.asyncio
    async def test_load_more_is_ignored_while_a_fetch_is_in_flight(self):
        session, api = make_session()
        session.coordinator.loading = True

        state = await session.dispatch(LoadMore())

        assert api.requests == []
        assert state.loading

    @pytest.mark.asyncio
    async def test_concurrent_load_more_fetches_one_page(self):
        session, api = make_session()
        await session.start()
        respond = api.handler

        async def slow(request):
            await asyncio.sleep(0.01)
            return respond(request)

        api.handler = slow
        states = await asyncio.gather(*(session.dispatch(LoadMore()) for _ in range(3)))

        assert api.list_calls() == [(0, 10), (10, 10)]
        assert states[-1].record_count == 20
        assert not session.snapshot().loading

    @pytest.mark.asyncio
    async def test_partial_page_failure_is_counted_not_raised(self):
        session, _ = make_session(failing={2, 9})

        state = await session.start()

        assert ids(state) == [1, 3, 4, 5, 6, 7, 8, 10]
        assert state.last_fetched == 8
        assert state.last_failed == 2
        assert state.message is None


class TestDescending:
    """Descending id order pages backwards from the catalog end."""

    @pytest.mark.asyncio
    async def test_descending_pages_mirror_from_the_end(self):
        session, api = make_session(count=25)
        await session.start()
        descending = FilterSpec(sort=SortSpec(direction=SortDirection.DESC))

        state = await session.dispatch(ApplyFilter(filters=descending))
        assert api.list_calls()[-1] == (15, 10)
        assert state.backward_cursor == 15

        state = await session.dispatch(LoadMore(key=state.load_more_key))
        assert api.list_calls()[-1] == (5, 10)

        state = await session.dispatch(LoadMore(key=state.load_more_key))
        assert api.list_calls()[-1] == (0, 5)
        assert state.backward_cursor == 0
        assert ids(state) == list(range(25, 0, -1))

        state = await session.dispatch(LoadMore(key=state.load_more_key))
        assert len(api.list_calls()) == 4

    @pytest.mark.asyncio
    async def test_first_descending_request_for_the_full_catalog(self):
        api = FakePokeAPI(count=1025)
        session = PokedexSession(api.client(), limit=10, max_count=1025)
        descending = FilterSpec(sort=SortSpec(direction=SortDirection.DESC))

        state = await session.dispatch(ApplyFilter(filters=descending))
        assert api.list_calls() == [(1015, 10)]
        assert ids(state) == list(range(1025, 1015, -1))

        await session.dispatch(LoadMore(key=state.load_more_key))
        assert api.list_calls() == [(1015, 10), (1005, 10)]


class TestNameSort:
    @pytest.mark.asyncio
    async def test_name_sort_loads_the_catalog_and_windows_output(self):
        session, api = make_session(count=25)
        await session.start()
        by_name = FilterSpec(sort=SortSpec(field=SortField.NAME))

        state = await session.dispatch(ApplyFilter(filters=by_name))

        assert state.record_count == 25
        assert (0, 25) in api.list_calls()
        assert len(state.items) == 10
        names = [r.name for r in state.display]
        assert names == sorted(names)
        assert [r.name for r in state.items] == names[:10]

        state = await session.dispatch(LoadMore(key=state.load_more_key))
        assert len(state.items) == 20
        state = await session.dispatch(LoadMore(key=state.load_more_key))
        assert len(state.items) == 25

    @pytest.mark.asyncio
    async def test_scrolling_name_sort_does_not_fetch(self):
        session, api = make_session(count=25)
        state = await session.dispatch(
            ApplyFilter(filters=FilterSpec(sort=SortSpec(field=SortField.NAME)))
        )
        api.requests.clear()

        await session.dispatch(LoadMore(key=state.load_more_key))

        assert api.requests == []


class TestFilters:
    @pytest.mark.asyncio
    async def test_type_filter_loads_the_whole_catalog_first(self):
        session, api = make_session(count=30)
        await session.start()

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(types=["flying"])))

        assert state.record_count == 30
        # flying: index 2 in the type table, plus every fifth id
        assert ids(state) == [2, 5, 10, 15, 20, 25, 30]

    @pytest.mark.asyncio
    async def test_generation_and_game_filters_combine(self):
        session, _ = make_session(count=30)

        state = await session.dispatch(
            ApplyFilter(filters=FilterSpec(generations=[2], games=["red"]))
        )

        assert ids(state) == list(range(11, 16))

    @pytest.mark.asyncio
    async def test_empty_filter_result_has_a_message(self):
        session, _ = make_session(count=30)

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(generations=[9])))

        assert state.items == []
        assert not state.search_not_found
        assert state.message == "No Pokemon found matching your filters"

    @pytest.mark.asyncio
    async def test_filtered_mode_ignores_load_more(self):
        session, api = make_session(count=30)
        state = await session.dispatch(ApplyFilter(filters=FilterSpec(types=["fire"])))
        calls = len(api.requests)

        await session.dispatch(LoadMore(key=state.load_more_key))

        assert len(api.requests) == calls

    @pytest.mark.asyncio
    async def test_reset_clears_the_store_and_reloads_first_page(self):
        session, api = make_session(count=30)
        await session.dispatch(ApplyFilter(filters=FilterSpec(types=["fire"])))

        state = await session.dispatch(ResetFilters())

        assert state.filters == FilterSpec()
        assert state.record_count == 10
        assert ids(state) == list(range(1, 11))
        assert api.list_calls()[-1] == (0, 10)


class TestSearch:
    """Search-only mode and direct upstream lookups."""

    @pytest.mark.asyncio
    async def test_search_for_unloaded_name_fetches_it(self):
        session, api = make_session(count=30)
        await session.start()

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(search_term="Pikachu")))

        assert ids(state) == [25]
        assert not state.search_loading
        assert not state.search_not_found
        assert "pikachu" in api.detail_calls()

    @pytest.mark.asyncio
    async def test_search_for_loaded_record_does_not_fetch(self):
        session, api = make_session(count=30)
        await session.start()
        api.requests.clear()

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(search_term="4")))

        assert ids(state) == [4]
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_search_not_found_upstream(self):
        session, _ = make_session(count=30)
        await session.start()

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(search_term="missingno")))

        assert state.items == []
        assert state.search_not_found
        assert not state.search_loading
        assert "missingno" in state.message

    @pytest.mark.asyncio
    async def test_search_transport_failure_clears_loading(self):
        session, _ = make_session(count=30, unreachable={25})

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(search_term="pikachu")))

        assert state.items == []
        assert not state.search_loading
        assert not state.search_not_found

    @pytest.mark.asyncio
    async def test_substring_matches_are_kept_when_exact_name_is_unknown(self):
        session, _ = make_session(count=30)
        await session.start()

        state = await session.dispatch(ApplyFilter(filters=FilterSpec(search_term="mon000")))

        assert ids(state) == [8, 9, 10]
        assert not state.search_not_found


class TestSelect:
    @pytest.mark.asyncio
    async def test_select_fetches_missing_record(self):
        session, _ = make_session(count=30)
        await session.start()

        state = await session.dispatch(SelectPokemon(pokemon_id=133))

        assert state.selected_id == 133
        assert 133 in [r.id for r in state.display]

    @pytest.mark.asyncio
    async def test_select_unknown_id_changes_nothing(self):
        session, _ = make_session(count=30)
        await session.start()

        state = await session.dispatch(SelectPokemon(pokemon_id=999))

        assert state.selected_id is None
        assert state.record_count == 10


class TestDetailCommands:
    @pytest.mark.asyncio
    async def test_open_navigate_close(self):
        session, _ = make_session(count=30)
        await session.start()

        state = await session.dispatch(OpenDetail(pokemon_id=3))
        assert state.detail.is_open
        assert state.detail.current.name == "venusaur"

        state = await session.dispatch(NavigateDetail(direction=1))
        assert state.detail.current.id == 4
        # navigation never touches the list
        assert state.record_count == 10

        state = await session.dispatch(KeyPress(key="ArrowLeft"))
        assert state.detail.current.id == 3

        state = await session.dispatch(CloseDetail())
        assert not state.detail.is_open
        assert state.detail.current.id == 3

    @pytest.mark.asyncio
    async def test_open_unknown_id_sets_error(self):
        session, _ = make_session(count=30)

        state = await session.dispatch(OpenDetail(pokemon_id=999))

        assert not state.detail.is_open
        assert state.detail.error == "Pokemon #999 not found"

    @pytest.mark.asyncio
    async def test_open_unknown_id_keeps_the_open_view(self):
        session, _ = make_session(count=30)
        await session.dispatch(OpenDetail(pokemon_id=3))

        state = await session.dispatch(OpenDetail(pokemon_id=999))

        assert state.detail.is_open
        assert state.detail.opened_with.id == 3
        assert state.detail.current.id == 3
        assert state.detail.error == "Pokemon #999 not found"

    @pytest.mark.asyncio
    async def test_request_page_after_catalog_end_is_a_no_op(self):
        session, api = make_session(count=10)
        await session.start()

        state = await session.dispatch(RequestPage())

        assert api.list_calls() == [(0, 10)]
        assert state.forward_cursor == 10
