import logging

import httpx

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from pokedex.config import configure_logging
from pokedex.constants import GAMES, GENERATIONS, POKEMON_TYPES
from pokedex.models import FilterSpec
from pokedex.schemas import (
    DetailResponse,
    ErrorResponse,
    FilterOptionsResponse,
    HealthResponse,
    PageResponse,
    PokemonItem,
    ViewResponse,
)
from pokedex.state import (
    ApplyFilter,
    CloseDetail,
    JumpToEvolution,
    KeyPress,
    LoadMore,
    NavigateDetail,
    OpenDetail,
    PokedexSession,
    ResetFilters,
    SelectPokemon,
)
from pokedex.utils import parse_limit_offset

logger = logging.getLogger(__name__)

app = FastAPI(title="Pokedex Catalog Service")


@app.on_event("startup")
async def on_startup():
    """
    Application startup hook.

    Creates the shared HTTP client and the catalog session, then loads
    the first page so the list is populated before the first request.
    """
    configure_logging()
    app.state.http_client = httpx.AsyncClient()
    app.state.session = PokedexSession(app.state.http_client)
    state = await app.state.session.start()
    logger.info("Initial load done: %s records", state.record_count)


@app.on_event("shutdown")
async def on_shutdown():
    client: httpx.AsyncClient | None = getattr(app.state, "http_client", None)
    if client is not None:
        await client.aclose()


def get_session(request: Request) -> PokedexSession:
    """
    FastAPI dependency that provides the catalog session.

    Usage in endpoints:
        async def some_endpoint(session: PokedexSession = Depends(get_session)):
            ...
    """
    return request.app.state.session


@app.get("/health", response_model=HealthResponse)
async def health_check(session: PokedexSession = Depends(get_session)):
    """Health endpoint: the app is running and how many records are resident."""
    return HealthResponse(status="ok", records=len(session.store))


@app.get("/filters/options", response_model=FilterOptionsResponse)
async def filter_options():
    """Choices for the type, generation and game filters."""
    return FilterOptionsResponse(types=POKEMON_TYPES, generations=GENERATIONS, games=GAMES)


# ---- list view ----

@app.get("/pokemon", response_model=ViewResponse)
async def get_view(session: PokedexSession = Depends(get_session)):
    """Current list view: visible items, flags, active filters and cursors."""
    return ViewResponse.from_state(session.snapshot())


@app.post("/pokemon/filter", response_model=ViewResponse)
async def apply_filter(
    filters: FilterSpec,
    session: PokedexSession = Depends(get_session),
):
    """
    Apply a search / filter / sort selection.

    A search for a name or id that is not loaded yet is looked up
    directly; type, generation and game filters (and name sorting) first
    load the whole catalog so nothing is filtered out by omission.
    """
    state = await session.dispatch(ApplyFilter(filters=filters))
    return ViewResponse.from_state(state)


@app.post("/pokemon/filter/reset", response_model=ViewResponse)
async def reset_filters(session: PokedexSession = Depends(get_session)):
    """Clear filters and the record store, then reload the first page."""
    state = await session.dispatch(ResetFilters())
    return ViewResponse.from_state(state)


@app.post("/pokemon/load-more", response_model=ViewResponse)
async def load_more(
    key: str | None = None,
    session: PokedexSession = Depends(get_session),
):
    """
    The "last item is visible" trigger.

    Pass the load_more_key from the view the sentinel was rendered in;
    a key from an older view is ignored.
    """
    state = await session.dispatch(LoadMore(key=key))
    return ViewResponse.from_state(state)


@app.post("/pokemon/select/{pokemon_id}", response_model=ViewResponse)
async def select_pokemon(
    pokemon_id: int,
    session: PokedexSession = Depends(get_session),
):
    state = await session.dispatch(SelectPokemon(pokemon_id=pokemon_id))
    return ViewResponse.from_state(state)


@app.get("/pokemon/page", responses={400: {"model": ErrorResponse}})
async def debug_pokemon_page(
    limit: str | None = None,
    offset: str | None = None,
    session: PokedexSession = Depends(get_session),
):
    """
    Debug endpoint: run one page fetch through the coordinator.

    Query params:
      - limit: optional, default 10, must be 1–100
      - offset: optional, default 0, must be >= 0

    On invalid limit/offset:
      - returns 400 with { "error": "Invalid limit or offset parameter" }
    """
    try:
        limit_value, offset_value = parse_limit_offset(
            limit_str=limit,
            offset_str=offset,
            default_limit=10,
            max_limit=100,
        )
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid limit or offset parameter"},
        )

    batch = await session.coordinator.fetch_page(offset_value, limit_value)
    return PageResponse(
        offset=offset_value,
        limit=limit_value,
        fetched=batch.fetched,
        failed=batch.failed,
        partial=batch.is_partial,
        page_error=batch.page_error,
        records=[PokemonItem.from_record(r) for r in batch.records],
    )


# ---- detail view ----

@app.get("/detail", response_model=DetailResponse)
async def get_detail(session: PokedexSession = Depends(get_session)):
    return DetailResponse.from_state(session.snapshot().detail)


@app.post("/detail/open/{pokemon_id}", response_model=DetailResponse)
async def open_detail(
    pokemon_id: int,
    session: PokedexSession = Depends(get_session),
):
    state = await session.dispatch(OpenDetail(pokemon_id=pokemon_id))
    return DetailResponse.from_state(state.detail)


@app.post("/detail/navigate", responses={400: {"model": ErrorResponse}})
async def navigate_detail(
    direction: int,
    session: PokedexSession = Depends(get_session),
):
    """Move to the previous (-1) or next (+1) Pokemon inside the detail view."""
    if direction not in (-1, 1):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid direction parameter"},
        )

    state = await session.dispatch(NavigateDetail(direction=direction))
    return DetailResponse.from_state(state.detail)


@app.post("/detail/evolution/{pokemon_id}", response_model=DetailResponse)
async def jump_to_evolution(
    pokemon_id: int,
    session: PokedexSession = Depends(get_session),
):
    state = await session.dispatch(JumpToEvolution(pokemon_id=pokemon_id))
    return DetailResponse.from_state(state.detail)


@app.post("/detail/close", response_model=DetailResponse)
async def close_detail(session: PokedexSession = Depends(get_session)):
    state = await session.dispatch(CloseDetail())
    return DetailResponse.from_state(state.detail)


@app.post("/detail/key/{key}", response_model=DetailResponse)
async def detail_key(
    key: str,
    session: PokedexSession = Depends(get_session),
):
    """Keyboard binding: ArrowLeft / ArrowRight navigate, Escape closes."""
    state = await session.dispatch(KeyPress(key=key))
    return DetailResponse.from_state(state.detail)
