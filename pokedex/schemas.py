# pokedex/schemas.py
from typing import List, Optional
from pydantic import BaseModel

from pokedex.detail import DetailState
from pokedex.models import FilterSpec, Pokemon, PokemonDetail
from pokedex.state import AppState


# ---- Shared error model (for docs / consistency) ----
class ErrorResponse(BaseModel):
    error: str


# ---- /health ----
class HealthResponse(BaseModel):
    status: str
    records: int


# ---- /filters/options ----
class FilterOptionsResponse(BaseModel):
    types: List[str]
    generations: List[int]
    games: List[str]


# ---- list items ----
class PokemonItem(BaseModel):
    id: int
    name: str
    types: List[str]
    generation: Optional[int]
    games: List[str]
    image_url: str

    @classmethod
    def from_record(cls, record: Pokemon) -> "PokemonItem":
        return cls(
            id=record.id,
            name=record.name,
            types=record.types,
            generation=record.generation,
            games=record.games,
            image_url=record.image_url,
        )


# ---- /pokemon, /pokemon/filter, /pokemon/load-more, ... ----
class ViewResponse(BaseModel):
    items: List[PokemonItem]
    total: int
    record_count: int
    filters: FilterSpec
    loading: bool
    search_loading: bool
    search_not_found: bool
    message: Optional[str]
    load_more_key: str
    forward_cursor: int
    backward_cursor: int
    selected_id: Optional[int]
    last_fetched: int
    last_failed: int

    @classmethod
    def from_state(cls, state: AppState) -> "ViewResponse":
        return cls(
            items=[PokemonItem.from_record(r) for r in state.items],
            total=len(state.display),
            record_count=state.record_count,
            filters=state.filters,
            loading=state.loading,
            search_loading=state.search_loading,
            search_not_found=state.search_not_found,
            message=state.message,
            load_more_key=state.load_more_key,
            forward_cursor=state.forward_cursor,
            backward_cursor=state.backward_cursor,
            selected_id=state.selected_id,
            last_fetched=state.last_fetched,
            last_failed=state.last_failed,
        )


# ---- /pokemon/page ----
class PageResponse(BaseModel):
    offset: int
    limit: int
    fetched: int
    failed: int
    partial: bool
    page_error: Optional[str]
    records: List[PokemonItem]


# ---- /detail ----
class DetailResponse(BaseModel):
    is_open: bool
    current: Optional[PokemonDetail]
    opened_with: Optional[PokemonDetail]
    detail_loading: bool
    navigation_loading: bool
    evolution_loading: bool
    can_go_previous: bool
    error: Optional[str]

    @classmethod
    def from_state(cls, state: DetailState) -> "DetailResponse":
        return cls(
            is_open=state.is_open,
            current=state.current,
            opened_with=state.opened_with,
            detail_loading=state.detail_loading,
            navigation_loading=state.navigation_loading,
            evolution_loading=state.evolution_loading,
            can_go_previous=state.can_go_previous,
            error=state.error,
        )
