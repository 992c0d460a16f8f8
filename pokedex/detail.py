import logging

import httpx
from pydantic import BaseModel, ConfigDict

from pokedex.constants import image_url_for
from pokedex.errors import NotFoundError, PokedexError, TransportError
from pokedex.models import EvolutionStage, Pokemon, PokemonDetail
from pokedex.pokeapi_client import (
    fetch_evolution_chain,
    fetch_pokemon_details,
    fetch_species_by_url,
)

logger = logging.getLogger(__name__)

PAYLOAD_ERRORS = (PokedexError, KeyError, ValueError, TypeError)

KEY_PREVIOUS = "ArrowLeft"
KEY_NEXT = "ArrowRight"
KEY_CLOSE = "Escape"


class DetailState(BaseModel):
    """
    Snapshot of the detail view.

    opened_with is the record the view was opened on; current is the
    working record, which in-view navigation replaces.
    """
    model_config = ConfigDict(frozen=True)

    is_open: bool = False
    opened_with: PokemonDetail | None = None
    current: PokemonDetail | None = None
    detail_loading: bool = False
    navigation_loading: bool = False
    # the chain resolves after the rest of the detail is shown
    evolution_loading: bool = False
    error: str | None = None

    @property
    def can_go_previous(self) -> bool:
        return self.current is not None and self.current.id > 1


async def resolve_evolution_chain(client: httpx.AsyncClient, chain_url: str) -> list[EvolutionStage]:
    """
    Walk an evolution chain from its base form.

    Each stage's species resource is fetched to learn its numeric id.
    Branching chains follow the first listed branch only.
    """
    data = await fetch_evolution_chain(client, chain_url)

    stages: list[EvolutionStage] = []
    node = data["chain"]
    while node:
        species = await fetch_species_by_url(client, node["species"]["url"])
        stages.append(
            EvolutionStage(
                id=species["id"],
                name=node["species"]["name"],
                image_url=image_url_for(species["id"]),
            )
        )
        evolves_to = node.get("evolves_to") or []
        node = evolves_to[0] if evolves_to else None

    return stages


async def load_detail(client: httpx.AsyncClient, id_or_name: int | str) -> PokemonDetail:
    """
    Fetch the detail and species resources for one Pokemon.

    The detail resource is required; species is best effort and leaves
    its fields empty when it fails. The evolution chain is resolved
    separately from `evolution_chain_url`.

    Raises:
        NotFoundError / TransportError from the detail lookup.
    """
    payload = await fetch_pokemon_details(client, id_or_name)
    try:
        detail = PokemonDetail.from_detail(payload)
    except (KeyError, ValueError, TypeError) as e:
        raise TransportError(f"pokemon/{id_or_name}", f"malformed payload: {e}") from e

    try:
        species = await fetch_species_by_url(client, payload["species"]["url"])
        return detail.with_species(species)
    except PAYLOAD_ERRORS as e:
        logger.error("Error fetching species data for #%s: %s", detail.id, e)
        return detail


class DetailController:
    """
    Opens the detail view on a record and moves it to neighbouring ids or
    evolution stages. Fetches go straight to the API; nothing here is
    written to the record store.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.state = DetailState()

    def _set(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)

    async def open(self, record: Pokemon) -> DetailState:
        seed = PokemonDetail.seed(record)
        self._set(is_open=True, opened_with=seed, current=seed, error=None, detail_loading=True)
        detail = None
        try:
            detail = await load_detail(self.client, record.id)
        except PokedexError as e:
            logger.error("Failed to load detail for #%s: %s", record.id, e)
        finally:
            self._set(detail_loading=False)

        if detail is not None:
            self._set(opened_with=detail, current=detail)
            await self._attach_evolution_chain(detail)
        return self.state

    async def navigate(self, direction: int) -> DetailState:
        """Move the working record to id+1 or id-1. Never requests an id below 1."""
        if direction not in (-1, 1):
            raise ValueError("direction must be -1 or 1")

        current = self.state.current
        if not self.state.is_open or current is None:
            return self.state

        target = current.id + direction
        if target < 1:
            return self.state

        return await self._replace_working(target)

    async def jump_to_evolution(self, target_id: int) -> DetailState:
        current = self.state.current
        if not self.state.is_open or current is None or current.id == target_id:
            return self.state
        return await self._replace_working(target_id)

    def fail(self, message: str) -> DetailState:
        """Record a lookup error, leaving whatever is open as it is."""
        self._set(error=message)
        return self.state

    def close(self) -> DetailState:
        """Close the view, discarding in-view navigation."""
        self._set(is_open=False, current=self.state.opened_with, error=None)
        return self.state

    async def handle_key(self, key: str) -> DetailState:
        if key == KEY_PREVIOUS:
            return await self.navigate(-1)
        if key == KEY_NEXT:
            return await self.navigate(1)
        if key == KEY_CLOSE:
            return self.close()
        return self.state

    async def _replace_working(self, pokemon_id: int) -> DetailState:
        # a navigation is already in flight: controls are disabled until it lands
        if self.state.navigation_loading:
            return self.state

        detail = None
        self._set(navigation_loading=True)
        try:
            detail = await load_detail(self.client, pokemon_id)
        except NotFoundError:
            logger.warning("Pokemon #%s not found while navigating", pokemon_id)
            self._set(error=f"Pokemon #{pokemon_id} not found")
        except PokedexError as e:
            logger.error("Failed to navigate to #%s: %s", pokemon_id, e)
        finally:
            self._set(navigation_loading=False)

        if detail is not None:
            self._set(current=detail, error=None)
            await self._attach_evolution_chain(detail)
        return self.state

    async def _attach_evolution_chain(self, detail: PokemonDetail) -> None:
        if not detail.evolution_chain_url:
            return

        self._set(evolution_loading=True)
        try:
            chain = await resolve_evolution_chain(self.client, detail.evolution_chain_url)
        except PAYLOAD_ERRORS as e:
            logger.error("Error fetching evolution chain for #%s: %s", detail.id, e)
            return
        finally:
            self._set(evolution_loading=False)

        # the view may have moved on while the chain was loading
        enriched = detail.model_copy(update={"evolution_chain": chain})
        changes = {}
        if self.state.current is not None and self.state.current.id == detail.id:
            changes["current"] = enriched
        if self.state.opened_with is not None and self.state.opened_with.id == detail.id:
            changes["opened_with"] = enriched
        if changes:
            self._set(**changes)
