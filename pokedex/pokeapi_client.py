import logging

import httpx

from pokedex.config import POKEAPI_BASE_URL, REQUEST_TIMEOUT
from pokedex.errors import NotFoundError, TransportError
from pokedex.utils import normalize_query

logger = logging.getLogger(__name__)

# Statuses that mean "no such record" for a direct id/name lookup
NOT_FOUND_STATUSES = (400, 404)


async def get_json(client: httpx.AsyncClient, url: str, params: dict | None = None) -> dict:
    """
    GET a PokeAPI resource and return the parsed JSON.

    Raises:
        TransportError: network failure, non-2xx status or invalid JSON.
    """
    logger.debug("GET %s %s", url, params or "")
    try:
        resp = await client.get(url, params=params, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransportError(url, f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise TransportError(url, f"{type(e).__name__}: {e}") from e

    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(url, "invalid JSON body") from e


async def fetch_pokemon_list(client: httpx.AsyncClient, limit: int = 20, offset: int = 0) -> dict:
    """
    Fetch a page of Pokemon summaries.

    Calls:
        GET {base}/pokemon?limit={limit}&offset={offset}

    Returns:
        {"count": N, "results": [{"name": ..., "url": ...}, ...]}
    """
    url = f"{POKEAPI_BASE_URL}/pokemon"
    return await get_json(client, url, params={"limit": limit, "offset": offset})


async def fetch_pokemon_details(client: httpx.AsyncClient, id_or_name: str | int) -> dict:
    """
    Fetch the detail resource of one Pokemon by id or (case-insensitive) name.

    Raises:
        NotFoundError: upstream has no such Pokemon.
        TransportError: any other failure.
    """
    query = normalize_query(id_or_name)
    url = f"{POKEAPI_BASE_URL}/pokemon/{query}"

    try:
        return await get_json(client, url)
    except TransportError as e:
        cause = e.__cause__
        if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code in NOT_FOUND_STATUSES:
            raise NotFoundError(id_or_name) from e
        raise


async def fetch_species(client: httpx.AsyncClient, pokemon_id: int) -> dict:
    """
    Fetch the species resource (generation, habitat, color, flavor text,
    genera, evolution chain reference) for a Pokemon id.
    """
    url = f"{POKEAPI_BASE_URL}/pokemon-species/{pokemon_id}"
    return await get_json(client, url)


async def fetch_species_by_url(client: httpx.AsyncClient, species_url: str) -> dict:
    """Fetch a species resource from the absolute URL a payload references."""
    return await get_json(client, species_url)


async def fetch_evolution_chain(client: httpx.AsyncClient, chain_url: str) -> dict:
    """
    Fetch an evolution chain.

    Returns the nested structure {"chain": {"species": {...}, "evolves_to": [...]}}.
    """
    return await get_json(client, chain_url)
