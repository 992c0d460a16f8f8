"""Tests for the thin PokeAPI helpers and their error taxonomy."""

import httpx
import pytest

from fake_pokeapi import FakePokeAPI
from pokedex.errors import NotFoundError, TransportError
from pokedex.pokeapi_client import (
    fetch_evolution_chain,
    fetch_pokemon_details,
    fetch_pokemon_list,
    fetch_species,
    get_json,
)


class TestFetchPokemonList:
    @pytest.mark.asyncio
    async def test_passes_limit_and_offset(self, fake_api, client):
        data = await fetch_pokemon_list(client, limit=5, offset=10)

        assert data["count"] == fake_api.count
        assert [r["name"] for r in data["results"]] == [fake_api.name_for(i) for i in range(11, 16)]
        assert fake_api.list_calls() == [(10, 5)]


class TestFetchPokemonDetails:
    @pytest.mark.asyncio
    async def test_by_id(self, client):
        data = await fetch_pokemon_details(client, 4)
        assert data["name"] == "charmander"

    @pytest.mark.asyncio
    async def test_name_is_lowercased(self, fake_api, client):
        data = await fetch_pokemon_details(client, "  PIKACHU ")
        assert data["id"] == 25
        assert fake_api.detail_calls() == ["pikachu"]

    @pytest.mark.asyncio
    async def test_unknown_name_is_not_found(self, client):
        with pytest.raises(NotFoundError) as exc_info:
            await fetch_pokemon_details(client, "missingno")
        assert exc_info.value.query == "missingno"

    @pytest.mark.asyncio
    async def test_server_error_is_transport_error(self):
        api = FakePokeAPI(failing={3})
        with pytest.raises(TransportError) as exc_info:
            await fetch_pokemon_details(api.client(), 3)
        assert "HTTP 500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self):
        api = FakePokeAPI(unreachable={3})
        with pytest.raises(TransportError) as exc_info:
            await fetch_pokemon_details(api.client(), 3)
        assert not isinstance(exc_info.value, NotFoundError)


class TestGetJson:
    @pytest.mark.asyncio
    async def test_invalid_json_is_transport_error(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        )
        with pytest.raises(TransportError) as exc_info:
            await get_json(client, "https://pokeapi.co/api/v2/pokemon/1")
        assert "invalid JSON" in str(exc_info.value)


class TestSpeciesAndChain:
    @pytest.mark.asyncio
    async def test_species(self, client):
        data = await fetch_species(client, 1)
        assert data["generation"]["url"].endswith("/generation/1/")

    @pytest.mark.asyncio
    async def test_evolution_chain(self, client):
        data = await fetch_evolution_chain(client, "https://pokeapi.co/api/v2/evolution-chain/1/")
        assert data["chain"]["species"]["name"] == "bulbasaur"
        assert data["chain"]["evolves_to"][0]["species"]["name"] == "ivysaur"
