import pytest

from fake_pokeapi import FakePokeAPI


@pytest.fixture
def fake_api():
    return FakePokeAPI()


@pytest.fixture
def client(fake_api):
    return fake_api.client()
