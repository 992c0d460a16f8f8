import pytest

from pokedex.utils import id_from_url, normalize_query, parse_limit_offset, parse_numeric_term


class TestParseLimitOffset:
    def test_defaults(self):
        assert parse_limit_offset(None, None, default_limit=10, max_limit=100) == (10, 0)

    def test_explicit_values(self):
        assert parse_limit_offset("25", "50", default_limit=10, max_limit=100) == (25, 50)

    @pytest.mark.parametrize(
        "limit, offset",
        [("0", "0"), ("101", "0"), ("abc", "0"), ("10", "-1"), ("10", "x")],
    )
    def test_invalid_values_raise(self, limit, offset):
        with pytest.raises(ValueError):
            parse_limit_offset(limit, offset, default_limit=10, max_limit=100)


class TestIdFromUrl:
    def test_trailing_slash(self):
        assert id_from_url("https://pokeapi.co/api/v2/pokemon/25/") == 25

    def test_without_trailing_slash(self):
        assert id_from_url("https://pokeapi.co/api/v2/generation/3") == 3

    def test_non_numeric_segment(self):
        with pytest.raises(ValueError):
            id_from_url("https://pokeapi.co/api/v2/pokemon/pikachu/")


def test_parse_numeric_term():
    assert parse_numeric_term(" 25 ") == 25
    assert parse_numeric_term("pika") is None
    assert parse_numeric_term("-3") is None


def test_normalize_query():
    assert normalize_query("  PikaChu ") == "pikachu"
    assert normalize_query(25) == "25"
