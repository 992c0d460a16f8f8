def parse_limit_offset(
    limit_str: str | None,
    offset_str: str | None,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """
    Parse and validate limit/offset query parameters.

    Missing values fall back to default_limit / 0.
    Raises ValueError when a value is not an integer, when limit is
    outside 1..max_limit, or when offset is negative.
    """
    limit = default_limit if limit_str in (None, "") else int(limit_str)
    offset = 0 if offset_str in (None, "") else int(offset_str)

    if limit < 1 or limit > max_limit:
        raise ValueError(f"limit must be between 1 and {max_limit}")
    if offset < 0:
        raise ValueError("offset must be >= 0")

    return limit, offset


def id_from_url(url: str) -> int:
    """
    Extract the numeric id encoded as the last path segment of a resource URL.

    e.g. "https://pokeapi.co/api/v2/pokemon/25/" -> 25

    Raises ValueError if the last segment is not an integer.
    """
    segments = [s for s in url.split("/") if s]
    if not segments:
        raise ValueError(f"No path segments in url: {url!r}")
    return int(segments[-1])


def parse_numeric_term(term: str) -> int | None:
    """Return the term as an int when it is purely numeric, else None."""
    term = term.strip()
    if term.isdigit():
        return int(term)
    return None


def normalize_query(id_or_name: str | int) -> str:
    """Lookup key for a direct fetch: ids as-is, names lowercased and trimmed."""
    if isinstance(id_or_name, int):
        return str(id_or_name)
    return id_or_name.strip().lower()
