class PokedexError(Exception):
    """Base class for every error raised by the pokedex package."""
    pass


class NotFoundError(PokedexError):
    """
    Upstream has no record for a direct id/name lookup.

    Not a hard failure: callers surface it as a visible "no result" state.
    """

    def __init__(self, query: str | int):
        self.query = query
        super().__init__(f"Pokemon not found: {query}")


class TransportError(PokedexError):
    """Network, status or payload failure while talking to the upstream API."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
