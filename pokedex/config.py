import logging
import os

# Upstream API root
POKEAPI_BASE_URL = os.getenv("POKEAPI_BASE_URL", "https://pokeapi.co/api/v2").rstrip("/")

# Page size for id-ordered pagination, and the step of the name-sorted window
PAGE_LIMIT = int(os.getenv("POKEDEX_PAGE_LIMIT", "10"))

# Highest national dex id shown by the catalog
MAX_POKEMON = int(os.getenv("POKEDEX_MAX_POKEMON", "1025"))

# How many records are looked up concurrently per wave of a full-catalog fetch
BATCH_SIZE = int(os.getenv("POKEDEX_BATCH_SIZE", "10"))

REQUEST_TIMEOUT = float(os.getenv("POKEDEX_REQUEST_TIMEOUT", "10.0"))

LOG_LEVEL = os.getenv("POKEDEX_LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once for the application process.

    Safe to call more than once; basicConfig is a no-op when handlers
    are already installed.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
