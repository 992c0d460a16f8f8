from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from pokedex.config import POKEAPI_BASE_URL
from pokedex.constants import (
    DEFAULT_COLOR,
    MAX_BASE_STAT,
    POKEMON_COLORS,
    image_url_for,
    weaknesses_for,
)
from pokedex.utils import id_from_url


class Pokemon(BaseModel):
    """
    One catalog record, as kept in the record store.

    - id: national dex id, the identity key
    - name: lowercase API name, unique in practice
    - types: type names in source order
    - generation: 1..9, from the species sub-resource
    - games: release titles from the detail's game_indices

    A record is only "complete" once both the detail and the species
    payloads have been merged, i.e. generation is known.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    name: str
    url: str
    types: list[str] = Field(default_factory=list)
    generation: int | None = None
    games: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.generation is not None

    @property
    def image_url(self) -> str:
        return image_url_for(self.id)

    @classmethod
    def from_api(cls, detail: dict, species: dict) -> "Pokemon":
        """
        Build a complete record from a /pokemon/{id} payload and its
        /pokemon-species/{id} payload.

        Raises KeyError / ValueError on malformed payloads.
        """
        pokemon_id = detail["id"]
        return cls(
            id=pokemon_id,
            name=detail["name"],
            url=f"{POKEAPI_BASE_URL}/pokemon/{pokemon_id}/",
            types=[t["type"]["name"] for t in detail.get("types", [])],
            generation=id_from_url(species["generation"]["url"]),
            games=[g["version"]["name"] for g in detail.get("game_indices", [])],
        )


class SortField(str, Enum):
    ID = "id"
    NAME = "name"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.ID
    direction: SortDirection = SortDirection.ASC

    @property
    def sign(self) -> int:
        return 1 if self.direction == SortDirection.ASC else -1


class FilterSpec(BaseModel):
    """
    The user's search / filter / sort selection.

    Fields combine with AND; selections inside one field combine with OR.
    """
    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    types: list[str] = Field(default_factory=list)
    generations: list[int] = Field(default_factory=list)
    games: list[str] = Field(default_factory=list)
    sort: SortSpec = Field(default_factory=SortSpec)

    @property
    def has_search(self) -> bool:
        return bool(self.search_term.strip())

    @property
    def has_catalog_filters(self) -> bool:
        """True when a type, generation or game selection is present."""
        return bool(self.types or self.generations or self.games)

    @property
    def is_active(self) -> bool:
        return self.has_search or self.has_catalog_filters

    @property
    def is_search_only(self) -> bool:
        return self.has_search and not self.has_catalog_filters


class Stat(BaseModel):
    name: str
    value: int

    @computed_field
    @property
    def percent(self) -> float:
        return self.value / MAX_BASE_STAT * 100


class Ability(BaseModel):
    name: str
    hidden: bool = False

    @computed_field
    @property
    def label(self) -> str:
        return self.name.replace("-", " ")


class EvolutionStage(BaseModel):
    id: int
    name: str
    image_url: str


class PokemonDetail(BaseModel):
    """
    Working record of the detail view.

    Seeded from a store record; the remaining fields are filled lazily
    from the detail, species and evolution-chain resources and are never
    written back to the store.
    """

    id: int
    name: str
    types: list[str] = Field(default_factory=list)
    image_url: str
    generation: int | None = None
    stats: list[Stat] = Field(default_factory=list)
    abilities: list[Ability] = Field(default_factory=list)
    height_m: float | None = None
    weight_kg: float | None = None
    cry_url: str | None = None
    description: str = ""
    category: str = ""
    habitat: str = ""
    color: str = ""
    color_key: str = DEFAULT_COLOR
    evolution_chain: list[EvolutionStage] = Field(default_factory=list)
    evolution_chain_url: str | None = Field(default=None, exclude=True)
    weaknesses: list[str] = Field(default_factory=list)

    @classmethod
    def seed(cls, record: Pokemon) -> "PokemonDetail":
        return cls(
            id=record.id,
            name=record.name,
            types=list(record.types),
            image_url=record.image_url,
            generation=record.generation,
            weaknesses=weaknesses_for(record.types),
        )

    @classmethod
    def from_detail(cls, detail: dict) -> "PokemonDetail":
        """Build from a /pokemon/{id} payload; species fields stay empty."""
        types = [t["type"]["name"] for t in detail.get("types", [])]
        height = detail.get("height")
        weight = detail.get("weight")
        cries = detail.get("cries") or {}
        return cls(
            id=detail["id"],
            name=detail["name"],
            types=types,
            image_url=image_url_for(detail["id"]),
            stats=[
                Stat(name=s["stat"]["name"], value=s["base_stat"])
                for s in detail.get("stats", [])
            ],
            abilities=[
                Ability(name=a["ability"]["name"], hidden=a.get("is_hidden", False))
                for a in detail.get("abilities", [])
            ],
            height_m=height / 10 if height is not None else None,
            weight_kg=weight / 10 if weight is not None else None,
            cry_url=cries.get("latest"),
            weaknesses=weaknesses_for(types),
        )

    def with_species(self, species: dict) -> "PokemonDetail":
        """Return a copy enriched with description, category, habitat, color and generation."""
        color = (species.get("color") or {}).get("name", "")
        generation = self.generation
        if species.get("generation"):
            generation = id_from_url(species["generation"]["url"])
        habitat = (species.get("habitat") or {}).get("name") or "Unknown"
        return self.model_copy(
            update={
                "description": english_description(species),
                "category": english_genus(species),
                "habitat": habitat,
                "color": color,
                "color_key": POKEMON_COLORS.get(color, DEFAULT_COLOR),
                "generation": generation,
                "evolution_chain_url": (species.get("evolution_chain") or {}).get("url"),
            }
        )


def english_description(species: dict) -> str:
    entries = species.get("flavor_text_entries")
    if not entries:
        return "No description available."

    for entry in entries:
        if entry.get("language", {}).get("name") == "en":
            return entry["flavor_text"].replace("\n", " ").replace("\f", " ")

    return "No English description available."


def english_genus(species: dict) -> str:
    for genus in species.get("genera") or []:
        if genus.get("language", {}).get("name") == "en":
            return genus["genus"]
    return ""


class ItemFailure(BaseModel):
    # the summary reference (url, id or name) that failed
    ref: str
    reason: str


class BatchResult(BaseModel):
    """
    Outcome of a fan-out fetch: the records that resolved and one
    ItemFailure per item that did not. Failed items are never retried.
    """

    records: list[Pokemon] = Field(default_factory=list)
    failures: list[ItemFailure] = Field(default_factory=list)
    # set when the summary list itself could not be fetched
    page_error: str | None = None

    @property
    def fetched(self) -> int:
        return len(self.records)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures) and bool(self.records)
