"""Static catalog tables shared by the filter panel and the detail view."""

IMAGE_URL = "https://assets.pokemon.com/assets/cms2/img/pokedex/full/"

POKEMON_TYPES = [
    "normal",
    "fighting",
    "flying",
    "poison",
    "ground",
    "rock",
    "bug",
    "ghost",
    "steel",
    "fire",
    "water",
    "grass",
    "electric",
    "psychic",
    "ice",
    "dragon",
    "dark",
    "fairy",
]

GENERATIONS = [1, 2, 3, 4, 5, 6, 7, 8, 9]

GAMES = [
    "red",
    "blue",
    "yellow",
    "gold",
    "silver",
    "crystal",
    "ruby",
    "sapphire",
    "emerald",
    "firered",
    "leafgreen",
    "diamond",
    "pearl",
    "platinum",
    "heartgold",
    "soulsilver",
    "black",
    "white",
    "black-2",
    "white-2",
    "x",
    "y",
    "omega-ruby",
    "alpha-sapphire",
    "sun",
    "moon",
    "ultra-sun",
    "ultra-moon",
    "lets-go-pikachu",
    "lets-go-eevee",
    "sword",
    "shield",
    "brilliant-diamond",
    "shining-pearl",
    "legends-arceus",
    "scarlet",
    "violet",
]

TYPE_WEAKNESSES: dict[str, list[str]] = {
    "normal": ["fighting"],
    "fire": ["water", "ground", "rock"],
    "water": ["electric", "grass"],
    "grass": ["fire", "ice", "poison", "flying", "bug"],
    "electric": ["ground"],
    "ice": ["fire", "fighting", "rock", "steel"],
    "fighting": ["flying", "psychic", "fairy"],
    "poison": ["ground", "psychic"],
    "ground": ["water", "grass", "ice"],
    "flying": ["electric", "ice", "rock"],
    "psychic": ["bug", "ghost", "dark"],
    "bug": ["fire", "flying", "rock"],
    "rock": ["water", "grass", "fighting", "ground", "steel"],
    "ghost": ["ghost", "dark"],
    "dragon": ["ice", "dragon", "fairy"],
    "dark": ["fighting", "bug", "fairy"],
    "steel": ["fire", "fighting", "ground"],
    "fairy": ["poison", "steel"],
}

# Species color name -> palette key used by renderers for stat bars
POKEMON_COLORS: dict[str, str] = {
    "black": "gray-800",
    "blue": "blue-600",
    "brown": "amber-700",
    "gray": "gray-500",
    "green": "green-600",
    "pink": "pink-500",
    "purple": "purple-600",
    "red": "red-600",
    "white": "gray-300",
    "yellow": "yellow-500",
}
DEFAULT_COLOR = "blue-600"

# Upper bound of a single base stat, used for stat bar percentages
MAX_BASE_STAT = 255


def image_url_for(pokemon_id: int) -> str:
    """Artwork URL for a dex id, zero-padded to three digits."""
    return f"{IMAGE_URL}{pokemon_id:03d}.png"


def weaknesses_for(types: list[str]) -> list[str]:
    """
    Union of the weaknesses of every given type, deduplicated.

    Order follows first appearance, walking the types in order.
    Unknown types contribute nothing.
    """
    seen: list[str] = []
    for type_name in types:
        for weakness in TYPE_WEAKNESSES.get(type_name, []):
            if weakness not in seen:
                seen.append(weakness)
    return seen
