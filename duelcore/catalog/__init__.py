"""Built-in card library and starter decks."""

from .cards import ALL_CARDS, MONSTERS, SPELLS, TRAPS, builtin_catalog, get_card_by_id
from .decks import starter_deck

__all__ = [
    "ALL_CARDS",
    "MONSTERS",
    "SPELLS",
    "TRAPS",
    "builtin_catalog",
    "get_card_by_id",
    "starter_deck",
]
