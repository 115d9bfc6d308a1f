"""
Starter decks.

The starter deck holds two copies of every monster up to level 6 and one
of each level 7+ monster, one copy of each core spell with Fireball and
Healing Light doubled, and one copy of each core trap: 37 cards.
"""

from __future__ import annotations

from .cards import MONSTERS, FIREBALL, LIGHTNING, METEOR, HEAL, POWER_BOOST, DARK_HOLE
from .cards import MIRROR_FORCE, MAGIC_CYLINDER, TRAP_HOLE, NEGATE_ATTACK, DAMAGE_WALL

STARTER_SPELLS = [FIREBALL, LIGHTNING, METEOR, HEAL, POWER_BOOST, DARK_HOLE]
DOUBLED_SPELLS = {FIREBALL.template_id, HEAL.template_id}
STARTER_TRAPS = [MIRROR_FORCE, MAGIC_CYLINDER, TRAP_HOLE, NEGATE_ATTACK, DAMAGE_WALL]


def starter_deck() -> list[str]:
    """Template ids of the starter deck, unshuffled."""
    deck: list[str] = []
    for card in MONSTERS:
        copies = 1 if card.level >= 7 else 2
        deck.extend([card.template_id] * copies)
    for card in STARTER_SPELLS:
        copies = 2 if card.template_id in DOUBLED_SPELLS else 1
        deck.extend([card.template_id] * copies)
    deck.extend(card.template_id for card in STARTER_TRAPS)
    return deck
