"""
Card Templates - Immutable card definitions and the effect descriptor DSL.

Templates describe WHAT a card is; the engine creates CardInstance objects
that reference a template by id. Effects are:
- Tagged: each descriptor carries an EffectKind, dispatched by the engine
- Closed: new effects are added by extending EffectKind
- Ordered: a card's descriptors are applied in list order
- Deterministic: no descriptor consults randomness

Key design decisions:
- Targets are relative to the card's controller (ENEMY / ALLY)
- Monster selection is always "first occupied slot"
- Boost duration None means permanent
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class CardKind(Enum):
    """Top-level card kinds."""
    MONSTER = "monster"
    SPELL = "spell"
    TRAP = "trap"


class Attribute(Enum):
    """Elemental attribute of a monster (used for terrain affinity)."""
    FIRE = "fire"
    WATER = "water"
    WIND = "wind"
    EARTH = "earth"
    LIGHT = "light"
    DARK = "dark"
    NONE = "none"


class TriggerKind(Enum):
    """When a set trap becomes eligible for activation."""
    ON_ATTACK = "on_attack"
    ON_SUMMON = "on_summon"
    ON_DAMAGE = "on_damage"
    ON_ENEMY_TURN_START = "on_enemy_turn_start"
    MANUAL = "manual"


class EffectKind(Enum):
    """Closed set of effect descriptors."""
    # Spell effects
    DAMAGE_PLAYER = "damage_player"
    DAMAGE_ONE_MONSTER = "damage_one_monster"
    DAMAGE_ALL_MONSTERS = "damage_all_monsters"
    HEAL_PLAYER = "heal_player"
    BOOST_ATK_ALL_ALLIES = "boost_atk_all_allies"
    BOOST_DEF_ALL_ALLIES = "boost_def_all_allies"
    DESTROY_ONE_MONSTER = "destroy_one_monster"

    # Trap effects
    NEGATE_ATTACK = "negate_attack"
    DESTROY_ATTACKER = "destroy_attacker"
    REFLECT_DAMAGE = "reflect_damage"
    DAMAGE_ENEMY = "damage_enemy"
    SUMMON_TOKEN = "summon_token"


SPELL_EFFECTS = frozenset({
    EffectKind.DAMAGE_PLAYER,
    EffectKind.DAMAGE_ONE_MONSTER,
    EffectKind.DAMAGE_ALL_MONSTERS,
    EffectKind.HEAL_PLAYER,
    EffectKind.BOOST_ATK_ALL_ALLIES,
    EffectKind.BOOST_DEF_ALL_ALLIES,
    EffectKind.DESTROY_ONE_MONSTER,
})

TRAP_EFFECTS = frozenset({
    EffectKind.NEGATE_ATTACK,
    EffectKind.DESTROY_ATTACKER,
    EffectKind.REFLECT_DAMAGE,
    EffectKind.DAMAGE_ENEMY,
    EffectKind.SUMMON_TOKEN,
})


class TargetSide(Enum):
    """Target of an effect, relative to the card's controller."""
    ENEMY = "enemy"
    ALLY = "ally"


class Selection(Enum):
    """How a single monster is picked."""
    FIRST_OCCUPIED = "first_occupied"


@dataclass(frozen=True)
class EffectDescriptor:
    """
    A single effect in a spell or trap.

    Which fields matter depends on kind:
    - amount: damage, heal, boost, DAMAGE_ENEMY
    - target: DAMAGE_* and DESTROY_ONE_MONSTER
    - duration: boosts (None = permanent, N = expires after N end phases)
    - atk_threshold: DESTROY_ATTACKER on summon triggers
    - percent: REFLECT_DAMAGE
    - atk / defense: SUMMON_TOKEN stats
    """
    kind: EffectKind
    amount: int = 0
    target: TargetSide = TargetSide.ENEMY
    selection: Selection = Selection.FIRST_OCCUPIED
    duration: int | None = None
    atk_threshold: int | None = None
    percent: int = 100
    atk: int = 0
    defense: int = 0

    def to_dict(self) -> dict:
        """Stable dict form used by catalog listings."""
        return {
            "kind": self.kind.value,
            "amount": self.amount,
            "target": self.target.value,
            "selection": self.selection.value,
            "duration": self.duration,
            "atk_threshold": self.atk_threshold,
            "percent": self.percent,
            "atk": self.atk,
            "defense": self.defense,
        }


@dataclass(frozen=True)
class CardTemplate:
    """
    Immutable definition of a card.

    Monster fields (level, attribute, atk, defense) are ignored for
    spells and traps; trigger is only meaningful for traps.
    """
    template_id: str
    name: str
    kind: CardKind
    level: int = 0
    attribute: Attribute = Attribute.NONE
    atk: int = 0
    defense: int = 0
    effects: tuple[EffectDescriptor, ...] = ()
    trigger: TriggerKind | None = None
    description: str = ""

    @property
    def is_monster(self) -> bool:
        return self.kind == CardKind.MONSTER

    @property
    def is_spell(self) -> bool:
        return self.kind == CardKind.SPELL

    @property
    def is_trap(self) -> bool:
        return self.kind == CardKind.TRAP

    @property
    def tributes_required(self) -> int:
        """Tributes needed to summon this monster (0 for level <= 4)."""
        if self.level >= 7:
            return 2
        if self.level >= 5:
            return 1
        return 0


class UnknownCardError(KeyError):
    """Raised when a template id is not in the catalog."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Unknown card template: {template_id}")


@dataclass
class CardCatalog:
    """
    Lookup table of card templates.

    The engine never mutates a catalog; a match holds a reference to the
    catalog its decks were built from.
    """
    templates: dict[str, CardTemplate] = field(default_factory=dict)

    @classmethod
    def from_templates(cls, templates: list[CardTemplate]) -> CardCatalog:
        catalog = cls()
        for template in templates:
            catalog.add(template)
        return catalog

    def add(self, template: CardTemplate) -> None:
        if template.template_id in self.templates:
            raise ValueError(f"Duplicate card template: {template.template_id}")
        self.templates[template.template_id] = template

    def get(self, template_id: str) -> CardTemplate:
        """Get a template, raising UnknownCardError if missing."""
        template = self.templates.get(template_id)
        if template is None:
            raise UnknownCardError(template_id)
        return template

    def __contains__(self, template_id: str) -> bool:
        return template_id in self.templates

    def __len__(self) -> int:
        return len(self.templates)

    def all(self) -> list[CardTemplate]:
        """All templates in insertion order."""
        return list(self.templates.values())


# ============================================================================
# Factory functions for effect descriptors
# ============================================================================

def damage_player(amount: int, target: TargetSide = TargetSide.ENEMY) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.DAMAGE_PLAYER, amount=amount, target=target)


def damage_one_monster(amount: int, target: TargetSide = TargetSide.ENEMY) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.DAMAGE_ONE_MONSTER, amount=amount, target=target)


def damage_all_monsters(amount: int, target: TargetSide = TargetSide.ENEMY) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.DAMAGE_ALL_MONSTERS, amount=amount, target=target)


def heal_player(amount: int) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.HEAL_PLAYER, amount=amount, target=TargetSide.ALLY)


def boost_atk_all_allies(amount: int, duration: int | None = None) -> EffectDescriptor:
    """Create an ATK boost; duration None is permanent."""
    return EffectDescriptor(
        kind=EffectKind.BOOST_ATK_ALL_ALLIES,
        amount=amount,
        target=TargetSide.ALLY,
        duration=duration,
    )


def boost_def_all_allies(amount: int, duration: int | None = None) -> EffectDescriptor:
    """Create a DEF boost; duration None is permanent."""
    return EffectDescriptor(
        kind=EffectKind.BOOST_DEF_ALL_ALLIES,
        amount=amount,
        target=TargetSide.ALLY,
        duration=duration,
    )


def destroy_one_monster() -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.DESTROY_ONE_MONSTER, target=TargetSide.ENEMY)


def negate_attack() -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.NEGATE_ATTACK)


def destroy_attacker(atk_threshold: int | None = None) -> EffectDescriptor:
    """Destroy the attacking (or freshly summoned) monster."""
    return EffectDescriptor(kind=EffectKind.DESTROY_ATTACKER, atk_threshold=atk_threshold)


def reflect_damage(percent: int = 100) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.REFLECT_DAMAGE, percent=percent)


def damage_enemy(amount: int) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.DAMAGE_ENEMY, amount=amount)


def summon_token(atk: int, defense: int) -> EffectDescriptor:
    return EffectDescriptor(kind=EffectKind.SUMMON_TOKEN, atk=atk, defense=defense)
