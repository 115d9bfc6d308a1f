"""
Built-in Cards - The standard monster roster, spells and traps.

Monsters are plain stat blocks. Spells and traps are built from the
effect descriptor factories in card_schema.templates.

Card structure:
- Monsters: level (1-12), attribute, ATK, DEF
- Spells: ordered effect descriptors
- Traps: a trigger plus ordered effect descriptors
"""

from __future__ import annotations

from ..card_schema.templates import (
    Attribute,
    CardCatalog,
    CardKind,
    CardTemplate,
    TriggerKind,
    boost_atk_all_allies,
    damage_all_monsters,
    damage_enemy,
    damage_one_monster,
    damage_player,
    destroy_attacker,
    destroy_one_monster,
    heal_player,
    negate_attack,
    reflect_damage,
    summon_token,
)


def monster(template_id: str, name: str, level: int, attribute: Attribute, atk: int, defense: int) -> CardTemplate:
    return CardTemplate(
        template_id=template_id,
        name=name,
        kind=CardKind.MONSTER,
        level=level,
        attribute=attribute,
        atk=atk,
        defense=defense,
    )


# ============================================================================
# Monsters
# ============================================================================

# Low level (1-4): normal summon
FLAME_WARRIOR = monster("flame_warrior", "Flame Warrior", 4, Attribute.FIRE, 1500, 1200)
WATER_ELEMENTAL = monster("water_elemental", "Water Elemental", 3, Attribute.WATER, 1200, 1400)
WIND_SPIRIT = monster("wind_spirit", "Wind Spirit", 2, Attribute.WIND, 1000, 800)
EARTH_GUARDIAN = monster("earth_guardian", "Earth Guardian", 4, Attribute.EARTH, 1400, 1600)
LIGHT_KNIGHT = monster("light_knight", "Light Knight", 4, Attribute.LIGHT, 1600, 1000)
SHADOW_STALKER = monster("shadow_stalker", "Shadow Stalker", 3, Attribute.DARK, 1300, 900)
BLAZE_SORCERER = monster("blaze_sorcerer", "Blaze Sorcerer", 4, Attribute.FIRE, 1700, 800)
CHILD_OF_THE_SEA = monster("child_of_the_sea", "Child of the Sea", 2, Attribute.WATER, 800, 1200)

# High level (5-6): one tribute
DARK_KNIGHT = monster("dark_knight", "Dark Knight", 5, Attribute.DARK, 2000, 1500)
FLAME_DRAGON = monster("flame_dragon", "Flame Dragon", 5, Attribute.FIRE, 2100, 1200)
FROST_QUEEN = monster("frost_queen", "Frost Queen", 6, Attribute.WATER, 2300, 1800)

# Top level (7+): two tributes
HOLY_ANGEL = monster("holy_angel", "Holy Angel", 7, Attribute.LIGHT, 2800, 2000)
DARK_DEMON_DRAGON = monster("dark_demon_dragon", "Dark Demon Dragon", 8, Attribute.DARK, 3000, 2500)


# ============================================================================
# Spells
# ============================================================================

FIREBALL = CardTemplate(
    template_id="spell_fireball",
    name="Fireball",
    kind=CardKind.SPELL,
    effects=(damage_player(500),),
    description="Deal 500 damage to the enemy player.",
)

LIGHTNING = CardTemplate(
    template_id="spell_lightning",
    name="Lightning",
    kind=CardKind.SPELL,
    effects=(damage_one_monster(800),),
    description="Deal 800 damage to one enemy monster.",
)

METEOR = CardTemplate(
    template_id="spell_meteor",
    name="Meteor Shower",
    kind=CardKind.SPELL,
    effects=(damage_all_monsters(400),),
    description="Deal 400 damage to every enemy monster.",
)

HEAL = CardTemplate(
    template_id="spell_heal",
    name="Healing Light",
    kind=CardKind.SPELL,
    effects=(heal_player(1000),),
    description="Recover 1000 life points.",
)

POWER_BOOST = CardTemplate(
    template_id="spell_power_boost",
    name="Power Boost",
    kind=CardKind.SPELL,
    effects=(boost_atk_all_allies(500),),
    description="Your monsters gain 500 ATK.",
)

DARK_HOLE = CardTemplate(
    template_id="spell_dark_hole",
    name="Dark Hole",
    kind=CardKind.SPELL,
    effects=(destroy_one_monster(),),
    description="Destroy one enemy monster.",
)

DOUBLE_DAMAGE = CardTemplate(
    template_id="spell_double_damage",
    name="Flame Burst",
    kind=CardKind.SPELL,
    effects=(damage_player(300), damage_one_monster(300)),
    description="Deal 300 damage to the enemy player and 300 to one enemy monster.",
)


# ============================================================================
# Traps
# ============================================================================

MIRROR_FORCE = CardTemplate(
    template_id="trap_mirror_force",
    name="Holy Barrier",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_ATTACK,
    effects=(destroy_attacker(),),
    description="When an enemy attacks, destroy the attacker.",
)

MAGIC_CYLINDER = CardTemplate(
    template_id="trap_magic_cylinder",
    name="Magic Cylinder",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_ATTACK,
    effects=(negate_attack(), reflect_damage(100)),
    description="When an enemy attacks, negate it and inflict the attacker's ATK to its owner.",
)

TRAP_HOLE = CardTemplate(
    template_id="trap_trap_hole",
    name="Pitfall",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_SUMMON,
    effects=(destroy_attacker(atk_threshold=1000),),
    description="When an enemy summons a monster with 1000 or more ATK, destroy it.",
)

NEGATE_ATTACK = CardTemplate(
    template_id="trap_negate_attack",
    name="Negate Attack",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_ATTACK,
    effects=(negate_attack(),),
    description="When an enemy attacks, negate the attack.",
)

DAMAGE_WALL = CardTemplate(
    template_id="trap_damage_wall",
    name="Damage Wall",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_DAMAGE,
    effects=(damage_enemy(500),),
    description="When you take damage, deal 500 damage to the enemy player.",
)

STONE_WALL = CardTemplate(
    template_id="trap_stone_wall",
    name="Stone Wall",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_ATTACK,
    effects=(summon_token(0, 1500),),
    description="When an enemy attacks, summon a 0/1500 wall token in defense position.",
)

AMBUSH = CardTemplate(
    template_id="trap_ambush",
    name="Ambush",
    kind=CardKind.TRAP,
    trigger=TriggerKind.ON_ENEMY_TURN_START,
    effects=(damage_enemy(300),),
    description="When the enemy's turn starts, deal 300 damage to the enemy player.",
)


MONSTERS = [
    FLAME_WARRIOR,
    WATER_ELEMENTAL,
    WIND_SPIRIT,
    EARTH_GUARDIAN,
    LIGHT_KNIGHT,
    SHADOW_STALKER,
    BLAZE_SORCERER,
    CHILD_OF_THE_SEA,
    DARK_KNIGHT,
    FLAME_DRAGON,
    FROST_QUEEN,
    HOLY_ANGEL,
    DARK_DEMON_DRAGON,
]

SPELLS = [FIREBALL, LIGHTNING, METEOR, HEAL, POWER_BOOST, DARK_HOLE, DOUBLE_DAMAGE]

TRAPS = [MIRROR_FORCE, MAGIC_CYLINDER, TRAP_HOLE, NEGATE_ATTACK, DAMAGE_WALL, STONE_WALL, AMBUSH]

ALL_CARDS = MONSTERS + SPELLS + TRAPS


def builtin_catalog() -> CardCatalog:
    """A fresh catalog holding every built-in card."""
    return CardCatalog.from_templates(ALL_CARDS)


def get_card_by_id(template_id: str) -> CardTemplate | None:
    """Look up a built-in card by ID."""
    for card in ALL_CARDS:
        if card.template_id == template_id:
            return card
    return None
