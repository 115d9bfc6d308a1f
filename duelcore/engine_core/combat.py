"""
Combat Resolver - Terrain-modified stats and attack resolution.

All arithmetic is integer: a percentage modifier is applied as
floor(base * (100 + percent) / 100), then flat boosts are added and the
result is clamped at 0. Each side's terrain only affects its own monsters.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..card_schema.templates import Attribute, CardCatalog, EffectKind
from .state import MatchState, SideId, Terrain, Position, BoardMonster, BoostStat, CardInstance
from .events import EventType, emit
from .board import change_life, destroy_monster


@dataclass(frozen=True)
class TerrainModifier:
    atk_percent: int = 0
    def_percent: int = 0


NO_MODIFIER = TerrainModifier()

# Terrain -> attribute -> modifier. Missing entries are NO_MODIFIER.
TERRAIN_TABLE: dict[Terrain, dict[Attribute, TerrainModifier]] = {
    Terrain.PLAIN: {},
    Terrain.VOLCANO: {
        Attribute.FIRE: TerrainModifier(30, 0),
        Attribute.WATER: TerrainModifier(-10, 0),
    },
    Terrain.GLACIER: {
        Attribute.WATER: TerrainModifier(0, 20),
        Attribute.FIRE: TerrainModifier(0, -10),
    },
    Terrain.OCEAN: {
        Attribute.WATER: TerrainModifier(10, 10),
        Attribute.FIRE: TerrainModifier(-20, 0),
    },
    Terrain.FOREST: {
        Attribute.WIND: TerrainModifier(10, 0),
        Attribute.EARTH: TerrainModifier(0, 10),
    },
    Terrain.MOUNTAIN: {
        Attribute.EARTH: TerrainModifier(0, 25),
        Attribute.WIND: TerrainModifier(0, 10),
    },
    Terrain.DESERT: {
        Attribute.FIRE: TerrainModifier(10, 0),
        Attribute.WATER: TerrainModifier(-20, -10),
        Attribute.EARTH: TerrainModifier(0, 10),
    },
    Terrain.SWAMP: {
        Attribute.DARK: TerrainModifier(10, 0),
        Attribute.WATER: TerrainModifier(0, 10),
        Attribute.FIRE: TerrainModifier(-10, 0),
    },
    Terrain.WASTELAND: {
        Attribute.DARK: TerrainModifier(20, 0),
        Attribute.LIGHT: TerrainModifier(-10, -10),
    },
}


@dataclass(frozen=True)
class MonsterStats:
    """Printed stats of a monster, before terrain and boosts."""
    level: int
    attribute: Attribute
    atk: int
    defense: int


def terrain_modifier(terrain: Terrain, attribute: Attribute) -> TerrainModifier:
    return TERRAIN_TABLE.get(terrain, {}).get(attribute, NO_MODIFIER)


def apply_percent(base: int, percent: int) -> int:
    """floor(base * (100 + percent) / 100), never below 0."""
    return max(0, (base * (100 + percent)) // 100)


def monster_stats(catalog: CardCatalog, card: CardInstance) -> MonsterStats:
    """
    Base stats of a card on the field.

    A token's template_id names the trap that created it; its stats come
    from that trap's summon_token descriptor.
    """
    template = catalog.get(card.template_id)
    if card.is_token:
        for effect in template.effects:
            if effect.kind == EffectKind.SUMMON_TOKEN:
                return MonsterStats(level=0, attribute=Attribute.NONE, atk=effect.atk, defense=effect.defense)
        return MonsterStats(level=0, attribute=Attribute.NONE, atk=0, defense=0)
    return MonsterStats(
        level=template.level,
        attribute=template.attribute,
        atk=template.atk,
        defense=template.defense,
    )


def effective_atk(state: MatchState, catalog: CardCatalog, side_id: SideId, monster: BoardMonster) -> int:
    stats = monster_stats(catalog, monster.card)
    modifier = terrain_modifier(state.terrain_of(side_id), stats.attribute)
    return max(0, apply_percent(stats.atk, modifier.atk_percent) + monster.boost_total(BoostStat.ATK))


def effective_def(state: MatchState, catalog: CardCatalog, side_id: SideId, monster: BoardMonster) -> int:
    stats = monster_stats(catalog, monster.card)
    modifier = terrain_modifier(state.terrain_of(side_id), stats.attribute)
    return max(0, apply_percent(stats.defense, modifier.def_percent) + monster.boost_total(BoostStat.DEF))


def resolve_attack(
    state: MatchState,
    catalog: CardCatalog,
    attacker_side_id: SideId,
    attacker_slot: int,
    target_slot: int | None,
) -> None:
    """
    Resolve a declared attack on the current board.

    The attacker must be in attack position. target_slot None is a
    direct attack.
    """
    attacker_side = state.side(attacker_side_id)
    defender_id = attacker_side_id.opponent
    defender_side = state.side(defender_id)
    attacker = attacker_side.monsters[attacker_slot]
    atk = effective_atk(state, catalog, attacker_side_id, attacker)

    attacker_side.attacked_slots.add(attacker_slot)

    if target_slot is None:
        emit(
            state,
            EventType.ATTACKED,
            attacker_side_id,
            attacker_slot=attacker_slot,
            target_slot=None,
            attacker_atk=atk,
            direct=True,
        )
        attacker.attacked_this_turn = True
        change_life(state, defender_id, -atk, cause="battle")
        return

    target = defender_side.monsters[target_slot]
    if target.position is Position.ATTACK:
        target_value = effective_atk(state, catalog, defender_id, target)
    else:
        target_value = effective_def(state, catalog, defender_id, target)
    diff = atk - target_value

    emit(
        state,
        EventType.ATTACKED,
        attacker_side_id,
        attacker_slot=attacker_slot,
        target_slot=target_slot,
        attacker_atk=atk,
        target_position=target.position.value,
        target_value=target_value,
        direct=False,
    )

    attacker_destroyed = False
    if target.position is Position.ATTACK:
        if diff > 0:
            destroy_monster(state, defender_id, target_slot, cause="battle")
            change_life(state, defender_id, -diff, cause="battle")
        elif diff < 0:
            destroy_monster(state, attacker_side_id, attacker_slot, cause="battle")
            attacker_destroyed = True
            change_life(state, attacker_side_id, diff, cause="battle")
        else:
            destroy_monster(state, defender_id, target_slot, cause="battle")
            destroy_monster(state, attacker_side_id, attacker_slot, cause="battle")
            attacker_destroyed = True
    else:
        if diff > 0:
            destroy_monster(state, defender_id, target_slot, cause="battle")
            if state.config.piercing:
                change_life(state, defender_id, -diff, cause="piercing")
        elif diff < 0:
            change_life(state, attacker_side_id, diff, cause="defense")

    if not attacker_destroyed:
        attacker.attacked_this_turn = True
