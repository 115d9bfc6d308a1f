"""
Effect Resolver - Spell effect pipeline.

A spell's descriptors are resolved one at a time, in list order, each
seeing the board the previous one left behind. Resolution stops as soon
as the match becomes terminal.

Targets are relative to the caster: ENEMY is the caster's opponent,
ALLY the caster. Single-monster effects always pick the first occupied
slot of the target side and do nothing on an empty board.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from ..card_schema.templates import CardCatalog, CardTemplate, EffectDescriptor, EffectKind, TargetSide
from .state import MatchState, SideId, Boost, BoostStat
from .events import EventType, emit
from .board import change_life, destroy_monster


def resolve_target(caster: SideId, target: TargetSide) -> SideId:
    return caster if target is TargetSide.ALLY else caster.opponent


def damage_monster(state: MatchState, side_id: SideId, slot: int, amount: int, source: str) -> None:
    """Lower a monster's current_hp; at 0 or below it is destroyed."""
    monster = state.side(side_id).monsters[slot]
    if monster is None:
        return
    monster.current_hp -= amount
    emit(
        state,
        EventType.MONSTER_DAMAGED,
        side_id,
        slot=slot,
        instance_id=monster.card.instance_id,
        amount=amount,
        current_hp=monster.current_hp,
    )
    if monster.current_hp <= 0:
        destroy_monster(state, side_id, slot, cause=source)


@dataclass
class EffectResolver:
    """
    Resolves spell descriptors against a match state.

    Stateless - all state is in MatchState.
    """
    catalog: CardCatalog

    def resolve_spell(self, state: MatchState, caster: SideId, template: CardTemplate) -> None:
        """Apply every descriptor of a spell, in order."""
        for index, effect in enumerate(template.effects):
            if state.terminal:
                break
            handler = self._get_handler(effect.kind)
            if handler is None:
                raise ValueError(f"Not a spell effect: {effect.kind.value}")
            emit(
                state,
                EventType.EFFECT_APPLIED,
                caster,
                source=template.template_id,
                index=index,
                kind=effect.kind.value,
            )
            handler(state, caster, effect, template.template_id)

    def _get_handler(self, kind: EffectKind) -> Callable | None:
        handlers: dict[EffectKind, Callable] = {
            EffectKind.DAMAGE_PLAYER: self._effect_damage_player,
            EffectKind.DAMAGE_ONE_MONSTER: self._effect_damage_one_monster,
            EffectKind.DAMAGE_ALL_MONSTERS: self._effect_damage_all_monsters,
            EffectKind.HEAL_PLAYER: self._effect_heal_player,
            EffectKind.BOOST_ATK_ALL_ALLIES: self._effect_boost_atk,
            EffectKind.BOOST_DEF_ALL_ALLIES: self._effect_boost_def,
            EffectKind.DESTROY_ONE_MONSTER: self._effect_destroy_one_monster,
        }
        return handlers.get(kind)

    def _effect_damage_player(self, state: MatchState, caster: SideId, effect: EffectDescriptor, source: str) -> None:
        change_life(state, resolve_target(caster, effect.target), -effect.amount, cause=source)

    def _effect_damage_one_monster(
        self,
        state: MatchState,
        caster: SideId,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        target_id = resolve_target(caster, effect.target)
        slot = state.side(target_id).first_occupied_monster_slot()
        if slot is not None:
            damage_monster(state, target_id, slot, effect.amount, source)

    def _effect_damage_all_monsters(
        self,
        state: MatchState,
        caster: SideId,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        target_id = resolve_target(caster, effect.target)
        for slot in state.side(target_id).occupied_monster_slots():
            damage_monster(state, target_id, slot, effect.amount, source)

    def _effect_heal_player(self, state: MatchState, caster: SideId, effect: EffectDescriptor, source: str) -> None:
        """Heal the caster; capped at starting life unless the cap is disabled."""
        side = state.side(caster)
        amount = effect.amount
        if state.config.heal_cap_at_starting_life:
            amount = max(0, min(amount, state.config.starting_life - side.life))
        if amount:
            change_life(state, caster, amount, cause=source)

    def _effect_boost_atk(self, state: MatchState, caster: SideId, effect: EffectDescriptor, source: str) -> None:
        self._boost_allies(state, caster, BoostStat.ATK, effect, source)

    def _effect_boost_def(self, state: MatchState, caster: SideId, effect: EffectDescriptor, source: str) -> None:
        self._boost_allies(state, caster, BoostStat.DEF, effect, source)

    def _boost_allies(
        self,
        state: MatchState,
        caster: SideId,
        stat: BoostStat,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        for monster in state.side(caster).monsters:
            if monster is not None:
                monster.boosts.append(
                    Boost(stat=stat, amount=effect.amount, remaining=effect.duration, source=source)
                )

    def _effect_destroy_one_monster(
        self,
        state: MatchState,
        caster: SideId,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        target_id = resolve_target(caster, effect.target)
        slot = state.side(target_id).first_occupied_monster_slot()
        if slot is not None:
            destroy_monster(state, target_id, slot, cause=source)
