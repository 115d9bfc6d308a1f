"""
Trap Pipeline - Trap windows, eligibility and trap effects.

A trap window is raised by a trigger (attack declared, monster summoned,
damage taken, enemy turn started). The responding side may activate any
eligible face-down trap it set on an earlier turn. Under the prompt policy
the window pauses the match until the responder activates or declines;
under the auto policy every eligible trap fires in slot order.

After an activation the remaining eligible traps are offered again, as
long as the paused action is still pending (not negated and its subject
still on the field).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging

from ..card_schema.templates import CardCatalog, CardTemplate, EffectDescriptor, EffectKind, TriggerKind
from ..config import TrapPolicy
from .state import MatchState, SideId, TrapWindow, BoardMonster, CardInstance, Position, SummonKind
from .events import EventType, emit
from .board import change_life, destroy_monster, find_monster
from .combat import effective_atk, monster_stats

logger = logging.getLogger(__name__)


def eligible_trap_slots(state: MatchState, catalog: CardCatalog, window: TrapWindow) -> list[int]:
    """Slots of the responder's traps that may be activated in this window."""
    side = state.side(window.responder)
    slots = []
    for slot, set_card in enumerate(side.spell_traps):
        if set_card is None or not set_card.face_down or set_card.activated:
            continue
        template = catalog.get(set_card.card.template_id)
        if not template.is_trap:
            continue
        if set_card.set_on_serial >= state.turn_serial:
            continue
        if template.trigger is not TriggerKind.MANUAL and template.trigger is not window.trigger:
            continue
        if window.trigger is TriggerKind.ON_SUMMON and not _meets_threshold(state, catalog, template, window):
            continue
        slots.append(slot)
    return slots


def _meets_threshold(state: MatchState, catalog: CardCatalog, template: CardTemplate, window: TrapWindow) -> bool:
    """Thresholded destroy_attacker traps only answer strong enough monsters."""
    subject = _subject(state, window)
    if subject is None:
        return True
    base_atk = monster_stats(catalog, subject.card).atk
    for effect in template.effects:
        if effect.kind == EffectKind.DESTROY_ATTACKER and effect.atk_threshold is not None:
            if base_atk < effect.atk_threshold:
                return False
    return True


def _subject(state: MatchState, window: TrapWindow) -> BoardMonster | None:
    if not find_monster(state, window.subject_side, window.subject_slot, window.subject_instance_id):
        return None
    return state.side(window.subject_side).monsters[window.subject_slot]


def action_pending(state: MatchState, window: TrapWindow) -> bool:
    """Whether the action a window paused can still go ahead."""
    if window.negated:
        return False
    if window.subject_instance_id is not None:
        return _subject(state, window) is not None
    return True


@dataclass
class TrapPipeline:
    """
    Opens, answers and closes trap windows.

    Stateless - the open window lives in MatchState.pending_window.
    """
    catalog: CardCatalog

    def open_window(self, state: MatchState, window: TrapWindow) -> bool:
        """
        Offer a window to its responder.

        Returns True when the window stays open awaiting a response,
        False when there was nothing to offer or the auto policy answered it.
        """
        window.eligible_slots = eligible_trap_slots(state, self.catalog, window)
        if not window.eligible_slots:
            return False

        if state.config.trap_policy is TrapPolicy.AUTO:
            self._auto_activate(state, window)
            return False

        state.pending_window = window
        self._offer(state, window)
        return True

    def respond_activate(self, state: MatchState, slot: int) -> bool:
        """
        Activate one eligible trap in the open window.

        Returns True when the window is still open afterwards.
        """
        window = state.pending_window
        self.activate(state, window, slot)
        if state.terminal:
            return False
        if action_pending(state, window):
            remaining = eligible_trap_slots(state, self.catalog, window)
            if remaining:
                window.eligible_slots = remaining
                self._offer(state, window)
                return True
        state.pending_window = None
        return False

    def decline(self, state: MatchState) -> None:
        window = state.pending_window
        emit(state, EventType.TRAP_DECLINED, window.responder, trigger=window.trigger.value)
        state.pending_window = None

    def _offer(self, state: MatchState, window: TrapWindow) -> None:
        emit(
            state,
            EventType.TRAP_OFFERED,
            window.responder,
            trigger=window.trigger.value,
            slots=list(window.eligible_slots),
        )

    def _auto_activate(self, state: MatchState, window: TrapWindow) -> None:
        while window.eligible_slots and not state.terminal:
            self.activate(state, window, window.eligible_slots[0])
            if not action_pending(state, window):
                break
            window.eligible_slots = eligible_trap_slots(state, self.catalog, window)

    def activate(self, state: MatchState, window: TrapWindow, slot: int) -> None:
        """Flip a trap, apply its effects in order and send it to the graveyard."""
        owner = window.responder
        side = state.side(owner)
        set_card = side.spell_traps[slot]
        template = self.catalog.get(set_card.card.template_id)
        set_card.face_down = False
        set_card.activated = True
        logger.debug("Side %s activates %s in %s window", owner.value, template.template_id, window.trigger.value)
        emit(
            state,
            EventType.TRAP_ACTIVATED,
            owner,
            slot=slot,
            instance_id=set_card.card.instance_id,
            template_id=template.template_id,
            trigger=window.trigger.value,
        )

        for effect in template.effects:
            if state.terminal:
                break
            handler = self._get_handler(effect.kind)
            if handler is None:
                raise ValueError(f"Not a trap effect: {effect.kind.value}")
            handler(state, window, effect, template.template_id)

        side.spell_traps[slot] = None
        side.graveyard.append(set_card.card)

    def _get_handler(self, kind: EffectKind) -> Callable | None:
        handlers: dict[EffectKind, Callable] = {
            EffectKind.NEGATE_ATTACK: self._effect_negate_attack,
            EffectKind.DESTROY_ATTACKER: self._effect_destroy_attacker,
            EffectKind.REFLECT_DAMAGE: self._effect_reflect_damage,
            EffectKind.DAMAGE_ENEMY: self._effect_damage_enemy,
            EffectKind.SUMMON_TOKEN: self._effect_summon_token,
        }
        return handlers.get(kind)

    def _negate(self, state: MatchState, window: TrapWindow) -> None:
        if window.trigger is not TriggerKind.ON_ATTACK or window.negated:
            return
        window.negated = True
        emit(
            state,
            EventType.TRAP_NEGATED_ATTACK,
            window.responder,
            attacker_slot=window.subject_slot,
            target_slot=window.target_slot,
        )

    def _effect_negate_attack(self, state: MatchState, window: TrapWindow, effect: EffectDescriptor, source: str) -> None:
        self._negate(state, window)

    def _effect_destroy_attacker(
        self,
        state: MatchState,
        window: TrapWindow,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        """Destroy the attacker or the freshly summoned monster; on attacks this also negates."""
        subject = _subject(state, window)
        if subject is None:
            return
        if effect.atk_threshold is not None:
            if monster_stats(self.catalog, subject.card).atk < effect.atk_threshold:
                return
        destroy_monster(state, window.subject_side, window.subject_slot, cause=source)
        self._negate(state, window)

    def _effect_reflect_damage(
        self,
        state: MatchState,
        window: TrapWindow,
        effect: EffectDescriptor,
        source: str,
    ) -> None:
        if window.trigger is not TriggerKind.ON_ATTACK:
            return
        subject = _subject(state, window)
        if subject is None:
            return
        atk = effective_atk(state, self.catalog, window.subject_side, subject)
        amount = (atk * effect.percent) // 100
        change_life(state, window.subject_side, -amount, cause=source)

    def _effect_damage_enemy(self, state: MatchState, window: TrapWindow, effect: EffectDescriptor, source: str) -> None:
        change_life(state, window.responder.opponent, -effect.amount, cause=source)

    def _effect_summon_token(self, state: MatchState, window: TrapWindow, effect: EffectDescriptor, source: str) -> None:
        """Place a token in the owner's first empty monster slot, in defense position."""
        owner: SideId = window.responder
        side = state.side(owner)
        slot = side.first_empty_monster_slot()
        if slot is None:
            return
        card = CardInstance(instance_id=state.allocate_instance_id(), template_id=source, is_token=True)
        side.monsters[slot] = BoardMonster(
            card=card,
            position=Position.DEFENSE,
            current_hp=effect.atk,
            summon_kind=SummonKind.TOKEN,
        )
        side.tokens_created += 1
        emit(
            state,
            EventType.SUMMONED,
            owner,
            slot=slot,
            instance_id=card.instance_id,
            template_id=source,
            summon_kind=SummonKind.TOKEN.value,
            position=Position.DEFENSE.value,
        )
