"""
Reducer - Applies actions to match state.

The reducer is the single point of state mutation.
All state changes must go through apply().

Design principles:
- Clone-then-mutate: handlers work on a clone returned only on success
- Validates before applying; a rejected action leaves the state untouched
- Returns ActionResult with the new state and the ordered events
- Delegates combat, spells and traps to their own resolvers
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..card_schema.templates import CardCatalog, TriggerKind
from .state import MatchState, SideId, Phase, Position, SummonKind, BoardMonster, SetCard, TrapWindow
from .state import MONSTER_SLOTS, SPELL_TRAP_SLOTS
from .action import Action, ActionType, ActionError, ActionResult
from .events import EventType, emit
from .turns import Permission, WINDOW_ACTIONS, can_perform, advance
from .board import end_match
from .combat import resolve_attack
from .effect_resolver import EffectResolver
from .traps import TrapPipeline, action_pending
from .invariants import InternalInvariantError, check_invariants

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to match state.

    Stateless - all state is in MatchState.
    The catalog provides the card definitions for validation.
    """
    catalog: CardCatalog
    effects: EffectResolver = field(init=False)
    traps: TrapPipeline = field(init=False)

    def __post_init__(self):
        self.effects = EffectResolver(self.catalog)
        self.traps = TrapPipeline(self.catalog)

    def apply(self, state: MatchState, action: Action) -> ActionResult:
        """
        Apply an action to the match state.

        Returns ActionResult with new state or error.
        """
        if state.terminal:
            return ActionResult.failure(ActionError.MATCH_OVER, "Match is over", winner=state.winner)

        side = self.acting_side(state, action)
        rejection = self._validate_action(state, action, side)
        if rejection:
            return rejection

        new_state = state.clone()
        new_state.events = []
        handler = self._get_handler(action.action_type)
        result = handler(new_state, side, action)
        if not result.success:
            logger.debug("Rejected %s for side %s: %s", action.action_type.value, side.value, result.error)
            return result

        self._settle(new_state)

        if new_state.config.check_invariants:
            try:
                check_invariants(new_state, self.catalog)
            except InternalInvariantError as e:
                logger.exception("Invariant violated after %s", action.action_type.value)
                return ActionResult.failure(ActionError.INTERNAL_INVARIANT, str(e))

        logger.debug(
            "Applied %s for side %s (%d events)",
            action.action_type.value,
            side.value,
            len(new_state.events),
        )
        return ActionResult.success_with_state(new_state, list(new_state.events))

    def acting_side(self, state: MatchState, action: Action) -> SideId:
        """The side an action is attributed to when the payload names none."""
        if action.payload.side is not None:
            return action.payload.side
        if state.pending_window is not None and action.action_type in WINDOW_ACTIONS:
            return state.pending_window.responder
        return state.active

    def _validate_action(self, state: MatchState, action: Action, side: SideId) -> ActionResult | None:
        """
        Validate that an action may be taken now by this side.

        Returns a failure result if invalid, None if valid.
        """
        is_window_action = action.action_type in WINDOW_ACTIONS
        if state.pending_window is not None and not is_window_action:
            return ActionResult.failure(ActionError.TRAP_WINDOW_PENDING, "A trap window must be answered first")
        if state.pending_window is None and is_window_action:
            return ActionResult.failure(ActionError.NO_TRAP_WINDOW, "No trap window is open")

        permission = can_perform(state, action.action_type, side)
        if permission is Permission.NOT_ACTIVE_SIDE:
            return ActionResult.failure(ActionError.NOT_ACTIVE_SIDE, f"Side {side.value} may not act now")
        if permission is Permission.WRONG_PHASE:
            return ActionResult.failure(
                ActionError.WRONG_PHASE,
                f"{action.action_type.value} is not allowed in {state.phase.value}",
            )
        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.DRAW: self._handle_draw,
            ActionType.ADVANCE_PHASE: self._handle_advance_phase,
            ActionType.NORMAL_SUMMON: self._handle_normal_summon,
            ActionType.TRIBUTE_SUMMON: self._handle_tribute_summon,
            ActionType.SET_CARD: self._handle_set_card,
            ActionType.CAST_SPELL: self._handle_cast_spell,
            ActionType.TOGGLE_POSITION: self._handle_toggle_position,
            ActionType.DECLARE_ATTACK: self._handle_declare_attack,
            ActionType.ACTIVATE_TRAP: self._handle_activate_trap,
            ActionType.DECLINE_TRAPS: self._handle_decline_traps,
        }
        return handlers[action_type]

    # ------------------------------------------------------------------
    # Turn structure
    # ------------------------------------------------------------------

    def _handle_draw(self, state: MatchState, side: SideId, action: Action) -> ActionResult:
        if not state.side(side).draw_pending:
            return ActionResult.failure(ActionError.NO_DRAW_PENDING, "No draw is owed")
        self.draw(state, side)
        return ActionResult.success_with_state(state)

    def draw(self, state: MatchState, side_id: SideId) -> None:
        """
        Pay an owed draw.

        An empty deck ends the match; a full hand sends the drawn card
        straight to the graveyard.
        """
        side = state.side(side_id)
        side.draw_pending = False
        if not side.deck:
            end_match(state, side_id.opponent, reason="deck_out")
            return

        card = side.deck.pop()
        if len(side.hand) >= state.config.hand_limit:
            side.graveyard.append(card)
            emit(state, EventType.DISCARDED, side_id, instance_id=card.instance_id, template_id=card.template_id)
            return
        side.hand.append(card)
        emit(
            state,
            EventType.DREW,
            side_id,
            instance_id=card.instance_id,
            template_id=card.template_id,
            deck_size=len(side.deck),
        )

    def _handle_advance_phase(self, state: MatchState, side: SideId, action: Action) -> ActionResult:
        if state.phase is Phase.DRAW and state.side(side).draw_pending:
            self.draw(state, side)
            if state.terminal:
                return ActionResult.success_with_state(state)
        advance(state)
        return ActionResult.success_with_state(state)

    # ------------------------------------------------------------------
    # Main phase
    # ------------------------------------------------------------------

    def _handle_normal_summon(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        side = state.side(side_id)
        hand_idx = action.payload.hand_idx
        slot = action.payload.slot

        if not _valid_index(hand_idx, len(side.hand)):
            return ActionResult.failure(ActionError.INVALID_HAND_INDEX, f"No card at hand index {hand_idx}")
        if not _valid_index(slot, MONSTER_SLOTS):
            return ActionResult.failure(ActionError.INVALID_SLOT, f"No monster slot {slot}")
        template = self.catalog.get(side.hand[hand_idx].template_id)
        if not template.is_monster:
            return ActionResult.failure(ActionError.NOT_A_MONSTER, f"{template.name} is not a monster")
        if template.level > 4:
            return ActionResult.failure(
                ActionError.LEVEL_TOO_HIGH,
                f"{template.name} is level {template.level} and needs tributes",
            )
        if side.normal_summon_used:
            return ActionResult.failure(ActionError.NORMAL_SUMMON_ALREADY_USED, "Normal summon already used this turn")
        if side.monsters[slot] is not None:
            return ActionResult.failure(ActionError.SLOT_OCCUPIED, f"Monster slot {slot} is occupied")

        card = side.hand.pop(hand_idx)
        side.monsters[slot] = BoardMonster(
            card=card,
            position=Position.ATTACK,
            current_hp=template.atk,
            summon_kind=SummonKind.NORMAL,
            summoned_this_turn=True,
        )
        side.normal_summon_used = True
        self._summoned(state, side_id, slot, SummonKind.NORMAL)
        return ActionResult.success_with_state(state)

    def _handle_tribute_summon(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        side = state.side(side_id)
        hand_idx = action.payload.hand_idx
        slot = action.payload.slot
        tributes = list(action.payload.tributes or [])

        if not _valid_index(hand_idx, len(side.hand)):
            return ActionResult.failure(ActionError.INVALID_HAND_INDEX, f"No card at hand index {hand_idx}")
        if not _valid_index(slot, MONSTER_SLOTS):
            return ActionResult.failure(ActionError.INVALID_SLOT, f"No monster slot {slot}")
        template = self.catalog.get(side.hand[hand_idx].template_id)
        if not template.is_monster:
            return ActionResult.failure(ActionError.NOT_A_MONSTER, f"{template.name} is not a monster")

        required = template.tributes_required
        if required == 0:
            return ActionResult.failure(ActionError.TRIBUTE_NOT_REQUIRED, f"{template.name} needs no tributes")
        if len(set(tributes)) != len(tributes) or any(
            not _valid_index(t, MONSTER_SLOTS) or side.monsters[t] is None for t in tributes
        ):
            return ActionResult.failure(ActionError.INVALID_TRIBUTES, "Tributes must be distinct occupied slots")
        if len(tributes) < required:
            return ActionResult.failure(
                ActionError.INSUFFICIENT_TRIBUTES,
                f"{template.name} needs {required} tribute(s)",
            )
        if len(tributes) > required:
            return ActionResult.failure(
                ActionError.INVALID_TRIBUTES,
                f"{template.name} needs exactly {required} tribute(s)",
            )
        if side.monsters[slot] is not None and slot not in tributes:
            return ActionResult.failure(ActionError.SLOT_OCCUPIED, f"Monster slot {slot} is occupied")

        card = side.hand.pop(hand_idx)
        for t in tributes:
            tributed = side.monsters[t]
            side.monsters[t] = None
            side.graveyard.append(tributed.card)
            emit(
                state,
                EventType.TRIBUTED,
                side_id,
                slot=t,
                instance_id=tributed.card.instance_id,
                template_id=tributed.card.template_id,
            )

        side.monsters[slot] = BoardMonster(
            card=card,
            position=Position.ATTACK,
            current_hp=template.atk,
            summon_kind=SummonKind.TRIBUTE,
            summoned_this_turn=True,
        )
        self._summoned(state, side_id, slot, SummonKind.TRIBUTE)
        return ActionResult.success_with_state(state)

    def _summoned(self, state: MatchState, side_id: SideId, slot: int, kind: SummonKind) -> None:
        monster = state.side(side_id).monsters[slot]
        emit(
            state,
            EventType.SUMMONED,
            side_id,
            slot=slot,
            instance_id=monster.card.instance_id,
            template_id=monster.card.template_id,
            summon_kind=kind.value,
            position=monster.position.value,
        )
        state.deferred_triggers.append(
            TrapWindow(
                trigger=TriggerKind.ON_SUMMON,
                responder=side_id.opponent,
                subject_side=side_id,
                subject_slot=slot,
                subject_instance_id=monster.card.instance_id,
            )
        )

    def _handle_set_card(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        side = state.side(side_id)
        hand_idx = action.payload.hand_idx
        slot = action.payload.slot

        if not _valid_index(hand_idx, len(side.hand)):
            return ActionResult.failure(ActionError.INVALID_HAND_INDEX, f"No card at hand index {hand_idx}")
        if not _valid_index(slot, SPELL_TRAP_SLOTS):
            return ActionResult.failure(ActionError.INVALID_SLOT, f"No spell/trap slot {slot}")
        template = self.catalog.get(side.hand[hand_idx].template_id)
        if not (template.is_spell or template.is_trap):
            return ActionResult.failure(ActionError.NOT_A_SPELL_OR_TRAP, f"{template.name} cannot be set")
        if side.spell_traps[slot] is not None:
            return ActionResult.failure(ActionError.SLOT_OCCUPIED, f"Spell/trap slot {slot} is occupied")

        card = side.hand.pop(hand_idx)
        side.spell_traps[slot] = SetCard(
            card=card,
            face_down=True,
            set_on_turn=state.turn,
            set_on_serial=state.turn_serial,
        )
        emit(state, EventType.SET, side_id, slot=slot, instance_id=card.instance_id)
        return ActionResult.success_with_state(state)

    def _handle_cast_spell(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        """Cast a spell from hand (hand_idx) or a face-down spell from a spell/trap slot (slot)."""
        side = state.side(side_id)
        hand_idx = action.payload.hand_idx
        slot = action.payload.slot

        if hand_idx is not None:
            if not _valid_index(hand_idx, len(side.hand)):
                return ActionResult.failure(ActionError.INVALID_HAND_INDEX, f"No card at hand index {hand_idx}")
            template = self.catalog.get(side.hand[hand_idx].template_id)
            if not template.is_spell:
                return ActionResult.failure(ActionError.NOT_A_SPELL, f"{template.name} is not a spell")
            card = side.hand.pop(hand_idx)
            origin = "hand"
        elif slot is not None:
            if not _valid_index(slot, SPELL_TRAP_SLOTS):
                return ActionResult.failure(ActionError.INVALID_SLOT, f"No spell/trap slot {slot}")
            set_card = side.spell_traps[slot]
            if set_card is None:
                return ActionResult.failure(ActionError.SLOT_EMPTY, f"Spell/trap slot {slot} is empty")
            template = self.catalog.get(set_card.card.template_id)
            if not template.is_spell:
                return ActionResult.failure(ActionError.NOT_A_SPELL, f"{template.name} is not a spell")
            side.spell_traps[slot] = None
            card = set_card.card
            origin = "field"
        else:
            return ActionResult.failure(ActionError.INVALID_HAND_INDEX, "Name a hand index or a spell/trap slot")

        emit(
            state,
            EventType.SPELL_CAST,
            side_id,
            instance_id=card.instance_id,
            template_id=template.template_id,
            origin=origin,
        )
        self.effects.resolve_spell(state, side_id, template)
        side.graveyard.append(card)
        return ActionResult.success_with_state(state)

    def _handle_toggle_position(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        side = state.side(side_id)
        slot = action.payload.slot

        if not _valid_index(slot, MONSTER_SLOTS):
            return ActionResult.failure(ActionError.INVALID_SLOT, f"No monster slot {slot}")
        monster = side.monsters[slot]
        if monster is None:
            return ActionResult.failure(ActionError.SLOT_EMPTY, f"Monster slot {slot} is empty")
        if monster.position_changed_this_turn:
            return ActionResult.failure(ActionError.POSITION_ALREADY_CHANGED, "Position already changed this turn")
        if monster.attacked_this_turn:
            return ActionResult.failure(ActionError.ATTACKER_ALREADY_ATTACKED, "Monster attacked this turn")

        monster.position = Position.DEFENSE if monster.position is Position.ATTACK else Position.ATTACK
        monster.position_changed_this_turn = True
        emit(
            state,
            EventType.POSITION_CHANGED,
            side_id,
            slot=slot,
            instance_id=monster.card.instance_id,
            position=monster.position.value,
        )
        return ActionResult.success_with_state(state)

    # ------------------------------------------------------------------
    # Battle
    # ------------------------------------------------------------------

    def _handle_declare_attack(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        side = state.side(side_id)
        defender = state.side(side_id.opponent)
        attacker_slot = action.payload.attacker_slot
        target_slot = action.payload.target_slot

        if not _valid_index(attacker_slot, MONSTER_SLOTS):
            return ActionResult.failure(ActionError.INVALID_SLOT, f"No monster slot {attacker_slot}")
        attacker = side.monsters[attacker_slot]
        if attacker is None:
            return ActionResult.failure(ActionError.SLOT_EMPTY, f"Monster slot {attacker_slot} is empty")
        if attacker.position is not Position.ATTACK:
            return ActionResult.failure(ActionError.CANNOT_ATTACK_IN_DEFENSE, "Attacker is in defense position")
        if attacker.attacked_this_turn:
            return ActionResult.failure(ActionError.ATTACKER_ALREADY_ATTACKED, "Monster already attacked this turn")
        if attacker.position_changed_this_turn:
            return ActionResult.failure(ActionError.POSITION_ALREADY_CHANGED, "Monster changed position this turn")

        if target_slot is None:
            if defender.has_monsters:
                return ActionResult.failure(
                    ActionError.DIRECT_ATTACK_BLOCKED,
                    "Direct attacks need an empty enemy monster zone",
                )
        else:
            if not _valid_index(target_slot, MONSTER_SLOTS):
                return ActionResult.failure(ActionError.INVALID_SLOT, f"No monster slot {target_slot}")
            if defender.monsters[target_slot] is None:
                return ActionResult.failure(ActionError.NO_VALID_TARGETS, f"Enemy slot {target_slot} is empty")

        state.deferred_triggers.append(
            TrapWindow(
                trigger=TriggerKind.ON_ATTACK,
                responder=side_id.opponent,
                subject_side=side_id,
                subject_slot=attacker_slot,
                subject_instance_id=attacker.card.instance_id,
                target_slot=target_slot,
            )
        )
        return ActionResult.success_with_state(state)

    def _finish_attack(self, state: MatchState, window: TrapWindow) -> None:
        """Run the combat a closed on_attack window was holding back."""
        if not action_pending(state, window):
            return
        defender = state.side(window.subject_side.opponent)
        if window.target_slot is None:
            if defender.has_monsters:
                return
        elif defender.monsters[window.target_slot] is None:
            return
        resolve_attack(state, self.catalog, window.subject_side, window.subject_slot, window.target_slot)

    # ------------------------------------------------------------------
    # Trap windows
    # ------------------------------------------------------------------

    def _handle_activate_trap(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        window = state.pending_window
        slot = action.payload.slot
        if slot not in window.eligible_slots:
            return ActionResult.failure(ActionError.TRAP_NOT_ELIGIBLE, f"Spell/trap slot {slot} cannot be activated")

        still_open = self.traps.respond_activate(state, slot)
        if not still_open and not state.terminal:
            self._continue(state, window)
        return ActionResult.success_with_state(state)

    def _handle_decline_traps(self, state: MatchState, side_id: SideId, action: Action) -> ActionResult:
        window = state.pending_window
        self.traps.decline(state)
        self._continue(state, window)
        return ActionResult.success_with_state(state)

    def _continue(self, state: MatchState, window: TrapWindow) -> None:
        if window.trigger is TriggerKind.ON_ATTACK:
            self._finish_attack(state, window)

    def _settle(self, state: MatchState) -> None:
        """Open queued trap windows until one pauses the match or the queue is empty."""
        while state.pending_window is None and state.deferred_triggers and not state.terminal:
            window = state.deferred_triggers.pop(0)
            if not self.traps.open_window(state, window):
                self._continue(state, window)


def _valid_index(index: int | None, size: int) -> bool:
    return index is not None and 0 <= index < size


def apply_action(catalog: CardCatalog, state: MatchState, action: Action) -> ActionResult:
    """Convenience function to apply an action."""
    return Reducer(catalog).apply(state, action)
