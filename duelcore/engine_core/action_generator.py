"""
Action Generator - Generates all legal actions from a match state.

The action generator is used by:
1. Driver policies to enumerate possible moves
2. Front ends to gate their buttons
3. Validation (is this action in legal_actions?)

Generated actions carry every payload field (slots, tributes, targets),
so each one can be applied as-is.
"""

from __future__ import annotations
from dataclasses import dataclass
from itertools import combinations

from ..card_schema.templates import CardCatalog
from .state import MatchState, SideId, Phase, Position, MONSTER_SLOTS, SPELL_TRAP_SLOTS
from .action import Action
from .turns import MAIN_PHASES


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the current match state.

    Ordering is stable: draw, summons, sets, casts, position changes,
    attacks, and advance_phase last.
    """
    catalog: CardCatalog

    def generate(self, state: MatchState, side: SideId | None = None) -> list[Action]:
        """
        Generate all legal actions for a side.

        side defaults to whoever may act now: the responder of an open
        trap window, otherwise the active side.
        """
        if state.terminal:
            return []

        window = state.pending_window
        if window is not None:
            if side is not None and side is not window.responder:
                return []
            actions = [Action.activate_trap(slot, side=window.responder) for slot in window.eligible_slots]
            actions.append(Action.decline_traps(side=window.responder))
            return actions

        if side is not None and side is not state.active:
            return []
        side = state.active

        actions: list[Action] = []
        if state.phase is Phase.DRAW and state.side(side).draw_pending:
            actions.append(Action.draw(side=side))
        if state.phase in MAIN_PHASES:
            actions.extend(self._generate_summon_actions(state, side))
            actions.extend(self._generate_set_actions(state, side))
            actions.extend(self._generate_cast_actions(state, side))
            actions.extend(self._generate_toggle_actions(state, side))
        if state.phase is Phase.BATTLE:
            actions.extend(self._generate_attack_actions(state, side))
        actions.append(Action.advance_phase(side=side))
        return actions

    def _generate_summon_actions(self, state: MatchState, side_id: SideId) -> list[Action]:
        side = state.side(side_id)
        empty = [i for i in range(MONSTER_SLOTS) if side.monsters[i] is None]
        occupied = side.occupied_monster_slots()
        actions = []
        for hand_idx, card in enumerate(side.hand):
            template = self.catalog.get(card.template_id)
            if not template.is_monster:
                continue
            required = template.tributes_required
            if required == 0:
                if not side.normal_summon_used:
                    actions.extend(Action.normal_summon(hand_idx, slot, side=side_id) for slot in empty)
                continue
            for tributes in combinations(occupied, required):
                for slot in sorted(set(empty) | set(tributes)):
                    actions.append(Action.tribute_summon(hand_idx, slot, list(tributes), side=side_id))
        return actions

    def _generate_set_actions(self, state: MatchState, side_id: SideId) -> list[Action]:
        side = state.side(side_id)
        empty = [i for i in range(SPELL_TRAP_SLOTS) if side.spell_traps[i] is None]
        actions = []
        for hand_idx, card in enumerate(side.hand):
            template = self.catalog.get(card.template_id)
            if template.is_spell or template.is_trap:
                actions.extend(Action.set_card(hand_idx, slot, side=side_id) for slot in empty)
        return actions

    def _generate_cast_actions(self, state: MatchState, side_id: SideId) -> list[Action]:
        side = state.side(side_id)
        actions = []
        for hand_idx, card in enumerate(side.hand):
            if self.catalog.get(card.template_id).is_spell:
                actions.append(Action.cast_spell(hand_idx=hand_idx, side=side_id))
        for slot, set_card in enumerate(side.spell_traps):
            if set_card is not None and self.catalog.get(set_card.card.template_id).is_spell:
                actions.append(Action.cast_spell(slot=slot, side=side_id))
        return actions

    def _generate_toggle_actions(self, state: MatchState, side_id: SideId) -> list[Action]:
        side = state.side(side_id)
        return [
            Action.toggle_position(slot, side=side_id)
            for slot, monster in enumerate(side.monsters)
            if monster is not None
            and not monster.position_changed_this_turn
            and not monster.attacked_this_turn
        ]

    def _generate_attack_actions(self, state: MatchState, side_id: SideId) -> list[Action]:
        side = state.side(side_id)
        defender = state.side(side_id.opponent)
        targets = defender.occupied_monster_slots()
        actions = []
        for slot, monster in enumerate(side.monsters):
            if monster is None or monster.position is not Position.ATTACK:
                continue
            if monster.attacked_this_turn or monster.position_changed_this_turn:
                continue
            if targets:
                actions.extend(Action.declare_attack(slot, target, side=side_id) for target in targets)
            else:
                actions.append(Action.declare_attack(slot, None, side=side_id))
        return actions


def legal_actions(catalog: CardCatalog, state: MatchState, side: SideId | None = None) -> list[Action]:
    """Convenience function to get legal actions."""
    return ActionGenerator(catalog).generate(state, side)
