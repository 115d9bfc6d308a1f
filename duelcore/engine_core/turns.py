"""
Turn/Phase Controller - Phase cycle, permissions and turn bookkeeping.

The controller never changes phase on its own: only advance_phase moves
the cycle draw -> main1 -> battle -> main2 -> end -> (next side) -> draw.
Drawing is the reducer's job; the controller only records whether a draw
is owed.
"""

from __future__ import annotations
from enum import Enum

from ..card_schema.templates import TriggerKind
from .state import MatchState, Phase, PHASE_ORDER, SideId, TrapWindow
from .action import ActionType
from .events import EventType, emit


class Permission(Enum):
    ALLOWED = "allowed"
    WRONG_PHASE = "wrong_phase"
    NOT_ACTIVE_SIDE = "not_active_side"


MAIN_PHASES = frozenset({Phase.MAIN1, Phase.MAIN2})

ACTION_PHASES: dict[ActionType, frozenset[Phase]] = {
    ActionType.DRAW: frozenset({Phase.DRAW}),
    ActionType.NORMAL_SUMMON: MAIN_PHASES,
    ActionType.TRIBUTE_SUMMON: MAIN_PHASES,
    ActionType.SET_CARD: MAIN_PHASES,
    ActionType.CAST_SPELL: MAIN_PHASES,
    ActionType.TOGGLE_POSITION: MAIN_PHASES,
    ActionType.DECLARE_ATTACK: frozenset({Phase.BATTLE}),
    ActionType.ADVANCE_PHASE: frozenset(PHASE_ORDER),
}

WINDOW_ACTIONS = frozenset({ActionType.ACTIVATE_TRAP, ActionType.DECLINE_TRAPS})


def can_perform(state: MatchState, action_type: ActionType, side: SideId) -> Permission:
    """
    Whether a side may take an action of this type right now.

    While a trap window is open only the responder may act, and only with
    window actions. Window actions are never allowed outside a window.
    """
    window = state.pending_window
    if window is not None:
        if side is not window.responder:
            return Permission.NOT_ACTIVE_SIDE
        if action_type not in WINDOW_ACTIONS:
            return Permission.WRONG_PHASE
        return Permission.ALLOWED

    if action_type in WINDOW_ACTIONS:
        return Permission.WRONG_PHASE
    if side is not state.active:
        return Permission.NOT_ACTIVE_SIDE
    if state.phase not in ACTION_PHASES[action_type]:
        return Permission.WRONG_PHASE
    return Permission.ALLOWED


def next_phase(phase: Phase) -> Phase:
    return PHASE_ORDER[(PHASE_ORDER.index(phase) + 1) % len(PHASE_ORDER)]


def owes_draw(state: MatchState) -> bool:
    return not (state.config.skip_first_draw and state.turn == 1)


def advance(state: MatchState) -> None:
    """Move to the next phase; leaving the end phase hands the turn over."""
    current = state.phase
    if current is Phase.END:
        _switch_sides(state)
        return

    state.phase = next_phase(current)
    emit(state, EventType.PHASE_ADVANCED, state.active, **{"from": current.value, "to": state.phase.value})
    if state.phase is Phase.END:
        expire_boosts(state, state.active)


def _switch_sides(state: MatchState) -> None:
    previous = state.active
    state.active = previous.opponent
    if state.active is SideId.A:
        state.turn += 1
    state.turn_serial += 1
    state.phase = Phase.DRAW
    emit(state, EventType.PHASE_ADVANCED, state.active, **{"from": Phase.END.value, "to": Phase.DRAW.value})
    start_turn(state, state.active)


def start_turn(state: MatchState, side_id: SideId) -> None:
    """Reset per-turn flags for the side whose turn begins."""
    side = state.side(side_id)
    side.normal_summon_used = False
    side.attacked_slots = set()
    for monster in side.monsters:
        if monster is None:
            continue
        monster.summoned_this_turn = False
        monster.attacked_this_turn = False
        monster.position_changed_this_turn = False
    side.draw_pending = owes_draw(state)

    emit(state, EventType.TURN_STARTED, side_id, turn=state.turn, serial=state.turn_serial)
    state.deferred_triggers.append(
        TrapWindow(trigger=TriggerKind.ON_ENEMY_TURN_START, responder=side_id.opponent)
    )


def expire_boosts(state: MatchState, side_id: SideId) -> None:
    """Count down turn-bounded boosts on a side's monsters."""
    side = state.side(side_id)
    for slot, monster in enumerate(side.monsters):
        if monster is None:
            continue
        kept = []
        for boost in monster.boosts:
            if boost.remaining is None:
                kept.append(boost)
                continue
            boost.remaining -= 1
            if boost.remaining > 0:
                kept.append(boost)
            else:
                emit(
                    state,
                    EventType.BOOST_EXPIRED,
                    side_id,
                    slot=slot,
                    instance_id=monster.card.instance_id,
                    stat=boost.stat.value,
                    amount=boost.amount,
                    source=boost.source,
                )
        monster.boosts = kept
