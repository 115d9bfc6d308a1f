"""
Board helpers shared by combat, spells and traps.

Every life change and every destruction goes through here so that the
end-of-match check and the graveyard bookkeeping happen in one place.
"""

from __future__ import annotations

from ..card_schema.templates import TriggerKind
from .state import MatchState, SideId, TrapWindow
from .events import EventType, emit


def change_life(state: MatchState, side_id: SideId, delta: int, cause: str = "") -> int:
    """
    Apply a life change, clamped at 0, then check for the end of the match.

    Damage to the side that is not taking its turn queues an on_damage
    trap window for that side. Returns the applied delta.
    """
    side = state.side(side_id)
    old_life = side.life
    side.life = max(0, old_life + delta)
    applied = side.life - old_life
    emit(state, EventType.LIFE_CHANGED, side_id, delta=applied, life=side.life, cause=cause)

    check_outcome(state)
    if applied < 0 and side_id is not state.active and not state.terminal:
        _queue_damage_window(state, side_id, -applied)
    return applied


def _queue_damage_window(state: MatchState, side_id: SideId, amount: int) -> None:
    for window in state.deferred_triggers:
        if window.trigger is TriggerKind.ON_DAMAGE and window.responder is side_id:
            window.damage += amount
            return
    state.deferred_triggers.append(
        TrapWindow(trigger=TriggerKind.ON_DAMAGE, responder=side_id, damage=amount)
    )


def check_outcome(state: MatchState) -> None:
    """End the match if either side is out of life; both out is a draw."""
    if state.terminal:
        return
    a_out = state.side(SideId.A).life <= 0
    b_out = state.side(SideId.B).life <= 0
    if a_out and b_out:
        end_match(state, None, reason="life")
    elif a_out:
        end_match(state, SideId.B, reason="life")
    elif b_out:
        end_match(state, SideId.A, reason="life")


def end_match(state: MatchState, winner: SideId | None, reason: str) -> None:
    state.terminal = True
    state.winner = winner
    state.is_draw = winner is None
    state.pending_window = None
    state.deferred_triggers = []
    emit(
        state,
        EventType.MATCH_ENDED,
        winner,
        winner=winner.value if winner else None,
        is_draw=state.is_draw,
        reason=reason,
    )


def destroy_monster(state: MatchState, side_id: SideId, slot: int, cause: str = "") -> None:
    """Move the monster in a slot to its owner's graveyard."""
    side = state.side(side_id)
    monster = side.monsters[slot]
    if monster is None:
        return
    side.monsters[slot] = None
    side.graveyard.append(monster.card)
    emit(
        state,
        EventType.MONSTER_DESTROYED,
        side_id,
        slot=slot,
        instance_id=monster.card.instance_id,
        template_id=monster.card.template_id,
        cause=cause,
    )


def find_monster(state: MatchState, side_id: SideId | None, slot: int | None, instance_id: int | None) -> bool:
    """Whether the given instance still occupies the given slot."""
    if side_id is None or slot is None:
        return False
    monster = state.side(side_id).monsters[slot]
    return monster is not None and monster.card.instance_id == instance_id
