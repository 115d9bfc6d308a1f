"""
State invariants, checked after every successful action.

A violation means the engine itself is wrong, never the player, so it is
raised as InternalInvariantError rather than returned as a rule error.
"""

from __future__ import annotations

from ..card_schema.templates import CardCatalog
from .state import MatchState, Position, SummonKind
from .combat import monster_stats


class InternalInvariantError(Exception):
    """Raised when a match state breaks a structural invariant."""

    def __init__(self, violations: list[str]):
        self.violations = violations
        super().__init__("; ".join(violations))


def find_violations(state: MatchState, catalog: CardCatalog) -> list[str]:
    violations: list[str] = []

    # Unique ids, each in exactly one zone, all allocated
    seen: set[int] = set()
    for side in state.sides:
        for card in side.all_instances():
            if card.instance_id in seen:
                violations.append(f"Instance {card.instance_id} appears in more than one zone")
            seen.add(card.instance_id)
            if not 0 <= card.instance_id < state.next_instance_id:
                violations.append(f"Instance {card.instance_id} was never allocated")

    # Normal summon bookkeeping on the side taking its turn
    active = state.active_side
    flagged = [
        m for m in active.monsters
        if m is not None and m.summoned_this_turn and m.summon_kind is SummonKind.NORMAL
    ]
    if len(flagged) > 1:
        violations.append(f"Side {active.side_id.value} has {len(flagged)} normal summons this turn")
    for monster in flagged:
        if not active.normal_summon_used:
            violations.append(f"Side {active.side_id.value} normal-summoned without using its normal summon")
        if monster_stats(catalog, monster.card).level > 4:
            violations.append(f"Instance {monster.card.instance_id} was normal-summoned above level 4")

    for side in state.sides:
        for monster in side.monsters:
            if monster is not None and monster.attacked_this_turn and monster.position is not Position.ATTACK:
                violations.append(f"Instance {monster.card.instance_id} attacked from defense position")

    # Outcome consistency
    if state.terminal:
        if state.winner is None and not state.is_draw:
            violations.append("Terminal state has neither a winner nor a draw")
    else:
        for side in state.sides:
            if side.life <= 0:
                violations.append(f"Side {side.side_id.value} has {side.life} life in a live match")

    # Card conservation
    for side in state.sides:
        expected = side.starting_deck_size + side.tokens_created
        if side.card_count() != expected:
            violations.append(
                f"Side {side.side_id.value} owns {side.card_count()} cards, expected {expected}"
            )

    return violations


def check_invariants(state: MatchState, catalog: CardCatalog) -> None:
    """Raise InternalInvariantError if the state breaks any invariant."""
    violations = find_violations(state, catalog)
    if violations:
        raise InternalInvariantError(violations)
