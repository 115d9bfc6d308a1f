"""
Builders shared by the test modules.

make_match deals exact hands with shuffling off, so a test can say
"A holds Flame Warrior" and know it sits at hand index 0.
"""

from __future__ import annotations

from ..catalog import builtin_catalog
from ..config import MatchConfig
from ..engine_core.action import Action
from ..engine_core.events import EventType
from ..engine_core.state import SideId, Phase, Position, BoardMonster, SetCard, CardInstance
from ..session.match import Match, new_match


def deck_with(hand=(), draws=()) -> list[str]:
    """An unshuffled deck list that deals `hand` first, then draws `draws` in order."""
    return list(reversed(list(draws))) + list(reversed(list(hand)))


def make_match(
    hand_a=(),
    hand_b=(),
    draws_a=(),
    draws_b=(),
    terrain_a="plain",
    terrain_b="plain",
    config: MatchConfig | None = None,
    catalog=None,
    seed: int = 1,
) -> Match:
    """A turn 1 match with exactly the given hands and draw piles."""
    config = (config or MatchConfig()).model_copy(update={"opening_hand_size": 0})
    match = new_match(
        seed,
        deck_with(hand_a, draws_a),
        deck_with(hand_b, draws_b),
        terrain_a,
        terrain_b,
        catalog=catalog if catalog is not None else builtin_catalog(),
        config=config,
        shuffle=False,
    )
    for side_id, hand in ((SideId.A, hand_a), (SideId.B, hand_b)):
        side = match.state.side(side_id)
        for _ in hand:
            side.hand.append(side.deck.pop())
    return match


def place_monster(match: Match, side_id: SideId, slot: int, template_id: str, position=Position.ATTACK) -> BoardMonster:
    """Put a fresh copy of a monster straight onto the field."""
    state = match.state
    card = CardInstance(instance_id=state.allocate_instance_id(), template_id=template_id)
    monster = BoardMonster(card=card, position=position, current_hp=match.catalog.get(template_id).atk)
    state.side(side_id).monsters[slot] = monster
    state.side(side_id).starting_deck_size += 1
    return monster


def place_set_card(match: Match, side_id: SideId, slot: int, template_id: str, serial: int = 0) -> SetCard:
    """Put a face-down card into a spell/trap slot as if set on an earlier turn."""
    state = match.state
    card = CardInstance(instance_id=state.allocate_instance_id(), template_id=template_id)
    set_card = SetCard(card=card, face_down=True, set_on_turn=0, set_on_serial=serial)
    state.side(side_id).spell_traps[slot] = set_card
    state.side(side_id).starting_deck_size += 1
    return set_card


def play(match: Match, action: Action):
    """Apply an action that must succeed."""
    result = match.apply(action)
    assert result.success, f"{action.action_type.value} failed: {result.error}"
    return result


def advance_to(match: Match, phase: Phase) -> None:
    """Advance the active side's turn until it reaches `phase`."""
    while match.phase is not phase:
        play(match, Action.advance_phase())


def end_turn(match: Match) -> None:
    """Advance until the other side becomes active."""
    side = match.active_side
    while match.active_side is side:
        play(match, Action.advance_phase())


def event_types(events) -> list[EventType]:
    return [e.event_type for e in events]
