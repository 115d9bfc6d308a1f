"""
Views - What one side is allowed to see.

Views are frozen pydantic models built from a MatchState for a viewer.
The opponent's hand and deck order are reduced to counts and face-down
cards to an occupied marker. Monsters are always face-up.
"""

from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field

from ..card_schema.templates import CardCatalog
from .state import MatchState, SideId, SideState
from .combat import effective_atk, effective_def


class MonsterView(BaseModel):
    model_config = {"frozen": True}

    slot: int
    instance_id: int
    template_id: str
    is_token: bool
    position: str
    atk: int = Field(description="Effective ATK after terrain and boosts")
    defense: int = Field(description="Effective DEF after terrain and boosts")
    current_hp: int
    attacked_this_turn: bool
    position_changed_this_turn: bool


class SpellTrapView(BaseModel):
    model_config = {"frozen": True}

    slot: int
    face_down: bool
    template_id: Optional[str] = Field(None, description="Hidden for the opponent's face-down cards")


class SideView(BaseModel):
    model_config = {"frozen": True}

    side_id: str
    life: int
    deck_count: int
    hand_count: int
    hand: Optional[list[str]] = Field(None, description="Template ids; only for the viewer's own side")
    monsters: list[Optional[MonsterView]]
    spell_traps: list[Optional[SpellTrapView]]
    graveyard: list[str]
    normal_summon_used: bool
    terrain: str


class WindowView(BaseModel):
    model_config = {"frozen": True}

    trigger: str
    responder: str
    eligible_slots: list[int] = Field(default_factory=list, description="Only shown to the responder")


class MatchView(BaseModel):
    """A viewer's picture of the match."""
    model_config = {"frozen": True}

    viewer: str
    turn: int
    phase: str
    active: str
    you: SideView
    opponent: SideView
    pending_window: Optional[WindowView] = None
    terminal: bool
    winner: Optional[str] = None
    is_draw: bool


def _side_view(state: MatchState, catalog: CardCatalog, side: SideState, own: bool) -> SideView:
    monsters = []
    for slot, monster in enumerate(side.monsters):
        if monster is None:
            monsters.append(None)
            continue
        monsters.append(MonsterView(
            slot=slot,
            instance_id=monster.card.instance_id,
            template_id=monster.card.template_id,
            is_token=monster.card.is_token,
            position=monster.position.value,
            atk=effective_atk(state, catalog, side.side_id, monster),
            defense=effective_def(state, catalog, side.side_id, monster),
            current_hp=monster.current_hp,
            attacked_this_turn=monster.attacked_this_turn,
            position_changed_this_turn=monster.position_changed_this_turn,
        ))

    spell_traps = []
    for slot, set_card in enumerate(side.spell_traps):
        if set_card is None:
            spell_traps.append(None)
            continue
        visible = own or not set_card.face_down
        spell_traps.append(SpellTrapView(
            slot=slot,
            face_down=set_card.face_down,
            template_id=set_card.card.template_id if visible else None,
        ))

    return SideView(
        side_id=side.side_id.value,
        life=side.life,
        deck_count=len(side.deck),
        hand_count=len(side.hand),
        hand=[c.template_id for c in side.hand] if own else None,
        monsters=monsters,
        spell_traps=spell_traps,
        graveyard=[c.template_id for c in side.graveyard],
        normal_summon_used=side.normal_summon_used,
        terrain=state.terrain_of(side.side_id).value,
    )


def build_view(state: MatchState, catalog: CardCatalog, viewer: SideId) -> MatchView:
    """Build the view of the match for one side."""
    window = None
    if state.pending_window is not None:
        pw = state.pending_window
        window = WindowView(
            trigger=pw.trigger.value,
            responder=pw.responder.value,
            eligible_slots=list(pw.eligible_slots) if pw.responder is viewer else [],
        )

    return MatchView(
        viewer=viewer.value,
        turn=state.turn,
        phase=state.phase.value,
        active=state.active.value,
        you=_side_view(state, catalog, state.side(viewer), own=True),
        opponent=_side_view(state, catalog, state.side(viewer.opponent), own=False),
        pending_window=window,
        terminal=state.terminal,
        winner=state.winner.value if state.winner else None,
        is_draw=state.is_draw,
    )
