"""
Serialization - Snapshot models for saving and restoring a match state.

Snapshots are pydantic models with declaration-ordered fields and only
JSON primitives inside, so serialize -> deserialize -> serialize gives
the same bytes. The RNG state is stored as Random.getstate() unpacked
into lists.
"""

from __future__ import annotations
from typing import Any, Optional
import random

from pydantic import BaseModel, Field

from ..card_schema.templates import TriggerKind
from ..config import MatchConfig
from .state import (
    MatchState,
    SideState,
    SideId,
    Phase,
    Position,
    SummonKind,
    Terrain,
    CardInstance,
    Boost,
    BoostStat,
    BoardMonster,
    SetCard,
    TrapWindow,
)
from .events import Event, EventType


SNAPSHOT_VERSION = 1


# =============================================================================
# Snapshot models
# =============================================================================

class CardModel(BaseModel):
    instance_id: int
    template_id: str
    is_token: bool = False


class BoostModel(BaseModel):
    stat: str
    amount: int
    remaining: Optional[int] = None
    source: str = ""


class MonsterModel(BaseModel):
    card: CardModel
    position: str
    current_hp: int
    summon_kind: str
    summoned_this_turn: bool
    attacked_this_turn: bool
    position_changed_this_turn: bool
    boosts: list[BoostModel] = Field(default_factory=list)


class SetCardModel(BaseModel):
    card: CardModel
    face_down: bool
    activated: bool
    set_on_turn: int
    set_on_serial: int


class SideModel(BaseModel):
    side_id: str
    life: int
    deck: list[CardModel]
    hand: list[CardModel]
    monsters: list[Optional[MonsterModel]]
    spell_traps: list[Optional[SetCardModel]]
    graveyard: list[CardModel]
    normal_summon_used: bool
    attacked_slots: list[int]
    draw_pending: bool
    starting_deck_size: int
    tokens_created: int


class WindowModel(BaseModel):
    trigger: str
    responder: str
    eligible_slots: list[int]
    subject_side: Optional[str] = None
    subject_slot: Optional[int] = None
    subject_instance_id: Optional[int] = None
    target_slot: Optional[int] = None
    damage: int = 0
    negated: bool = False


class RngModel(BaseModel):
    version: int
    internal: list[int]
    gauss_next: Optional[float] = None


class EventModel(BaseModel):
    type: str
    side: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class MatchSnapshot(BaseModel):
    """Complete, JSON-safe picture of a MatchState."""
    snapshot_version: int = SNAPSHOT_VERSION
    config: MatchConfig
    turn: int
    turn_serial: int
    active: str
    phase: str
    terrain_a: str
    terrain_b: str
    seed: int
    rng: RngModel
    next_instance_id: int
    sides: list[SideModel]
    pending_window: Optional[WindowModel] = None
    deferred_triggers: list[WindowModel] = Field(default_factory=list)
    terminal: bool = False
    winner: Optional[str] = None
    is_draw: bool = False
    events: list[EventModel] = Field(default_factory=list)


# =============================================================================
# State -> snapshot
# =============================================================================

def _card(card: CardInstance) -> CardModel:
    return CardModel(instance_id=card.instance_id, template_id=card.template_id, is_token=card.is_token)


def _monster(monster: BoardMonster | None) -> MonsterModel | None:
    if monster is None:
        return None
    return MonsterModel(
        card=_card(monster.card),
        position=monster.position.value,
        current_hp=monster.current_hp,
        summon_kind=monster.summon_kind.value,
        summoned_this_turn=monster.summoned_this_turn,
        attacked_this_turn=monster.attacked_this_turn,
        position_changed_this_turn=monster.position_changed_this_turn,
        boosts=[
            BoostModel(stat=b.stat.value, amount=b.amount, remaining=b.remaining, source=b.source)
            for b in monster.boosts
        ],
    )


def _set_card(set_card: SetCard | None) -> SetCardModel | None:
    if set_card is None:
        return None
    return SetCardModel(
        card=_card(set_card.card),
        face_down=set_card.face_down,
        activated=set_card.activated,
        set_on_turn=set_card.set_on_turn,
        set_on_serial=set_card.set_on_serial,
    )


def _side(side: SideState) -> SideModel:
    return SideModel(
        side_id=side.side_id.value,
        life=side.life,
        deck=[_card(c) for c in side.deck],
        hand=[_card(c) for c in side.hand],
        monsters=[_monster(m) for m in side.monsters],
        spell_traps=[_set_card(s) for s in side.spell_traps],
        graveyard=[_card(c) for c in side.graveyard],
        normal_summon_used=side.normal_summon_used,
        attacked_slots=sorted(side.attacked_slots),
        draw_pending=side.draw_pending,
        starting_deck_size=side.starting_deck_size,
        tokens_created=side.tokens_created,
    )


def _window(window: TrapWindow | None) -> WindowModel | None:
    if window is None:
        return None
    return WindowModel(
        trigger=window.trigger.value,
        responder=window.responder.value,
        eligible_slots=list(window.eligible_slots),
        subject_side=window.subject_side.value if window.subject_side else None,
        subject_slot=window.subject_slot,
        subject_instance_id=window.subject_instance_id,
        target_slot=window.target_slot,
        damage=window.damage,
        negated=window.negated,
    )


def serialize_state(state: MatchState) -> MatchSnapshot:
    """Build a snapshot model from a match state."""
    version, internal, gauss_next = state.rng.getstate()
    return MatchSnapshot(
        config=state.config,
        turn=state.turn,
        turn_serial=state.turn_serial,
        active=state.active.value,
        phase=state.phase.value,
        terrain_a=state.terrain_of(SideId.A).value,
        terrain_b=state.terrain_of(SideId.B).value,
        seed=state.seed,
        rng=RngModel(version=version, internal=list(internal), gauss_next=gauss_next),
        next_instance_id=state.next_instance_id,
        sides=[_side(s) for s in state.sides],
        pending_window=_window(state.pending_window),
        deferred_triggers=[_window(w) for w in state.deferred_triggers],
        terminal=state.terminal,
        winner=state.winner.value if state.winner else None,
        is_draw=state.is_draw,
        events=[EventModel(**e.to_dict()) for e in state.events],
    )


def dumps(state: MatchState) -> str:
    """Serialize a match state to JSON text."""
    return serialize_state(state).model_dump_json()


# =============================================================================
# Snapshot -> state
# =============================================================================

def _load_card(model: CardModel) -> CardInstance:
    return CardInstance(instance_id=model.instance_id, template_id=model.template_id, is_token=model.is_token)


def _load_monster(model: MonsterModel | None) -> BoardMonster | None:
    if model is None:
        return None
    return BoardMonster(
        card=_load_card(model.card),
        position=Position(model.position),
        current_hp=model.current_hp,
        summon_kind=SummonKind(model.summon_kind),
        summoned_this_turn=model.summoned_this_turn,
        attacked_this_turn=model.attacked_this_turn,
        position_changed_this_turn=model.position_changed_this_turn,
        boosts=[
            Boost(stat=BoostStat(b.stat), amount=b.amount, remaining=b.remaining, source=b.source)
            for b in model.boosts
        ],
    )


def _load_set_card(model: SetCardModel | None) -> SetCard | None:
    if model is None:
        return None
    return SetCard(
        card=_load_card(model.card),
        face_down=model.face_down,
        activated=model.activated,
        set_on_turn=model.set_on_turn,
        set_on_serial=model.set_on_serial,
    )


def _load_side(model: SideModel) -> SideState:
    return SideState(
        side_id=SideId(model.side_id),
        life=model.life,
        deck=[_load_card(c) for c in model.deck],
        hand=[_load_card(c) for c in model.hand],
        monsters=[_load_monster(m) for m in model.monsters],
        spell_traps=[_load_set_card(s) for s in model.spell_traps],
        graveyard=[_load_card(c) for c in model.graveyard],
        normal_summon_used=model.normal_summon_used,
        attacked_slots=set(model.attacked_slots),
        draw_pending=model.draw_pending,
        starting_deck_size=model.starting_deck_size,
        tokens_created=model.tokens_created,
    )


def _load_window(model: WindowModel | None) -> TrapWindow | None:
    if model is None:
        return None
    return TrapWindow(
        trigger=TriggerKind(model.trigger),
        responder=SideId(model.responder),
        eligible_slots=list(model.eligible_slots),
        subject_side=SideId(model.subject_side) if model.subject_side else None,
        subject_slot=model.subject_slot,
        subject_instance_id=model.subject_instance_id,
        target_slot=model.target_slot,
        damage=model.damage,
        negated=model.negated,
    )


def deserialize_state(snapshot: MatchSnapshot | str) -> MatchState:
    """Rebuild a match state from a snapshot model or its JSON text."""
    if isinstance(snapshot, str):
        snapshot = MatchSnapshot.model_validate_json(snapshot)
    if snapshot.snapshot_version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {snapshot.snapshot_version}")

    rng = random.Random()
    rng.setstate((snapshot.rng.version, tuple(snapshot.rng.internal), snapshot.rng.gauss_next))

    return MatchState(
        sides=[_load_side(s) for s in snapshot.sides],
        config=snapshot.config,
        turn=snapshot.turn,
        turn_serial=snapshot.turn_serial,
        active=SideId(snapshot.active),
        phase=Phase(snapshot.phase),
        terrain={SideId.A: Terrain(snapshot.terrain_a), SideId.B: Terrain(snapshot.terrain_b)},
        seed=snapshot.seed,
        rng=rng,
        next_instance_id=snapshot.next_instance_id,
        pending_window=_load_window(snapshot.pending_window),
        deferred_triggers=[_load_window(w) for w in snapshot.deferred_triggers],
        terminal=snapshot.terminal,
        winner=SideId(snapshot.winner) if snapshot.winner else None,
        is_draw=snapshot.is_draw,
        events=[
            Event(
                event_type=EventType(e.type),
                side=SideId(e.side) if e.side else None,
                data=dict(e.data),
            )
            for e in snapshot.events
        ],
    )
