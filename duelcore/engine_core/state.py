"""
Match State - The single state tree a duel is played on.

Design principles:
- One tree: both sides, their zones and the turn bookkeeping live here
- Clone-then-mutate: the reducer works on clone() and returns it on success
- Serializable: every field round-trips through engine_core.serialization
- Lookups go through the owning side; slots hold instances, never templates
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
import random

from ..card_schema.templates import TriggerKind
from ..config import MatchConfig


MONSTER_SLOTS = 5
SPELL_TRAP_SLOTS = 5


class SideId(Enum):
    """The two sides of a duel. A always takes the first turn."""
    A = "A"
    B = "B"

    @property
    def opponent(self) -> SideId:
        return SideId.B if self is SideId.A else SideId.A


class Phase(Enum):
    """Turn phases, in cycle order."""
    DRAW = "draw"
    MAIN1 = "main1"
    BATTLE = "battle"
    MAIN2 = "main2"
    END = "end"


PHASE_ORDER = [Phase.DRAW, Phase.MAIN1, Phase.BATTLE, Phase.MAIN2, Phase.END]


class Position(Enum):
    ATTACK = "attack"
    DEFENSE = "defense"


class SummonKind(Enum):
    NORMAL = "normal"
    TRIBUTE = "tribute"
    TOKEN = "token"


class Terrain(Enum):
    """Battlefield biomes; each side fights on its own."""
    PLAIN = "plain"
    VOLCANO = "volcano"
    GLACIER = "glacier"
    OCEAN = "ocean"
    FOREST = "forest"
    MOUNTAIN = "mountain"
    DESERT = "desert"
    SWAMP = "swamp"
    WASTELAND = "wasteland"


class BoostStat(Enum):
    ATK = "atk"
    DEF = "def"


@dataclass
class CardInstance:
    """
    A physical card in a match.

    Note: This is a runtime instance, not the definition.
    The definition lives in the CardCatalog under template_id.
    """
    instance_id: int  # Unique across both sides for the whole match
    template_id: str
    is_token: bool = False


@dataclass
class Boost:
    """A flat stat modifier on one monster."""
    stat: BoostStat
    amount: int
    remaining: int | None = None  # End phases left; None = permanent
    source: str = ""  # Template id of the card that granted it


@dataclass
class BoardMonster:
    """A monster occupying a monster slot."""
    card: CardInstance
    position: Position = Position.ATTACK
    current_hp: int = 0  # Starts at base ATK; only effect damage lowers it
    summon_kind: SummonKind = SummonKind.NORMAL
    summoned_this_turn: bool = False
    attacked_this_turn: bool = False
    position_changed_this_turn: bool = False
    boosts: list[Boost] = field(default_factory=list)

    def boost_total(self, stat: BoostStat) -> int:
        return sum(b.amount for b in self.boosts if b.stat == stat)


@dataclass
class SetCard:
    """A spell or trap occupying a spell/trap slot."""
    card: CardInstance
    face_down: bool = True
    activated: bool = False
    set_on_turn: int = 0
    set_on_serial: int = 0  # turn_serial at the time it was set


@dataclass
class SideState:
    """
    Everything one side owns.

    deck[-1] is the top of the deck.
    """
    side_id: SideId
    life: int = 8000

    deck: list[CardInstance] = field(default_factory=list)
    hand: list[CardInstance] = field(default_factory=list)
    monsters: list[BoardMonster | None] = field(default_factory=lambda: [None] * MONSTER_SLOTS)
    spell_traps: list[SetCard | None] = field(default_factory=lambda: [None] * SPELL_TRAP_SLOTS)
    graveyard: list[CardInstance] = field(default_factory=list)

    # Per-turn bookkeeping
    normal_summon_used: bool = False
    attacked_slots: set[int] = field(default_factory=set)
    draw_pending: bool = False

    # Conservation counters
    starting_deck_size: int = 0
    tokens_created: int = 0

    @property
    def has_monsters(self) -> bool:
        return any(m is not None for m in self.monsters)

    def occupied_monster_slots(self) -> list[int]:
        return [i for i, m in enumerate(self.monsters) if m is not None]

    def first_occupied_monster_slot(self) -> int | None:
        for i, m in enumerate(self.monsters):
            if m is not None:
                return i
        return None

    def first_empty_monster_slot(self) -> int | None:
        for i, m in enumerate(self.monsters):
            if m is None:
                return i
        return None

    def all_instances(self) -> list[CardInstance]:
        """Every card this side owns, across all zones."""
        cards = list(self.deck) + list(self.hand) + list(self.graveyard)
        cards.extend(m.card for m in self.monsters if m is not None)
        cards.extend(s.card for s in self.spell_traps if s is not None)
        return cards

    def card_count(self) -> int:
        return len(self.all_instances())


@dataclass
class TrapWindow:
    """
    An open (or queued) trap activation window.

    The paused action is described by the subject fields:
    - ON_ATTACK: subject is the attacker, target_slot the attacked slot
    - ON_SUMMON: subject is the freshly summoned monster
    - ON_DAMAGE / ON_ENEMY_TURN_START: no subject, nothing paused
    """
    trigger: TriggerKind
    responder: SideId
    eligible_slots: list[int] = field(default_factory=list)

    subject_side: SideId | None = None
    subject_slot: int | None = None
    subject_instance_id: int | None = None
    target_slot: int | None = None  # None on a direct attack

    damage: int = 0  # Life lost, for ON_DAMAGE windows
    negated: bool = False


@dataclass
class MatchState:
    """
    Complete match state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    sides: list[SideState] = field(default_factory=list)  # [A, B]
    config: MatchConfig = field(default_factory=MatchConfig)

    turn: int = 1  # Increments when play returns to side A
    turn_serial: int = 1  # Increments on every change of active side
    active: SideId = SideId.A
    phase: Phase = Phase.DRAW
    terrain: dict[SideId, Terrain] = field(
        default_factory=lambda: {SideId.A: Terrain.PLAIN, SideId.B: Terrain.PLAIN}
    )

    # Random seed for determinism
    seed: int = 0
    rng: random.Random = field(default_factory=random.Random)
    next_instance_id: int = 0

    # Trap windows
    pending_window: TrapWindow | None = None
    deferred_triggers: list[TrapWindow] = field(default_factory=list)

    # Outcome
    terminal: bool = False
    winner: SideId | None = None
    is_draw: bool = False

    # Events emitted by the action currently being resolved
    events: list = field(default_factory=list)

    def side(self, side_id: SideId) -> SideState:
        return self.sides[0] if side_id is SideId.A else self.sides[1]

    @property
    def active_side(self) -> SideState:
        return self.side(self.active)

    @property
    def opponent_side(self) -> SideState:
        return self.side(self.active.opponent)

    def terrain_of(self, side_id: SideId) -> Terrain:
        return self.terrain.get(side_id, Terrain.PLAIN)

    def allocate_instance_id(self) -> int:
        instance_id = self.next_instance_id
        self.next_instance_id += 1
        return instance_id

    def clone(self) -> MatchState:
        """Deep copy the state."""
        return deepcopy(self)
