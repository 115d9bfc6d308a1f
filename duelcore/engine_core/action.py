"""
Action System - Actions, payloads, and results.

Actions represent:
1. Turn-structure actions (draw, advance phase)
2. Main phase plays (summon, set, cast, toggle position)
3. Battle (declare attack)
4. Trap window responses (activate, decline)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import SideId


class ActionType(Enum):
    """Types of actions in the system."""
    # Turn structure
    DRAW = "draw"
    ADVANCE_PHASE = "advance_phase"

    # Main phase
    NORMAL_SUMMON = "normal_summon"
    TRIBUTE_SUMMON = "tribute_summon"
    SET_CARD = "set_card"
    CAST_SPELL = "cast_spell"
    TOGGLE_POSITION = "toggle_position"

    # Battle phase
    DECLARE_ATTACK = "declare_attack"

    # Trap window responses
    ACTIVATE_TRAP = "activate_trap"
    DECLINE_TRAPS = "decline_traps"


class ActionError(Enum):
    """Closed set of reasons an action can be rejected."""
    WRONG_PHASE = "WRONG_PHASE"
    NOT_ACTIVE_SIDE = "NOT_ACTIVE_SIDE"
    INVALID_HAND_INDEX = "INVALID_HAND_INDEX"
    INVALID_SLOT = "INVALID_SLOT"
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    SLOT_EMPTY = "SLOT_EMPTY"
    NOT_A_MONSTER = "NOT_A_MONSTER"
    NOT_A_SPELL = "NOT_A_SPELL"
    NOT_A_SPELL_OR_TRAP = "NOT_A_SPELL_OR_TRAP"
    LEVEL_TOO_HIGH = "LEVEL_TOO_HIGH"
    TRIBUTE_NOT_REQUIRED = "TRIBUTE_NOT_REQUIRED"
    INSUFFICIENT_TRIBUTES = "INSUFFICIENT_TRIBUTES"
    INVALID_TRIBUTES = "INVALID_TRIBUTES"
    NORMAL_SUMMON_ALREADY_USED = "NORMAL_SUMMON_ALREADY_USED"
    CANNOT_ATTACK_IN_DEFENSE = "CANNOT_ATTACK_IN_DEFENSE"
    ATTACKER_ALREADY_ATTACKED = "ATTACKER_ALREADY_ATTACKED"
    POSITION_ALREADY_CHANGED = "POSITION_ALREADY_CHANGED"
    NO_VALID_TARGETS = "NO_VALID_TARGETS"
    DIRECT_ATTACK_BLOCKED = "DIRECT_ATTACK_BLOCKED"
    NO_DRAW_PENDING = "NO_DRAW_PENDING"
    TRAP_WINDOW_PENDING = "TRAP_WINDOW_PENDING"
    NO_TRAP_WINDOW = "NO_TRAP_WINDOW"
    TRAP_NOT_ELIGIBLE = "TRAP_NOT_ELIGIBLE"
    REENTRANT_CALL = "REENTRANT_CALL"
    MATCH_OVER = "MATCH_OVER"
    INTERNAL_INVARIANT = "INTERNAL_INVARIANT"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types have different payload shapes.
    This is a generic container; validation happens in the reducer.
    """
    side: SideId | None = None  # Acting side; None means "whoever may act"

    # Hand and board addressing
    hand_idx: int | None = None
    slot: int | None = None
    tributes: list[int] | None = None

    # Battle
    attacker_slot: int | None = None
    target_slot: int | None = None  # None = direct attack


@dataclass
class Action:
    """
    A complete action to be applied to the match state.

    Actions are:
    - Logged for replay
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def draw(cls, side: SideId | None = None) -> Action:
        return cls(ActionType.DRAW, ActionPayload(side=side))

    @classmethod
    def advance_phase(cls, side: SideId | None = None) -> Action:
        return cls(ActionType.ADVANCE_PHASE, ActionPayload(side=side))

    @classmethod
    def normal_summon(cls, hand_idx: int, slot: int, side: SideId | None = None) -> Action:
        return cls(ActionType.NORMAL_SUMMON, ActionPayload(side=side, hand_idx=hand_idx, slot=slot))

    @classmethod
    def tribute_summon(
        cls,
        hand_idx: int,
        slot: int,
        tributes: list[int],
        side: SideId | None = None,
    ) -> Action:
        """Factory for a tribute summon; slot may be one of the tributes."""
        return cls(
            ActionType.TRIBUTE_SUMMON,
            ActionPayload(side=side, hand_idx=hand_idx, slot=slot, tributes=list(tributes)),
        )

    @classmethod
    def set_card(cls, hand_idx: int, slot: int, side: SideId | None = None) -> Action:
        return cls(ActionType.SET_CARD, ActionPayload(side=side, hand_idx=hand_idx, slot=slot))

    @classmethod
    def cast_spell(
        cls,
        hand_idx: int | None = None,
        slot: int | None = None,
        side: SideId | None = None,
    ) -> Action:
        """Factory for casting a spell from hand, or a set spell from a spell/trap slot."""
        return cls(ActionType.CAST_SPELL, ActionPayload(side=side, hand_idx=hand_idx, slot=slot))

    @classmethod
    def toggle_position(cls, slot: int, side: SideId | None = None) -> Action:
        return cls(ActionType.TOGGLE_POSITION, ActionPayload(side=side, slot=slot))

    @classmethod
    def declare_attack(
        cls,
        attacker_slot: int,
        target_slot: int | None = None,
        side: SideId | None = None,
    ) -> Action:
        """Factory for an attack; target_slot None is a direct attack."""
        return cls(
            ActionType.DECLARE_ATTACK,
            ActionPayload(side=side, attacker_slot=attacker_slot, target_slot=target_slot),
        )

    @classmethod
    def activate_trap(cls, slot: int, side: SideId | None = None) -> Action:
        return cls(ActionType.ACTIVATE_TRAP, ActionPayload(side=side, slot=slot))

    @classmethod
    def decline_traps(cls, side: SideId | None = None) -> Action:
        return cls(ActionType.DECLINE_TRAPS, ActionPayload(side=side))

    def to_dict(self) -> dict[str, Any]:
        """Stable dict form used by replay logs."""
        p = self.payload
        return {
            "action_type": self.action_type.value,
            "side": p.side.value if p.side else None,
            "hand_idx": p.hand_idx,
            "slot": p.slot,
            "tributes": list(p.tributes) if p.tributes is not None else None,
            "attacker_slot": p.attacker_slot,
            "target_slot": p.target_slot,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Action:
        side = raw.get("side")
        tributes = raw.get("tributes")
        return cls(
            action_type=ActionType(raw["action_type"]),
            payload=ActionPayload(
                side=SideId(side) if side else None,
                hand_idx=raw.get("hand_idx"),
                slot=raw.get("slot"),
                tributes=list(tributes) if tributes is not None else None,
                attacker_slot=raw.get("attacker_slot"),
                target_slot=raw.get("target_slot"),
            ),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - The ordered events the action produced
    - Error code and message (if failed)
    """
    success: bool
    new_state: Any | None = None  # MatchState
    events: list = field(default_factory=list)
    error_code: ActionError | None = None
    error: str | None = None
    winner: SideId | None = None  # Set on MATCH_OVER failures

    @classmethod
    def failure(
        cls,
        error_code: ActionError,
        error: str = "",
        winner: SideId | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error_code=error_code, error=error or error_code.value, winner=winner)

    @classmethod
    def success_with_state(cls, state: Any, events: list | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, events=events or [], winner=state.winner)
