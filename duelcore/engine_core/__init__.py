"""
Engine Core - Deterministic match state management and rules resolution.

The engine is the runtime that:
1. Holds the MatchState
2. Controls the turn and phase cycle
3. Generates legal actions
4. Applies actions via the reducer
5. Resolves combat, spells and traps
"""

from .state import (
    MatchState,
    SideState,
    SideId,
    Phase,
    Position,
    Terrain,
    CardInstance,
    BoardMonster,
    SetCard,
    TrapWindow,
)
from .action import Action, ActionType, ActionPayload, ActionError, ActionResult
from .events import Event, EventType
from .turns import Permission, can_perform
from .reducer import Reducer, apply_action
from .action_generator import ActionGenerator, legal_actions
from .effect_resolver import EffectResolver
from .traps import TrapPipeline
from .invariants import InternalInvariantError, check_invariants
from .serialization import serialize_state, deserialize_state, dumps
from .views import MatchView, build_view

__all__ = [
    "MatchState",
    "SideState",
    "SideId",
    "Phase",
    "Position",
    "Terrain",
    "CardInstance",
    "BoardMonster",
    "SetCard",
    "TrapWindow",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionError",
    "ActionResult",
    "Event",
    "EventType",
    "Permission",
    "can_perform",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "legal_actions",
    "EffectResolver",
    "TrapPipeline",
    "InternalInvariantError",
    "check_invariants",
    "serialize_state",
    "deserialize_state",
    "dumps",
    "MatchView",
    "build_view",
]
