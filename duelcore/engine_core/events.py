"""
Events - Ordered records of every state change.

Each successful action returns the events it produced, in the order the
changes happened. Event data only holds JSON primitives, so the log can
be compared byte for byte between two runs.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import SideId


class EventType(Enum):
    DREW = "drew"
    DISCARDED = "discarded"
    SUMMONED = "summoned"
    TRIBUTED = "tributed"
    SET = "set"
    SPELL_CAST = "spell_cast"
    EFFECT_APPLIED = "effect_applied"
    TRAP_OFFERED = "trap_offered"
    TRAP_DECLINED = "trap_declined"
    TRAP_ACTIVATED = "trap_activated"
    TRAP_NEGATED_ATTACK = "trap_negated_attack"
    ATTACKED = "attacked"
    MONSTER_DAMAGED = "monster_damaged"
    MONSTER_DESTROYED = "monster_destroyed"
    POSITION_CHANGED = "position_changed"
    BOOST_EXPIRED = "boost_expired"
    LIFE_CHANGED = "life_changed"
    PHASE_ADVANCED = "phase_advanced"
    TURN_STARTED = "turn_started"
    MATCH_ENDED = "match_ended"


@dataclass
class Event:
    """A single state change, attributed to the side it concerns."""
    event_type: EventType
    side: SideId | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.event_type.value,
            "side": self.side.value if self.side else None,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Event:
        side = raw.get("side")
        return cls(
            event_type=EventType(raw["type"]),
            side=SideId(side) if side else None,
            data=dict(raw.get("data", {})),
        )


def emit(state, event_type: EventType, side: SideId | None = None, **data) -> Event:
    """Append an event to the state's current event log."""
    event = Event(event_type=event_type, side=side, data=data)
    state.events.append(event)
    return event
