"""
Session Module - Running matches, tracking them, and replaying them.

A match represents one duel:
- Created from a seed, two decks and two terrains
- Driven through Match.apply
- Recorded as a replay log when it ends

Matches are in-memory; persistence is explicit (snapshots, replay files).
"""

from .match import Match, MatchSetup, TrapDecider, new_match, build_initial_state
from .manager import MatchManager, ManagedMatch, MatchStatus
from .replay import (
    ReplayLog,
    ReplayError,
    record_replay,
    replay_match,
    replay_actions,
    verify_replay,
    save_replay,
    load_replay,
)

__all__ = [
    "Match",
    "MatchSetup",
    "TrapDecider",
    "new_match",
    "build_initial_state",
    "MatchManager",
    "ManagedMatch",
    "MatchStatus",
    "ReplayLog",
    "ReplayError",
    "record_replay",
    "replay_match",
    "replay_actions",
    "verify_replay",
    "save_replay",
    "load_replay",
]
