"""
Replay - Recording a match as its inputs and playing it back.

A replay log holds the setup (seed, decks, terrains, config) and the
applied actions. Because the engine is deterministic, replaying the
actions on a fresh match must reproduce the recorded events exactly;
verify_replay checks that.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ..card_schema.templates import CardCatalog
from ..config import MatchConfig
from ..engine_core.action import Action
from ..engine_core.events import Event
from ..engine_core.state import Terrain
from .match import Match, new_match

REPLAY_VERSION = 1


class ReplayError(Exception):
    """Raised when a recorded action is rejected during playback."""

    def __init__(self, index: int, action: dict[str, Any], error: str):
        self.index = index
        self.action = action
        super().__init__(f"Replay action #{index} ({action.get('action_type')}) failed: {error}")


class ReplayLog(BaseModel):
    """Everything needed to reproduce a match."""
    replay_version: int = REPLAY_VERSION
    seed: int
    deck_a: list[str]
    deck_b: list[str]
    terrain_a: str = Terrain.PLAIN.value
    terrain_b: str = Terrain.PLAIN.value
    shuffle: bool = True
    config: MatchConfig = Field(default_factory=MatchConfig)
    actions: list[dict[str, Any]] = Field(default_factory=list)
    events: list[dict[str, Any]] = Field(default_factory=list, description="Recorded events, for verification")


def record_replay(match: Match) -> ReplayLog:
    """Capture a match created by new_match as a replay log."""
    setup = match.setup
    if setup is None:
        raise ValueError("Match has no setup record (resumed matches cannot be replayed)")
    return ReplayLog(
        seed=setup.seed,
        deck_a=list(setup.deck_a),
        deck_b=list(setup.deck_b),
        terrain_a=setup.terrain_a.value,
        terrain_b=setup.terrain_b.value,
        shuffle=setup.shuffle,
        config=setup.config,
        actions=[a.to_dict() for a in match.action_log],
        events=[e.to_dict() for e in match.event_log],
    )


def replay_match(log: ReplayLog, catalog: CardCatalog | None = None) -> Match:
    """Rebuild the match and apply every recorded action."""
    match = new_match(
        log.seed,
        log.deck_a,
        log.deck_b,
        log.terrain_a,
        log.terrain_b,
        catalog=catalog,
        config=log.config,
        shuffle=log.shuffle,
    )
    for index, raw in enumerate(log.actions):
        result = match.apply(Action.from_dict(raw))
        if not result.success:
            raise ReplayError(index, raw, result.error or "")
    return match


def replay_actions(log: ReplayLog, catalog: CardCatalog | None = None) -> list[Event]:
    """Play a log back and return the events it produces."""
    return replay_match(log, catalog).event_log


def verify_replay(log: ReplayLog, catalog: CardCatalog | None = None) -> bool:
    """Whether playing the log back reproduces its recorded events exactly."""
    try:
        events = replay_actions(log, catalog)
    except ReplayError:
        return False
    return [e.to_dict() for e in events] == log.events


def save_replay(log: ReplayLog, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(log.model_dump_json(indent=2), encoding="utf-8")
    return path


def load_replay(path: str | Path) -> ReplayLog:
    return ReplayLog.model_validate_json(Path(path).read_text(encoding="utf-8"))
