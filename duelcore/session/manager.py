"""
Match Manager - Creates and tracks running matches.

LIFECYCLE:
1. Front end creates a match -> gets a match_id
2. Front end drives it through get_match(match_id).match.apply(...)
3. Match ends (or is abandoned) -> end_match() drops it

PERSISTENCE RULES:
- Matches are in-memory only
- A match can be saved explicitly with Match.to_json or a replay log

Several managers (and any number of matches) can coexist; nothing here
is module-level state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..card_schema.templates import CardCatalog
from ..config import MatchConfig
from ..engine_core.state import Terrain
from .match import Match, new_match

logger = logging.getLogger(__name__)


class MatchStatus(Enum):
    """Lifecycle status of a managed match."""
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass
class ManagedMatch:
    """A match plus the bookkeeping the manager keeps about it."""
    match_id: str
    match: Match
    created_at: float
    status: MatchStatus = MatchStatus.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.status is MatchStatus.ACTIVE and not self.match.is_terminal


class MatchManager:
    """
    Manages matches by id.

    Responsibilities:
    - Create matches
    - Track active matches
    - Clean up finished matches
    """

    def __init__(self, catalog: CardCatalog | None = None):
        self.catalog = catalog
        self._matches: dict[str, ManagedMatch] = {}

    def create_match(
        self,
        seed: int,
        deck_a: list[str],
        deck_b: list[str],
        terrain_a: Terrain | str = Terrain.PLAIN,
        terrain_b: Terrain | str = Terrain.PLAIN,
        config: MatchConfig | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ManagedMatch:
        """
        Create and register a new match.

        Returns the ManagedMatch; its match_id is the handle for later calls.
        """
        match = new_match(
            seed,
            deck_a,
            deck_b,
            terrain_a,
            terrain_b,
            catalog=self.catalog,
            config=config,
        )
        managed = ManagedMatch(
            match_id=str(uuid.uuid4()),
            match=match,
            created_at=time.time(),
            metadata=dict(metadata or {}),
        )
        self._matches[managed.match_id] = managed
        logger.info("Created match %s", managed.match_id)
        return managed

    def get_match(self, match_id: str) -> ManagedMatch | None:
        """Get a match by ID."""
        return self._matches.get(match_id)

    def end_match(self, match_id: str, reason: str = "completed") -> ManagedMatch | None:
        """
        Remove a match from the manager.

        Returns the removed entry (so callers can still record a replay),
        or None if the id is unknown.
        """
        managed = self._matches.pop(match_id, None)
        if managed:
            if reason == "completed" and managed.match.is_terminal:
                managed.status = MatchStatus.FINISHED
            else:
                managed.status = MatchStatus.ABANDONED
            logger.info("Ended match %s (%s)", match_id, managed.status.value)
        return managed

    def list_active_matches(self) -> list[str]:
        """List IDs of matches still being played."""
        return [
            mid for mid, managed in self._matches.items()
            if managed.is_active()
        ]

    def list_matches(self) -> list[str]:
        return list(self._matches)

    def cleanup_finished(self) -> int:
        """Drop every terminal match. Returns how many were removed."""
        finished = [mid for mid, managed in self._matches.items() if managed.match.is_terminal]
        for match_id in finished:
            self.end_match(match_id)
        return len(finished)
