"""
Tests for the match manager.
"""

from ..catalog import starter_deck
from ..config import MatchConfig
from ..drivers import FirstLegalPolicy, run_match
from ..engine_core.action import Action
from ..engine_core.state import SideId, Terrain
from ..session.manager import MatchManager, MatchStatus


class TestMatchManager:
    """Tests for MatchManager."""

    def test_create_and_get(self):
        manager = MatchManager()

        managed = manager.create_match(1, starter_deck(), starter_deck(), "ocean", metadata={"table": 3})

        assert manager.get_match(managed.match_id) is managed
        assert managed.metadata == {"table": 3}
        assert managed.match.state.terrain_of(SideId.A) is Terrain.OCEAN
        assert manager.list_active_matches() == [managed.match_id]

    def test_matches_are_independent(self):
        manager = MatchManager()
        first = manager.create_match(1, starter_deck(), starter_deck())
        second = manager.create_match(1, starter_deck(), starter_deck())

        first.match.apply(Action.advance_phase())

        assert first.match_id != second.match_id
        assert second.match.state.phase.value == "draw"

    def test_config_is_passed_through(self):
        manager = MatchManager()
        managed = manager.create_match(1, starter_deck(), starter_deck(), config=MatchConfig(starting_life=4000))
        assert managed.match.life(SideId.B) == 4000

    def test_end_unfinished_match_is_abandoned(self):
        manager = MatchManager()
        managed = manager.create_match(1, starter_deck(), starter_deck())

        ended = manager.end_match(managed.match_id)

        assert ended.status is MatchStatus.ABANDONED
        assert manager.get_match(managed.match_id) is None
        assert manager.end_match(managed.match_id) is None

    def test_cleanup_finished(self):
        manager = MatchManager()
        done = manager.create_match(2, starter_deck(), starter_deck())
        running = manager.create_match(3, starter_deck(), starter_deck())
        run_match(done.match, {SideId.A: FirstLegalPolicy(), SideId.B: FirstLegalPolicy()})

        assert manager.list_active_matches() == [running.match_id]
        assert manager.cleanup_finished() == 1
        assert manager.list_matches() == [running.match_id]
        assert done.status is MatchStatus.FINISHED
