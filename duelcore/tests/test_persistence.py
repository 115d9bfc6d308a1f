"""
Tests for snapshots, determinism and replays.

Same seed and same actions must give the same events, byte for byte.
"""

import json

import pytest

from ..catalog import starter_deck
from ..drivers import FirstLegalPolicy, RandomPolicy, run_match
from ..engine_core.action import Action
from ..engine_core.serialization import MatchSnapshot, dumps, deserialize_state, serialize_state
from ..engine_core.state import SideId, Phase
from ..session.match import Match, new_match
from ..session.replay import (
    ReplayError,
    ReplayLog,
    load_replay,
    record_replay,
    replay_match,
    save_replay,
    verify_replay,
)
from .helpers import place_set_card, place_monster, make_match, advance_to, play


def driven_match(seed: int, actions: int | None = None) -> Match:
    """A starter match driven by random policies, optionally only part of the way."""
    match = new_match(seed, starter_deck(), starter_deck(), "forest", "swamp")
    policies = {SideId.A: RandomPolicy(seed), SideId.B: RandomPolicy(seed + 1)}
    if actions is None:
        run_match(match, policies, max_actions=20000)
        return match
    for _ in range(actions):
        if match.is_terminal:
            break
        side = match.acting_side
        window = match.pending_window
        if window is not None:
            slot = policies[side].select_trap(match, list(window.eligible_slots))
            action = Action.decline_traps() if slot is None else Action.activate_trap(slot)
        else:
            action = policies[side].select_action(match, match.legal_actions()).action
        play(match, action)
    return match


class TestSnapshots:
    """Tests for serialize/deserialize."""

    def test_round_trip_is_byte_identical(self):
        match = driven_match(3, actions=60)
        text = dumps(match.state)
        assert dumps(deserialize_state(text)) == text

    def test_round_trip_inside_a_trap_window(self):
        match = make_match()
        place_monster(match, SideId.A, 0, "flame_warrior")
        place_set_card(match, SideId.B, 0, "trap_magic_cylinder")
        advance_to(match, Phase.BATTLE)
        play(match, Action.declare_attack(0))

        text = match.to_json()
        restored = Match.from_json(text)

        assert restored.pending_window is not None
        assert restored.to_json() == text
        play(restored, Action.activate_trap(0))
        assert restored.life(SideId.A) == 6500

    def test_snapshot_is_plain_json(self, starter_match):
        raw = json.loads(starter_match.to_json())
        assert raw["snapshot_version"] == 1
        assert raw["config"]["starting_life"] == 8000
        assert isinstance(raw["rng"]["internal"], list)

    def test_snapshot_model(self, starter_match):
        snapshot = serialize_state(starter_match.state)
        assert isinstance(snapshot, MatchSnapshot)
        assert deserialize_state(snapshot).turn == 1

    def test_unknown_snapshot_version_rejected(self, starter_match):
        raw = json.loads(starter_match.to_json())
        raw["snapshot_version"] = 2
        with pytest.raises(ValueError):
            deserialize_state(json.dumps(raw))

    def test_restored_match_continues_identically(self):
        match = driven_match(11, actions=40)
        restored = Match.from_json(match.to_json())
        already_logged = len(match.event_log)
        policy_a, policy_b = FirstLegalPolicy(), FirstLegalPolicy()

        run_match(match, {SideId.A: policy_a, SideId.B: policy_b})
        run_match(restored, {SideId.A: policy_a, SideId.B: policy_b})

        assert [e.to_dict() for e in restored.event_log] == [
            e.to_dict() for e in match.event_log[already_logged:]
        ]
        assert restored.to_json() == match.to_json()


class TestDeterminism:
    """Same seed, same result, every time."""

    def test_same_seed_same_events(self):
        runs = [driven_match(42) for _ in range(3)]
        logs = [json.dumps([e.to_dict() for e in m.event_log]) for m in runs]
        assert logs[0] == logs[1] == logs[2]

    def test_seed_changes_the_deal(self):
        hands = set()
        for seed in range(5):
            match = new_match(seed, starter_deck(), starter_deck())
            hands.add(tuple(c.template_id for c in match.state.side(SideId.A).hand))
        assert len(hands) > 1

    def test_unshuffled_deal_takes_from_the_end(self):
        deck = starter_deck()
        match = new_match(1, deck, deck, shuffle=False)
        hand = [c.template_id for c in match.state.side(SideId.A).hand]
        assert hand == list(reversed(deck))[:5]
        assert match.state.side(SideId.B).deck[0].instance_id == len(deck)


class TestReplay:
    """Tests for recording and replaying matches."""

    def test_replay_reproduces_events(self):
        match = driven_match(5)
        log = record_replay(match)

        assert verify_replay(log)
        assert replay_match(log).to_json() == match.to_json()

    def test_save_and_load(self, tmp_path):
        match = driven_match(6, actions=50)
        path = save_replay(record_replay(match), tmp_path / "replays" / "match.json")

        log = load_replay(path)

        assert isinstance(log, ReplayLog)
        assert log.seed == 6
        assert verify_replay(log)

    def test_tampered_log_fails_verification(self):
        log = record_replay(driven_match(8, actions=30))
        log.events[-1]["data"]["tampered"] = True
        assert not verify_replay(log)

    def test_rejected_action_raises(self):
        log = record_replay(driven_match(8, actions=30))
        log.actions.append(Action.normal_summon(99, 0).to_dict())
        with pytest.raises(ReplayError) as exc_info:
            replay_match(log)
        assert exc_info.value.index == len(log.actions) - 1

    def test_resumed_matches_cannot_be_recorded(self, starter_match):
        resumed = Match.from_json(starter_match.to_json())
        with pytest.raises(ValueError):
            record_replay(resumed)
