"""
Tests for the phase cycle, drawing and permissions.
"""

from ..config import MatchConfig
from ..engine_core.action import Action, ActionType, ActionError
from ..engine_core.events import EventType
from ..engine_core.state import SideId, Phase, Boost, BoostStat
from ..engine_core.turns import Permission, next_phase
from .helpers import make_match, place_monster, advance_to, end_turn, play, event_types


class TestPhaseCycle:
    """Tests for advance_phase."""

    def test_match_starts_in_side_a_draw_phase(self):
        match = make_match()
        assert match.active_side is SideId.A
        assert match.phase is Phase.DRAW
        assert match.turn == 1
        assert match.state.turn_serial == 1

    def test_phase_order(self):
        assert next_phase(Phase.DRAW) is Phase.MAIN1
        assert next_phase(Phase.MAIN1) is Phase.BATTLE
        assert next_phase(Phase.BATTLE) is Phase.MAIN2
        assert next_phase(Phase.MAIN2) is Phase.END
        assert next_phase(Phase.END) is Phase.DRAW

    def test_advance_emits_phase_event(self):
        match = make_match()
        result = play(match, Action.advance_phase())
        assert event_types(result.events) == [EventType.PHASE_ADVANCED]
        assert result.events[0].data == {"from": "draw", "to": "main1"}

    def test_end_phase_hands_over_the_turn(self):
        match = make_match(draws_b=["wind_spirit"])
        advance_to(match, Phase.END)

        result = play(match, Action.advance_phase())

        assert match.active_side is SideId.B
        assert match.phase is Phase.DRAW
        assert match.turn == 1
        assert match.state.turn_serial == 2
        assert event_types(result.events) == [EventType.PHASE_ADVANCED, EventType.TURN_STARTED]
        assert result.events[1].data == {"turn": 1, "serial": 2}

    def test_turn_increments_when_play_returns_to_a(self):
        match = make_match(draws_a=["wind_spirit"])
        end_turn(match)
        end_turn(match)
        assert match.active_side is SideId.A
        assert match.turn == 2
        assert match.state.turn_serial == 3


class TestDrawing:
    """Tests for the draw step."""

    def test_no_draw_on_turn_one(self):
        match = make_match(draws_a=["wind_spirit"])
        result = match.apply(Action.draw())
        assert result.error_code is ActionError.NO_DRAW_PENDING

    def test_side_b_skips_its_first_draw_too(self):
        match = make_match(draws_b=["wind_spirit"])
        end_turn(match)
        assert not match.state.side(SideId.B).draw_pending

    def test_first_draw_can_be_enabled(self):
        match = make_match(draws_a=["wind_spirit"], config=MatchConfig(skip_first_draw=False))
        result = play(match, Action.draw())
        assert event_types(result.events) == [EventType.DREW]

    def test_draw_on_turn_two(self):
        match = make_match(draws_a=["wind_spirit", "flame_warrior"])
        end_turn(match)
        end_turn(match)

        result = play(match, Action.draw())

        assert event_types(result.events) == [EventType.DREW]
        assert result.events[0].data["template_id"] == "wind_spirit"
        assert result.events[0].data["deck_size"] == 1
        assert [c.template_id for c in match.state.side(SideId.A).hand] == ["wind_spirit"]
        assert match.apply(Action.draw()).error_code is ActionError.NO_DRAW_PENDING

    def test_advancing_pays_an_owed_draw(self):
        match = make_match(draws_a=["wind_spirit"])
        end_turn(match)
        end_turn(match)

        result = play(match, Action.advance_phase())

        assert event_types(result.events) == [EventType.DREW, EventType.PHASE_ADVANCED]
        assert match.phase is Phase.MAIN1

    def test_full_hand_discards_the_draw(self):
        hand = ["wind_spirit"] * 10
        match = make_match(hand_a=hand, draws_a=["flame_warrior"])
        end_turn(match)
        end_turn(match)

        result = play(match, Action.draw())

        side = match.state.side(SideId.A)
        assert event_types(result.events) == [EventType.DISCARDED]
        assert len(side.hand) == 10
        assert side.graveyard[-1].template_id == "flame_warrior"

    def test_empty_deck_loses(self):
        match = make_match()
        end_turn(match)
        end_turn(match)

        result = play(match, Action.draw())

        assert event_types(result.events) == [EventType.MATCH_ENDED]
        assert result.events[0].data == {"winner": "B", "is_draw": False, "reason": "deck_out"}
        assert match.winner is SideId.B


class TestPermissions:
    """Tests for phase and side gating."""

    def test_attack_outside_battle_phase(self):
        match = make_match()
        advance_to(match, Phase.MAIN1)
        result = match.apply(Action.declare_attack(0))
        assert result.error_code is ActionError.WRONG_PHASE

    def test_summon_in_battle_phase(self):
        match = make_match(hand_a=["flame_warrior"])
        advance_to(match, Phase.BATTLE)
        result = match.apply(Action.normal_summon(0, 0))
        assert result.error_code is ActionError.WRONG_PHASE

    def test_inactive_side_cannot_act(self):
        match = make_match(hand_b=["flame_warrior"])
        advance_to(match, Phase.MAIN1)
        result = match.apply(Action.normal_summon(0, 0, side=SideId.B))
        assert result.error_code is ActionError.NOT_ACTIVE_SIDE

    def test_can_perform(self):
        match = make_match()
        assert match.can_perform(ActionType.ADVANCE_PHASE, SideId.A) is Permission.ALLOWED
        assert match.can_perform(ActionType.NORMAL_SUMMON, SideId.A) is Permission.WRONG_PHASE
        assert match.can_perform(ActionType.ADVANCE_PHASE, SideId.B) is Permission.NOT_ACTIVE_SIDE
        assert match.can_perform(ActionType.DECLINE_TRAPS, SideId.A) is Permission.WRONG_PHASE

    def test_window_actions_need_a_window(self):
        match = make_match()
        assert match.apply(Action.decline_traps()).error_code is ActionError.NO_TRAP_WINDOW

    def test_rejected_action_leaves_state_untouched(self):
        match = make_match(hand_a=["flame_warrior"])
        before = match.to_json()
        match.apply(Action.normal_summon(0, 0))
        assert match.to_json() == before


class TestTurnBookkeeping:
    """Tests for per-turn resets and boost expiry."""

    def test_flags_reset_at_turn_start(self):
        match = make_match(hand_a=["flame_warrior"], draws_a=["wind_spirit"])
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        advance_to(match, Phase.BATTLE)
        play(match, Action.declare_attack(0))
        end_turn(match)
        end_turn(match)

        side = match.state.side(SideId.A)
        monster = side.monsters[0]
        assert not side.normal_summon_used
        assert side.attacked_slots == set()
        assert not monster.summoned_this_turn
        assert not monster.attacked_this_turn

    def test_timed_boost_expires_at_owner_end_phase(self):
        match = make_match()
        monster = place_monster(match, SideId.A, 0, "flame_warrior")
        monster.boosts.append(Boost(stat=BoostStat.ATK, amount=300, remaining=1, source="test"))
        monster.boosts.append(Boost(stat=BoostStat.ATK, amount=100, source="test"))
        advance_to(match, Phase.MAIN2)

        result = play(match, Action.advance_phase())

        assert event_types(result.events) == [EventType.PHASE_ADVANCED, EventType.BOOST_EXPIRED]
        assert [b.amount for b in match.state.side(SideId.A).monsters[0].boosts] == [100]

    def test_actions_after_the_end_are_rejected(self):
        match = make_match()
        end_turn(match)
        end_turn(match)
        play(match, Action.draw())

        result = match.apply(Action.advance_phase())

        assert result.error_code is ActionError.MATCH_OVER
        assert result.winner is SideId.B
