"""
End-to-end duel scenarios, played only through Match.apply.
"""

from ..card_schema.templates import Attribute, CardCatalog
from ..catalog import ALL_CARDS
from ..catalog.cards import monster
from ..engine_core.action import Action
from ..engine_core.events import EventType
from ..engine_core.state import SideId, Phase
from .helpers import make_match, place_monster, advance_to, end_turn, play, event_types


class TestScenarios:
    """Short duels that exercise one rule each from a clean start."""

    def test_direct_attack_on_turn_one(self):
        match = make_match(hand_a=["flame_warrior"], seed=1)
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        advance_to(match, Phase.BATTLE)

        result = play(match, Action.declare_attack(0))

        assert event_types(result.events) == [EventType.ATTACKED, EventType.LIFE_CHANGED]
        assert event_types(match.event_log) == [
            EventType.PHASE_ADVANCED,
            EventType.SUMMONED,
            EventType.PHASE_ADVANCED,
            EventType.ATTACKED,
            EventType.LIFE_CHANGED,
        ]
        assert match.life(SideId.B) == 6500

    def test_volcano_fire_attack(self):
        catalog = CardCatalog.from_templates(
            ALL_CARDS + [monster("test_ember", "Ember", 4, Attribute.FIRE, 1400, 1000)]
        )
        match = make_match(hand_a=["test_ember"], terrain_a="volcano", catalog=catalog)
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        advance_to(match, Phase.BATTLE)

        result = play(match, Action.declare_attack(0))

        assert result.events[0].data["attacker_atk"] == 1820
        assert match.life(SideId.B) == 6180

    def test_defense_bounce(self):
        match = make_match(
            hand_a=["shadow_stalker"],
            hand_b=["earth_guardian"],
            draws_a=["wind_spirit"],
        )
        end_turn(match)
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        play(match, Action.toggle_position(0))
        end_turn(match)

        play(match, Action.draw())
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        advance_to(match, Phase.BATTLE)
        play(match, Action.declare_attack(0, 0))

        assert match.life(SideId.A) == 7700
        assert match.state.side(SideId.A).monsters[0] is not None
        assert match.state.side(SideId.B).monsters[0] is not None

    def test_tribute_summon_over_two_turns(self):
        match = make_match(hand_a=["wind_spirit", "dark_knight"], draws_a=["spell_heal"])
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        end_turn(match)
        end_turn(match)
        advance_to(match, Phase.MAIN1)

        result = play(match, Action.tribute_summon(0, 0, [0]))

        side = match.state.side(SideId.A)
        assert event_types(result.events) == [EventType.TRIBUTED, EventType.SUMMONED]
        assert side.monsters[0].card.template_id == "dark_knight"
        assert [c.template_id for c in side.graveyard] == ["wind_spirit"]

    def test_level_seven_tribute_summon(self):
        match = make_match(hand_a=["holy_angel"])
        place_monster(match, SideId.A, 0, "flame_warrior")
        place_monster(match, SideId.A, 1, "earth_guardian")
        advance_to(match, Phase.MAIN1)

        play(match, Action.tribute_summon(0, 0, [0, 1]))

        side = match.state.side(SideId.A)
        assert side.occupied_monster_slots() == [0]
        assert side.monsters[0].card.template_id == "holy_angel"
        assert [c.template_id for c in side.graveyard] == ["flame_warrior", "earth_guardian"]
        assert not side.normal_summon_used

    def test_holy_barrier_stops_a_direct_attack(self):
        match = make_match(
            hand_a=["flame_warrior"],
            hand_b=["trap_mirror_force"],
            draws_a=["wind_spirit"],
        )
        advance_to(match, Phase.MAIN1)
        play(match, Action.normal_summon(0, 0))
        end_turn(match)
        advance_to(match, Phase.MAIN1)
        play(match, Action.set_card(0, 0))
        end_turn(match)
        advance_to(match, Phase.BATTLE)

        offer = play(match, Action.declare_attack(0))
        assert event_types(offer.events) == [EventType.TRAP_OFFERED]

        result = play(match, Action.activate_trap(0))

        assert event_types(result.events) == [
            EventType.TRAP_ACTIVATED,
            EventType.MONSTER_DESTROYED,
            EventType.TRAP_NEGATED_ATTACK,
        ]
        assert match.life(SideId.B) == 8000
        assert match.state.side(SideId.A).monsters[0] is None
        assert [c.template_id for c in match.state.side(SideId.B).graveyard] == ["trap_mirror_force"]

    def test_deck_out(self):
        match = make_match(
            draws_a=["wind_spirit", "wind_spirit"],
            draws_b=["wind_spirit"] * 5,
        )
        for _ in range(4):
            end_turn(match)
        assert match.turn == 3
        assert len(match.state.side(SideId.A).deck) == 1

        play(match, Action.draw())
        assert len(match.state.side(SideId.A).deck) == 0

        end_turn(match)
        end_turn(match)
        result = play(match, Action.draw())

        assert event_types(result.events) == [EventType.MATCH_ENDED]
        assert match.winner is SideId.B
        assert match.is_terminal
        assert match.turn == 4
