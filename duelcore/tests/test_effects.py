"""
Tests for spells and the effect pipeline.
"""

from ..config import MatchConfig
from ..engine_core.action import Action, ActionError
from ..engine_core.events import EventType
from ..engine_core.state import SideId, Phase, BoostStat
from ..engine_core.combat import effective_atk
from .helpers import make_match, place_monster, advance_to, play, event_types


def caster_match(*spells, **kwargs):
    match = make_match(hand_a=list(spells), **kwargs)
    advance_to(match, Phase.MAIN1)
    return match


class TestDamageSpells:
    """Tests for damage spells."""

    def test_fireball_hits_the_enemy(self):
        match = caster_match("spell_fireball")

        result = play(match, Action.cast_spell(hand_idx=0))

        assert event_types(result.events) == [
            EventType.SPELL_CAST,
            EventType.EFFECT_APPLIED,
            EventType.LIFE_CHANGED,
        ]
        assert match.life(SideId.B) == 7500
        assert [c.template_id for c in match.state.side(SideId.A).graveyard] == ["spell_fireball"]

    def test_lightning_hits_the_first_occupied_slot(self):
        match = caster_match("spell_lightning", "spell_lightning")
        place_monster(match, SideId.B, 2, "flame_warrior")
        place_monster(match, SideId.B, 4, "wind_spirit")

        play(match, Action.cast_spell(hand_idx=0))
        assert match.state.side(SideId.B).monsters[2].current_hp == 700

        result = play(match, Action.cast_spell(hand_idx=0))
        assert match.state.side(SideId.B).monsters[2] is None
        assert match.state.side(SideId.B).monsters[4] is not None
        assert EventType.MONSTER_DESTROYED in event_types(result.events)

    def test_spell_damage_does_not_touch_battle_stats(self):
        match = caster_match("spell_lightning")
        place_monster(match, SideId.B, 0, "flame_warrior")
        play(match, Action.cast_spell(hand_idx=0))
        monster = match.state.side(SideId.B).monsters[0]
        assert monster.current_hp == 700
        assert effective_atk(match.state, match.catalog, SideId.B, monster) == 1500

    def test_meteor_hits_every_enemy_monster(self):
        match = caster_match("spell_meteor")
        place_monster(match, SideId.B, 0, "flame_warrior")
        place_monster(match, SideId.B, 1, "child_of_the_sea")
        place_monster(match, SideId.B, 2, "wind_spirit")
        place_monster(match, SideId.A, 0, "wind_spirit")

        play(match, Action.cast_spell(hand_idx=0))

        enemy = match.state.side(SideId.B)
        assert [m.current_hp for m in enemy.monsters[:3]] == [1100, 400, 600]
        assert match.state.side(SideId.A).monsters[0].current_hp == 1000

    def test_empty_board_is_a_no_op(self):
        match = caster_match("spell_dark_hole")
        result = play(match, Action.cast_spell(hand_idx=0))
        assert event_types(result.events) == [EventType.SPELL_CAST, EventType.EFFECT_APPLIED]

    def test_dark_hole_destroys_first_enemy_monster(self):
        match = caster_match("spell_dark_hole")
        place_monster(match, SideId.B, 1, "holy_angel")
        place_monster(match, SideId.B, 3, "wind_spirit")

        play(match, Action.cast_spell(hand_idx=0))

        assert match.state.side(SideId.B).occupied_monster_slots() == [3]

    def test_effects_resolve_in_order(self):
        match = caster_match("spell_double_damage")
        place_monster(match, SideId.B, 0, "flame_warrior")

        result = play(match, Action.cast_spell(hand_idx=0))

        applied = [e.data["index"] for e in result.events if e.event_type is EventType.EFFECT_APPLIED]
        assert applied == [0, 1]
        assert match.life(SideId.B) == 7700
        assert match.state.side(SideId.B).monsters[0].current_hp == 1200

    def test_resolution_stops_when_the_match_ends(self, test_catalog):
        match = caster_match("test_finisher", catalog=test_catalog)

        result = play(match, Action.cast_spell(hand_idx=0))

        types = event_types(result.events)
        assert types.count(EventType.EFFECT_APPLIED) == 1
        assert types[-1] is EventType.MATCH_ENDED
        assert match.winner is SideId.A
        assert match.life(SideId.B) == 0


class TestHealing:
    """Tests for heal_player."""

    def test_heal_is_capped_at_starting_life(self):
        match = caster_match("spell_heal")
        match.state.side(SideId.A).life = 7500

        result = play(match, Action.cast_spell(hand_idx=0))

        assert match.life(SideId.A) == 8000
        assert result.events[-1].data["delta"] == 500

    def test_heal_at_full_life_emits_nothing(self):
        match = caster_match("spell_heal")
        result = play(match, Action.cast_spell(hand_idx=0))
        assert EventType.LIFE_CHANGED not in event_types(result.events)

    def test_cap_can_be_disabled(self):
        match = caster_match("spell_heal", config=MatchConfig(heal_cap_at_starting_life=False))
        play(match, Action.cast_spell(hand_idx=0))
        assert match.life(SideId.A) == 9000


class TestBoosts:
    """Tests for boost spells."""

    def test_power_boost_is_permanent(self):
        match = caster_match("spell_power_boost", draws_a=["wind_spirit"])
        place_monster(match, SideId.A, 0, "flame_warrior")
        place_monster(match, SideId.A, 1, "wind_spirit")

        play(match, Action.cast_spell(hand_idx=0))
        advance_to(match, Phase.END)

        side = match.state.side(SideId.A)
        assert side.monsters[0].boost_total(BoostStat.ATK) == 500
        assert effective_atk(match.state, match.catalog, SideId.A, side.monsters[1]) == 1500

    def test_boost_skips_later_monsters(self):
        match = caster_match("spell_power_boost", "flame_warrior")
        play(match, Action.cast_spell(hand_idx=0))
        play(match, Action.normal_summon(0, 0))
        assert match.state.side(SideId.A).monsters[0].boosts == []

    def test_timed_boost_expires(self, test_catalog):
        match = caster_match("test_short_boost", catalog=test_catalog)
        place_monster(match, SideId.A, 0, "flame_warrior")
        play(match, Action.cast_spell(hand_idx=0))
        advance_to(match, Phase.MAIN2)

        result = play(match, Action.advance_phase())

        expired = [e for e in result.events if e.event_type is EventType.BOOST_EXPIRED]
        assert len(expired) == 1
        assert expired[0].data["source"] == "test_short_boost"
        assert match.state.side(SideId.A).monsters[0].boosts == []


class TestCastingSetSpells:
    """Tests for casting a spell from a spell/trap slot."""

    def test_cast_a_set_spell(self):
        match = caster_match("spell_fireball")
        play(match, Action.set_card(0, 1))

        result = play(match, Action.cast_spell(slot=1))

        assert result.events[0].data["origin"] == "field"
        assert match.state.side(SideId.A).spell_traps[1] is None
        assert match.life(SideId.B) == 7500

    def test_set_trap_cannot_be_cast(self):
        match = caster_match("trap_negate_attack")
        play(match, Action.set_card(0, 0))
        assert match.apply(Action.cast_spell(slot=0)).error_code is ActionError.NOT_A_SPELL

    def test_empty_slot(self):
        match = caster_match()
        assert match.apply(Action.cast_spell(slot=0)).error_code is ActionError.SLOT_EMPTY

    def test_needs_a_source(self):
        match = caster_match("spell_fireball")
        assert match.apply(Action.cast_spell()).error_code is ActionError.INVALID_HAND_INDEX

    def test_traps_cannot_be_cast_from_hand(self):
        match = caster_match("trap_ambush")
        assert match.apply(Action.cast_spell(hand_idx=0)).error_code is ActionError.NOT_A_SPELL
