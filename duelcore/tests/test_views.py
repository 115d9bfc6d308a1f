"""
Tests for per-side views.
"""

import pytest
from pydantic import ValidationError

from ..engine_core.action import Action
from ..engine_core.state import SideId, Phase
from .helpers import make_match, place_monster, place_set_card, advance_to, play


class TestMatchView:
    """Tests for hidden information in views."""

    def test_opponent_hand_is_a_count(self):
        match = make_match(hand_a=["flame_warrior", "spell_heal"], hand_b=["trap_ambush"])

        view = match.view(SideId.A)

        assert view.you.hand == ["flame_warrior", "spell_heal"]
        assert view.opponent.hand is None
        assert view.opponent.hand_count == 1

    def test_face_down_cards_are_hidden_from_the_opponent(self):
        match = make_match()
        place_set_card(match, SideId.B, 2, "trap_mirror_force")

        assert match.view(SideId.A).opponent.spell_traps[2].template_id is None
        assert match.view(SideId.B).you.spell_traps[2].template_id == "trap_mirror_force"

    def test_monsters_show_effective_stats(self):
        match = make_match(terrain_b="volcano")
        place_monster(match, SideId.B, 0, "flame_warrior")

        monster = match.view(SideId.A).opponent.monsters[0]

        assert monster.atk == 1950
        assert monster.defense == 1200
        assert monster.template_id == "flame_warrior"

    def test_window_slots_only_for_the_responder(self):
        match = make_match()
        place_monster(match, SideId.A, 0, "flame_warrior")
        place_set_card(match, SideId.B, 0, "trap_negate_attack")
        advance_to(match, Phase.BATTLE)
        play(match, Action.declare_attack(0))

        assert match.view(SideId.B).pending_window.eligible_slots == [0]
        assert match.view(SideId.A).pending_window.eligible_slots == []
        assert match.view(SideId.A).pending_window.trigger == "on_attack"

    def test_views_are_frozen(self):
        view = make_match().view(SideId.A)
        with pytest.raises(ValidationError):
            view.turn = 5

    def test_header_fields(self):
        view = make_match(terrain_a="desert").view(SideId.B)
        assert view.viewer == "B"
        assert view.active == "A"
        assert view.phase == "draw"
        assert view.you.terrain == "plain"
        assert view.opponent.terrain == "desert"
        assert not view.terminal
