"""
Pytest fixtures for Duelcore tests.
"""

import pytest

from ..card_schema.templates import CardCatalog, CardKind, CardTemplate, damage_player, boost_atk_all_allies
from ..catalog import ALL_CARDS, builtin_catalog, starter_deck
from ..config import MatchConfig, TrapPolicy
from ..session.match import new_match
from .helpers import make_match


@pytest.fixture
def catalog() -> CardCatalog:
    """The built-in card library."""
    return builtin_catalog()


@pytest.fixture
def test_catalog() -> CardCatalog:
    """Built-in cards plus a few test-only spells."""
    extra = [
        CardTemplate(
            template_id="test_finisher",
            name="Finisher",
            kind=CardKind.SPELL,
            effects=(damage_player(8000), damage_player(100)),
        ),
        CardTemplate(
            template_id="test_short_boost",
            name="Short Boost",
            kind=CardKind.SPELL,
            effects=(boost_atk_all_allies(300, duration=1),),
        ),
    ]
    return CardCatalog.from_templates(ALL_CARDS + extra)


@pytest.fixture
def auto_config() -> MatchConfig:
    """Rules where every eligible trap fires on its own."""
    return MatchConfig(trap_policy=TrapPolicy.AUTO)


@pytest.fixture
def starter_match():
    """A shuffled starter-deck match on plain terrain."""
    return new_match(seed=7, deck_a=starter_deck(), deck_b=starter_deck())


@pytest.fixture
def warrior_match():
    """A holds a Flame Warrior, B holds a Holy Barrier trap; nothing else in hand."""
    return make_match(
        hand_a=["flame_warrior"],
        hand_b=["trap_mirror_force"],
        draws_a=["wind_spirit", "wind_spirit"],
        draws_b=["wind_spirit", "wind_spirit"],
    )
