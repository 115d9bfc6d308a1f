"""
Match - The handle a front end drives a duel through.

A Match owns one MatchState and replaces it with the reducer's result
after every successful action. It keeps the action and event logs for
replays, answers trap windows through optional per-side deciders, and
refuses re-entrant apply() calls (e.g. a decider trying to act itself).
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Union
import logging
import random

from ..card_schema.templates import CardCatalog
from ..card_schema.validation import validate_catalog
from ..catalog import builtin_catalog
from ..config import MatchConfig
from ..engine_core.state import MatchState, SideState, SideId, Phase, Terrain, CardInstance, TrapWindow
from ..engine_core.action import Action, ActionType, ActionError, ActionResult
from ..engine_core.events import Event
from ..engine_core.reducer import Reducer
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.turns import Permission, can_perform, owes_draw
from ..engine_core.invariants import check_invariants
from ..engine_core.serialization import dumps, deserialize_state
from ..engine_core.views import MatchView, build_view

logger = logging.getLogger(__name__)

# Called with the match and the eligible slots; returns a slot to activate or None to decline
TrapDecider = Callable[["Match", list[int]], Optional[int]]


@dataclass(frozen=True)
class MatchSetup:
    """Everything needed to rebuild a match's starting position."""
    seed: int
    deck_a: tuple[str, ...]
    deck_b: tuple[str, ...]
    terrain_a: Terrain = Terrain.PLAIN
    terrain_b: Terrain = Terrain.PLAIN
    shuffle: bool = True
    config: MatchConfig = field(default_factory=MatchConfig)


def build_initial_state(setup: MatchSetup, catalog: CardCatalog) -> MatchState:
    """
    Create the turn 1 state.

    Instance ids are assigned in deck order, side A first; each deck is
    then shuffled with the seeded RNG and the opening hands are dealt
    from the top (the end of the deck list).
    """
    config = setup.config
    state = MatchState(
        sides=[
            SideState(side_id=SideId.A, life=config.starting_life),
            SideState(side_id=SideId.B, life=config.starting_life),
        ],
        config=config,
        terrain={SideId.A: setup.terrain_a, SideId.B: setup.terrain_b},
        seed=setup.seed,
        rng=random.Random(setup.seed),
        phase=Phase.DRAW,
    )

    for side_id, deck in ((SideId.A, setup.deck_a), (SideId.B, setup.deck_b)):
        side = state.side(side_id)
        for template_id in deck:
            catalog.get(template_id)
            side.deck.append(CardInstance(instance_id=state.allocate_instance_id(), template_id=template_id))
        side.starting_deck_size = len(deck)

    for side in state.sides:
        if setup.shuffle:
            state.rng.shuffle(side.deck)
        for _ in range(min(config.opening_hand_size, len(side.deck))):
            side.hand.append(side.deck.pop())

    state.active_side.draw_pending = owes_draw(state)
    if config.check_invariants:
        check_invariants(state, catalog)
    return state


class Match:
    """
    A running duel.

    Usage:
        match = new_match(seed=1, deck_a=starter_deck(), deck_b=starter_deck())
        result = match.apply(Action.advance_phase())
        if not result.success:
            print(result.error_code)
    """

    def __init__(self, state: MatchState, catalog: CardCatalog, setup: MatchSetup | None = None):
        self.catalog = catalog
        self.setup = setup
        self.reducer = Reducer(catalog)
        self.generator = ActionGenerator(catalog)
        self._state = state
        self._applying = False
        self._trap_deciders: dict[SideId, TrapDecider] = {}
        self.action_log: list[Action] = []
        self.event_log: list[Event] = []

    # ------------------------------------------------------------------
    # Driving the match
    # ------------------------------------------------------------------

    def apply(self, action: Action) -> ActionResult:
        """
        Apply an action, then let registered trap deciders answer any
        window it opened. The returned events cover both.
        """
        if self._applying:
            logger.warning("Rejected re-entrant apply(%s)", action.action_type.value)
            return ActionResult.failure(ActionError.REENTRANT_CALL, "apply() called while an action is resolving")

        self._applying = True
        try:
            result = self._commit(action)
            if result.success:
                result = self._consult_deciders(result)
            return result
        finally:
            self._applying = False

    def _commit(self, action: Action) -> ActionResult:
        side = self.reducer.acting_side(self._state, action)
        result = self.reducer.apply(self._state, action)
        if not result.success:
            return result

        self._state = result.new_state
        self.action_log.append(replace(action, payload=replace(action.payload, side=side)))
        self.event_log.extend(result.events)
        if self._state.terminal:
            logger.info(
                "Match ended on turn %d: %s",
                self._state.turn,
                f"side {self._state.winner.value} wins" if self._state.winner else "draw",
            )
        return result

    def _consult_deciders(self, result: ActionResult) -> ActionResult:
        events = list(result.events)
        while not self._state.terminal and self._state.pending_window is not None:
            window = self._state.pending_window
            decider = self._trap_deciders.get(window.responder)
            if decider is None:
                break
            choice = decider(self, list(window.eligible_slots))
            if choice is None:
                response = Action.decline_traps(side=window.responder)
            else:
                response = Action.activate_trap(choice, side=window.responder)
            follow = self._commit(response)
            if not follow.success:
                logger.warning(
                    "Trap decider for side %s answered %s: %s",
                    window.responder.value,
                    choice,
                    follow.error,
                )
                break
            events.extend(follow.events)
        return ActionResult.success_with_state(self._state, events)

    def set_trap_decider(self, side: SideId, decider: TrapDecider | None) -> None:
        """Register (or with None, remove) the callable that answers a side's trap windows."""
        if decider is None:
            self._trap_deciders.pop(side, None)
        else:
            self._trap_deciders[side] = decider

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> MatchState:
        """The current state. Treat as read-only; use clone() to experiment."""
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def active_side(self) -> SideId:
        return self._state.active

    @property
    def acting_side(self) -> SideId:
        """The side expected to act next: a window's responder, else the active side."""
        if self._state.pending_window is not None:
            return self._state.pending_window.responder
        return self._state.active

    @property
    def turn(self) -> int:
        return self._state.turn

    @property
    def winner(self) -> SideId | None:
        return self._state.winner

    @property
    def is_terminal(self) -> bool:
        return self._state.terminal

    @property
    def is_draw(self) -> bool:
        return self._state.is_draw

    @property
    def pending_window(self) -> TrapWindow | None:
        return self._state.pending_window

    def life(self, side: SideId) -> int:
        return self._state.side(side).life

    def view(self, viewer: SideId) -> MatchView:
        return build_view(self._state, self.catalog, viewer)

    def legal_actions(self, side: SideId | None = None) -> list[Action]:
        return self.generator.generate(self._state, side)

    def can_perform(self, action_type: ActionType, side: SideId) -> Permission:
        return can_perform(self._state, action_type, side)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        """Serialize the current state."""
        return dumps(self._state)

    @classmethod
    def from_json(cls, text: str, catalog: CardCatalog | None = None) -> Match:
        """Resume a match from a serialized state. Logs start empty."""
        return cls(deserialize_state(text), catalog if catalog is not None else builtin_catalog())


def new_match(
    seed: int,
    deck_a: list[str],
    deck_b: list[str],
    terrain_a: Union[Terrain, str] = Terrain.PLAIN,
    terrain_b: Union[Terrain, str] = Terrain.PLAIN,
    *,
    catalog: CardCatalog | None = None,
    config: MatchConfig | None = None,
    shuffle: bool = True,
) -> Match:
    """
    Start a new match.

    Raises CatalogValidationError if the catalog is malformed and
    UnknownCardError if a deck names a card the catalog lacks.
    """
    if catalog is None:
        catalog = builtin_catalog()
    validate_catalog(catalog, raise_on_error=True)
    setup = MatchSetup(
        seed=seed,
        deck_a=tuple(deck_a),
        deck_b=tuple(deck_b),
        terrain_a=Terrain(terrain_a),
        terrain_b=Terrain(terrain_b),
        shuffle=shuffle,
        config=config if config is not None else MatchConfig(),
    )
    state = build_initial_state(setup, catalog)
    logger.info(
        "New match: seed=%d, terrains %s/%s, %d and %d cards",
        seed,
        setup.terrain_a.value,
        setup.terrain_b.value,
        len(deck_a),
        len(deck_b),
    )
    return Match(state, catalog, setup)
