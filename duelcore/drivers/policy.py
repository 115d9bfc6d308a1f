"""
Driver Policy - Interface for scripted match drivers.

A DriverPolicy looks at a match and its legal actions and picks one.
Decisions include:
- Which action to take
- Whether to spring a trap when a window opens

These are test and demo drivers, not game AI.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import random

from ..engine_core.action import Action

if TYPE_CHECKING:
    from ..engine_core.state import SideId
    from ..session.match import Match

logger = logging.getLogger(__name__)


@dataclass
class DriverDecision:
    """An action chosen by a policy, with a note for logs."""
    action: Action
    explanation: str = ""


class DriverError(Exception):
    """Raised when a driver loop cannot make progress."""


class DriverPolicy(ABC):
    """
    Abstract base class for driver policies.

    A policy defines how a side selects actions.
    """

    @abstractmethod
    def select_action(self, match: Match, legal_actions: list[Action]) -> DriverDecision:
        """
        Select an action from the legal actions.

        Args:
            match: The running match
            legal_actions: List of legal actions to choose from

        Returns:
            DriverDecision with the selected action
        """
        pass

    @abstractmethod
    def select_trap(self, match: Match, eligible_slots: list[int]) -> int | None:
        """Pick a trap slot to activate, or None to decline."""
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(DriverPolicy):
    """
    Random policy - selects actions uniformly at random.

    Used for:
    - Property tests over many reachable states
    - Demo matches
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(self, match: Match, legal_actions: list[Action]) -> DriverDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")
        return DriverDecision(action=self.rng.choice(legal_actions), explanation="Selected randomly")

    def select_trap(self, match: Match, eligible_slots: list[int]) -> int | None:
        return self.rng.choice([None, *eligible_slots])


class FirstLegalPolicy(DriverPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(self, match: Match, legal_actions: list[Action]) -> DriverDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")
        return DriverDecision(action=legal_actions[0], explanation="Selected first legal action")

    def select_trap(self, match: Match, eligible_slots: list[int]) -> int | None:
        return eligible_slots[0] if eligible_slots else None


def run_match(match: Match, policies: dict[SideId, DriverPolicy], max_actions: int = 5000) -> int:
    """
    Drive a match with one policy per side until it ends.

    Trap windows go to the responder's select_trap. Returns the number of
    actions applied; raises DriverError if max_actions is reached first.
    """
    applied = 0
    while not match.is_terminal:
        if applied >= max_actions:
            raise DriverError(f"Match still running after {max_actions} actions")

        side = match.acting_side
        policy = policies[side]
        window = match.pending_window
        if window is not None:
            slot = policy.select_trap(match, list(window.eligible_slots))
            action = Action.decline_traps(side=side) if slot is None else Action.activate_trap(slot, side=side)
        else:
            action = policy.select_action(match, match.legal_actions(side)).action

        result = match.apply(action)
        if not result.success:
            raise DriverError(
                f"{policy.get_name()} chose {action.action_type.value} for side {side.value}: {result.error}"
            )
        applied += 1

    logger.info("Driven match finished after %d actions", applied)
    return applied
