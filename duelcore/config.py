"""
Match configuration.

MatchConfig is a frozen pydantic model; it travels with the match state,
its snapshots and replay logs, so a replay always runs under the rules it
was recorded with.
"""

from __future__ import annotations
from enum import Enum

from pydantic import BaseModel, Field


class TrapPolicy(Enum):
    """How open trap windows are answered."""
    PROMPT = "prompt"  # Pause and wait for activate_trap / decline_traps
    AUTO = "auto"  # Activate every eligible trap in slot order


class MatchConfig(BaseModel):
    """Rule knobs for a single match."""

    model_config = {"frozen": True}

    starting_life: int = Field(8000, gt=0, description="Life points each side starts with")
    opening_hand_size: int = Field(5, ge=0, description="Cards dealt to each side before turn 1")
    hand_limit: int = Field(10, ge=1, description="Draws beyond this hand size are discarded")
    trap_policy: TrapPolicy = Field(TrapPolicy.PROMPT, description="How trap windows are answered")
    piercing: bool = Field(False, description="Attacks over a defense-position monster deal the difference")
    heal_cap_at_starting_life: bool = Field(True, description="Heals cannot raise life above starting life")
    skip_first_draw: bool = Field(True, description="No draw is owed on turn 1")
    check_invariants: bool = Field(True, description="Verify state invariants after every action")

