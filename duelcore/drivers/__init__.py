"""
Drivers - Scripted policies that play matches for tests and demos.
"""

from .policy import DriverPolicy, DriverDecision, DriverError, RandomPolicy, FirstLegalPolicy, run_match

__all__ = [
    "DriverPolicy",
    "DriverDecision",
    "DriverError",
    "RandomPolicy",
    "FirstLegalPolicy",
    "run_match",
]
