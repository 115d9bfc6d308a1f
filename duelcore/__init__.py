"""
Duelcore - Duel card battle rules engine

A deterministic rules kernel for two-player duel card battles.
Front ends drive a Match with actions and get back events:
- Phased turns and tribute summoning
- Terrain-modified integer combat
- Spell and trap effect pipelines
- Snapshots and replays
"""

__version__ = "0.1.0"
