"""
Colonydeck - Turn-based Mars colony engine

A deterministic card and grid economy: draw building and event cards,
place buildings on an 8x8 map, run production every turn and launch
rockets until the colony reaches its reputation goal.
The engine provides:
- Resource ledger and production scheduling
- Deck, hand and card offers
- Persistent rewards that upgrade buildings
- Level progression, sessions and an HTTP API
"""

__version__ = "0.1.0"
