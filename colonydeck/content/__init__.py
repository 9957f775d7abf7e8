"""
Content module - Game content built on the catalog schema.

Each setting has its own subpackage with buildings, cards, rewards,
maps and levels, and a factory returning its Catalog.
"""
