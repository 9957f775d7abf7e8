"""
Engine configuration.

Two layers:
- EngineConfig: rule constants the engine is built with (offer size,
  hand limits, cooldown defaults, random map density). Immutable.
- Settings: deployment knobs read from the environment (progress file,
  log level, CORS origins).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
import os


def _default_copies_by_rarity() -> Mapping[str, int]:
    return MappingProxyType({"common": 3, "unique": 1})


@dataclass(frozen=True)
class EngineConfig:
    """Rule constants for one game."""
    offer_size: int = 3
    max_hand_size: int = 6  # Turn cannot end above this
    max_card_slots: int = 8  # Draw stops at this hand size
    default_action_cooldown: int = 1
    default_grid_size: int = 8

    # Deck policy when no explicit composition is given
    copies_by_rarity: Mapping[str, int] = field(default_factory=_default_copies_by_rarity)

    # Random map density (percent of cells)
    metal_percentage: int = 10
    water_percentage: int = 10
    mountain_percentage: int = 5

    def __post_init__(self):
        if self.offer_size < 1:
            raise ValueError("offer_size must be >= 1")
        if self.max_hand_size < 1 or self.max_card_slots < self.max_hand_size:
            raise ValueError("max_card_slots must be >= max_hand_size >= 1")
        if self.default_action_cooldown < 0:
            raise ValueError("default_action_cooldown must be >= 0")


DEFAULT_CONFIG = EngineConfig()


@dataclass(frozen=True)
class Settings:
    """Environment-driven settings."""
    env: str = "development"
    progress_path: str | None = None
    log_level: str = "INFO"
    allowed_origins: tuple[str, ...] = ("*",)


def load_settings() -> Settings:
    """Read settings from the environment."""
    return Settings(
        env=os.getenv("COLONYDECK_ENV", "development"),
        progress_path=os.getenv("COLONYDECK_PROGRESS_PATH") or None,
        log_level=os.getenv("COLONYDECK_LOG_LEVEL", "INFO").upper(),
        allowed_origins=tuple(
            origin.strip()
            for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
            if origin.strip()
        ),
    )
