"""
Level Progress - Campaign progression and persistent rewards.

Progress survives between sessions:
1. Completed and unlocked campaign levels
2. The level to play next (None once the campaign is over)
3. Unlocked rewards and persistent resource bonuses
4. Random levels completed after the campaign

LevelProgress is the ProgressionHooks implementation the game calls on
victory, defeat and reward unlock. Every change is saved through the
ProgressStore when one is configured.
"""

from __future__ import annotations
from pathlib import Path
from random import Random
from typing import Callable, Protocol, Sequence
import logging

from pydantic import BaseModel, Field, ValidationError

from ..catalog.schema import Catalog, LevelDefinition, RewardDefinition, ResourceKind, resource_map
from ..content.mars.levels import generate_random_level, is_random_level_id

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"

RESOURCE_NAMES = frozenset(kind.value for kind in ResourceKind)

RandomLevelFactory = Callable[[int, Random, Sequence[str]], LevelDefinition]


# =============================================================================
# Snapshot
# =============================================================================

class PersistentRewards(BaseModel):
    """Rewards carried from level to level."""
    reward_ids: list[str] = Field(default_factory=list)
    resource_bonuses: dict[str, int] = Field(default_factory=dict)


class ProgressSnapshot(BaseModel):
    """Serializable progression state."""
    version: str = SNAPSHOT_VERSION
    completed_levels: list[str] = Field(default_factory=list)
    unlocked_levels: list[str] = Field(default_factory=list)
    current_level_id: str | None = None
    persistent_rewards: PersistentRewards = Field(default_factory=PersistentRewards)
    random_levels_completed: int = Field(default=0, ge=0)
    current_random_level: int | None = Field(default=None, ge=1)


# =============================================================================
# Stores
# =============================================================================

class ProgressStore(Protocol):
    """Where progress is kept between runs."""

    def load(self) -> ProgressSnapshot | None: ...

    def save(self, snapshot: ProgressSnapshot) -> None: ...


class InMemoryProgressStore:
    """Keeps a copy of the last saved snapshot."""

    def __init__(self, snapshot: ProgressSnapshot | None = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else None

    def load(self) -> ProgressSnapshot | None:
        return self._snapshot.model_copy(deep=True) if self._snapshot else None

    def save(self, snapshot: ProgressSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)


class JsonFileProgressStore:
    """
    Progress as a JSON file on local disk.

    Usage:
        store = JsonFileProgressStore("~/.colonydeck/progress.json")
        progress = LevelProgress(catalog, store)

    A missing file means no progress yet. An unreadable or invalid file
    is treated the same way, with a warning.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> ProgressSnapshot | None:
        if not self.path.exists():
            return None
        try:
            return ProgressSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as exc:
            logger.warning(f"Ignoring corrupted progress file {self.path}: {exc}")
            return None

    def save(self, snapshot: ProgressSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")


# =============================================================================
# Progression
# =============================================================================

class LevelProgress:
    """
    Campaign state for one player.

    Usage:
        progress = LevelProgress(catalog, JsonFileProgressStore(path))
        level = progress.current_level() or progress.start_random_level(rng)
        game = ColonyGame(catalog, level, progress.unlocked_reward_ids, hooks=progress)
    """

    def __init__(
        self,
        catalog: Catalog,
        store: ProgressStore | None = None,
        random_level_factory: RandomLevelFactory = generate_random_level,
    ):
        self.catalog = catalog
        self.store = store
        self.random_level_factory = random_level_factory
        self.snapshot = self._defaults()
        self.last_completed_level: LevelDefinition | None = None
        self._random_level: LevelDefinition | None = None
        self.load()

    def _defaults(self) -> ProgressSnapshot:
        first = self.catalog.first_level_id
        return ProgressSnapshot(
            unlocked_levels=[first] if first else [],
            current_level_id=first,
            persistent_rewards=PersistentRewards(reward_ids=list(self.catalog.starting_rewards)),
        )

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> None:
        """Replace in-memory progress with the stored snapshot, if any."""
        snapshot = self.store.load() if self.store else None
        if snapshot is None:
            self.snapshot = self._defaults()
            return
        self.restore(snapshot)
        logger.info(
            f"Progress loaded: {len(self.snapshot.completed_levels)} levels completed, "
            f"{len(self.snapshot.persistent_rewards.reward_ids)} rewards unlocked"
        )

    def restore(self, snapshot: ProgressSnapshot) -> None:
        """Adopt a snapshot, dropping references the catalog does not know."""
        snapshot = snapshot.model_copy(deep=True)
        rewards = snapshot.persistent_rewards
        unknown = [rid for rid in rewards.reward_ids if self.catalog.reward(rid) is None]
        if unknown:
            logger.warning(f"Dropping unknown rewards from saved progress: {unknown}")
            rewards.reward_ids = [rid for rid in rewards.reward_ids if rid not in unknown]

        bonuses = {
            kind: amount for kind, amount in rewards.resource_bonuses.items()
            if kind in RESOURCE_NAMES and amount >= 0
        }
        if len(bonuses) != len(rewards.resource_bonuses):
            dropped = sorted(set(rewards.resource_bonuses) - set(bonuses))
            logger.warning(f"Dropping invalid resource bonuses from saved progress: {dropped}")
            rewards.resource_bonuses = bonuses

        current = snapshot.current_level_id
        if current and not is_random_level_id(current) and self.catalog.level(current) is None:
            logger.warning(f"Saved current level '{current}' is unknown - restarting the campaign")
            snapshot.current_level_id = self.catalog.first_level_id

        unknown_levels = [
            lid for lid in snapshot.unlocked_levels if self.catalog.level(lid) is None
        ]
        if unknown_levels:
            logger.warning(f"Dropping unknown levels from saved progress: {unknown_levels}")
            snapshot.unlocked_levels = [
                lid for lid in snapshot.unlocked_levels if lid not in unknown_levels
            ]

        self.snapshot = snapshot
        self._random_level = None

    def save(self) -> None:
        if self.store is not None:
            self.store.save(self.snapshot)

    def reset(self) -> None:
        """Forget all progress."""
        self.snapshot = self._defaults()
        self.last_completed_level = None
        self._random_level = None
        self.save()
        logger.info("Progress reset")

    # =========================================================================
    # Levels
    # =========================================================================

    @property
    def unlocked_reward_ids(self) -> list[str]:
        return list(self.snapshot.persistent_rewards.reward_ids)

    @property
    def resource_bonuses(self) -> dict[str, int]:
        return dict(self.snapshot.persistent_rewards.resource_bonuses)

    @property
    def campaign_complete(self) -> bool:
        return self.snapshot.current_level_id is None

    def is_unlocked(self, level_id: str) -> bool:
        if is_random_level_id(level_id):
            return level_id == self.snapshot.current_level_id
        return level_id in self.snapshot.unlocked_levels

    def level(self, level_id: str) -> LevelDefinition | None:
        if is_random_level_id(level_id):
            current = self.current_level()
            return current if current is not None and current.id == level_id else None
        return self.catalog.level(level_id)

    def current_level(self) -> LevelDefinition | None:
        """The level to play next, or None after the campaign's last level."""
        level_id = self.snapshot.current_level_id
        if level_id is None:
            return None
        if not is_random_level_id(level_id):
            return self.catalog.level(level_id)
        if self._random_level is None or self._random_level.id != level_id:
            # Regenerated from its number after a reload.
            number = self.snapshot.current_random_level or self.snapshot.random_levels_completed + 1
            self._random_level = self.random_level_factory(
                number, Random(number), self._reward_pool()
            )
        return self._random_level

    def start_random_level(self, rng: Random) -> LevelDefinition:
        """Generate the next random level and make it current."""
        number = self.snapshot.random_levels_completed + 1
        level = self.random_level_factory(number, rng, self._reward_pool())
        self._random_level = level
        self.snapshot.current_level_id = level.id
        self.snapshot.current_random_level = number
        self.save()
        logger.info(f"Random level {number} generated: goal {level.reputation_goal} in {level.turn_limit} turns")
        return level

    def advance_to_next_level(self) -> str | None:
        """
        Mark the current level completed and move on.

        Campaign levels unlock their successor. Random levels only count
        completions; the next one is generated by start_random_level().
        Returns the new current level id.
        """
        level = self.current_level()
        if level is None:
            return None

        if level.is_random:
            self.snapshot.random_levels_completed += 1
            self.snapshot.current_random_level = None
            self.snapshot.current_level_id = None
            self._random_level = None
            return None

        if level.id not in self.snapshot.completed_levels:
            self.snapshot.completed_levels.append(level.id)
        next_id = level.next_level_id
        if next_id and self.catalog.level(next_id) is None:
            logger.warning(f"Level '{level.id}' points to unknown next level '{next_id}'")
            next_id = None
        if next_id and next_id not in self.snapshot.unlocked_levels:
            self.snapshot.unlocked_levels.append(next_id)
        self.snapshot.current_level_id = next_id
        return next_id

    def starting_resources(self, level: LevelDefinition) -> dict[str, int]:
        """Level starting resources plus persistent bonuses."""
        totals = {kind.value: amount for kind, amount in level.starting_resources.items()}
        for kind, bonus in resource_map(self.snapshot.persistent_rewards.resource_bonuses).items():
            totals[kind.value] = max(0, totals.get(kind.value, 0) + bonus)
        return totals

    # =========================================================================
    # Rewards
    # =========================================================================

    def _reward_pool(self) -> list[str]:
        owned = set(self.snapshot.persistent_rewards.reward_ids)
        return [rid for rid in self.catalog.rewards if rid not in owned]

    def available_rewards(self) -> list[RewardDefinition]:
        """Rewards offered by the level just completed that are not owned yet."""
        level = self.last_completed_level
        if level is None:
            return []
        owned = set(self.snapshot.persistent_rewards.reward_ids)
        rewards = []
        for reward_id in level.reward_ids:
            reward = self.catalog.reward(reward_id)
            if reward is None:
                logger.warning(f"Level '{level.id}' offers unknown reward '{reward_id}'")
            elif reward_id not in owned:
                rewards.append(reward)
        return rewards

    def record_reward(self, reward_id: str) -> bool:
        rewards = self.snapshot.persistent_rewards
        if reward_id in rewards.reward_ids:
            return False
        rewards.reward_ids.append(reward_id)
        return True

    def add_resource_bonus(self, kind: str, amount: int) -> None:
        """Add a starting resource bonus applied to every later level."""
        resource_map({kind: amount})
        bonuses = self.snapshot.persistent_rewards.resource_bonuses
        bonuses[kind] = bonuses.get(kind, 0) + amount
        self.save()

    # =========================================================================
    # ProgressionHooks
    # =========================================================================

    def on_level_completed(self, level: LevelDefinition, reputation: int) -> None:
        self.last_completed_level = level
        if level.id == self.snapshot.current_level_id:
            self.advance_to_next_level()
        elif not level.is_random and level.id not in self.snapshot.completed_levels:
            self.snapshot.completed_levels.append(level.id)
        self.save()
        logger.info(f"Level '{level.id}' completed with {reputation} reputation")

    def on_level_failed(self, level: LevelDefinition, reputation: int) -> None:
        logger.info(f"Level '{level.id}' failed with {reputation}/{level.reputation_goal} reputation")

    def on_reward_unlocked(self, reward_id: str) -> None:
        if self.record_reward(reward_id):
            self.save()
            logger.info(f"Reward '{reward_id}' unlocked")

    def to_dict(self) -> dict:
        return {
            **self.snapshot.model_dump(),
            "campaign_complete": self.campaign_complete,
            "available_rewards": [reward.id for reward in self.available_rewards()],
        }
