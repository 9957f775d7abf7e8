"""
Tests for level progression and progress persistence.
"""

from random import Random

import pytest

from ..catalog.schema import CatalogError, ResourceKind
from ..session.progress import (
    InMemoryProgressStore,
    JsonFileProgressStore,
    LevelProgress,
    PersistentRewards,
    ProgressSnapshot,
)

R = ResourceKind


@pytest.fixture
def store():
    return InMemoryProgressStore()


@pytest.fixture
def progress(small_catalog, store):
    return LevelProgress(small_catalog, store)


def finish_campaign(progress, catalog):
    progress.on_level_completed(catalog.level("first"), 10)
    progress.on_level_completed(catalog.level("second"), 20)


class TestDefaults:
    """Tests for a fresh player."""

    def test_fresh_progress(self, progress):
        """Only the first level is unlocked and nothing is owned."""
        assert progress.snapshot.unlocked_levels == ["first"]
        assert progress.current_level().id == "first"
        assert progress.unlocked_reward_ids == []
        assert progress.available_rewards() == []
        assert not progress.campaign_complete

    def test_is_unlocked(self, progress):
        """Later levels stay locked until earned."""
        assert progress.is_unlocked("first")
        assert not progress.is_unlocked("second")
        assert not progress.is_unlocked("random_1")

    def test_starting_rewards_are_owned(self, mars_catalog):
        """Catalog starting rewards are unlocked from the start."""
        progress = LevelProgress(mars_catalog)

        assert progress.unlocked_reward_ids == list(mars_catalog.starting_rewards)


class TestCampaign:
    """Tests for moving through the campaign."""

    def test_completion_unlocks_next_level(self, progress, small_catalog):
        """Winning the current level unlocks and selects its successor."""
        progress.on_level_completed(small_catalog.level("first"), 12)

        assert progress.snapshot.completed_levels == ["first"]
        assert progress.snapshot.unlocked_levels == ["first", "second"]
        assert progress.current_level().id == "second"
        assert [r.id for r in progress.available_rewards()] == ["extraSteel", "bigLaunch"]

    def test_owned_rewards_are_not_offered(self, progress, small_catalog):
        """Rewards already unlocked drop out of the offer."""
        progress.on_level_completed(small_catalog.level("first"), 12)
        progress.on_reward_unlocked("extraSteel")

        assert [r.id for r in progress.available_rewards()] == ["bigLaunch"]
        assert progress.unlocked_reward_ids == ["extraSteel"]

    def test_replaying_a_level(self, progress, small_catalog):
        """Winning an earlier level again does not move the current level."""
        progress.on_level_completed(small_catalog.level("first"), 12)
        progress.on_level_completed(small_catalog.level("first"), 12)

        assert progress.snapshot.completed_levels == ["first"]
        assert progress.current_level().id == "second"

    def test_campaign_end(self, progress, small_catalog):
        """After the last level there is no current level."""
        finish_campaign(progress, small_catalog)

        assert progress.campaign_complete
        assert progress.current_level() is None
        assert progress.advance_to_next_level() is None
        assert progress.snapshot.completed_levels == ["first", "second"]

    def test_starting_resources_include_bonuses(self, progress, small_catalog):
        """Persistent bonuses are added to every level's resources."""
        progress.add_resource_bonus("concrete", 3)

        assert progress.starting_resources(small_catalog.level("first")) == {
            "concrete": 13,
            "steel": 10,
            "fuel": 10,
        }
        assert progress.resource_bonuses == {"concrete": 3}

    def test_unknown_bonus_resource(self, progress):
        """Bonuses must name a real resource."""
        with pytest.raises(CatalogError):
            progress.add_resource_bonus("plasma", 1)


class TestRandomLevels:
    """Tests for random levels after the campaign."""

    def test_start_random_level(self, progress, small_catalog):
        """Random levels are numbered from the completed count."""
        finish_campaign(progress, small_catalog)

        level = progress.start_random_level(Random(5))

        assert level.id == "random_1"
        assert level.is_random
        assert progress.current_level() is level
        assert progress.is_unlocked("random_1")
        assert progress.level("random_1") is level
        assert progress.snapshot.current_random_level == 1

    def test_random_rewards_come_from_unowned_pool(self, progress, small_catalog):
        """Owned rewards are never offered again."""
        finish_campaign(progress, small_catalog)
        for reward_id in ["extraSteel", "solarNeighbours", "cheapDepot", "bigLaunch"]:
            progress.record_reward(reward_id)

        level = progress.start_random_level(Random(5))

        assert sorted(level.reward_ids) == ["moreDepots", "starterBoost"]

    def test_completing_random_level(self, progress, small_catalog):
        """Completion counts and clears the current random level."""
        finish_campaign(progress, small_catalog)
        level = progress.start_random_level(Random(5))

        progress.on_level_completed(level, 25)

        assert progress.snapshot.random_levels_completed == 1
        assert progress.current_level() is None
        assert progress.start_random_level(Random(5)).id == "random_2"

    def test_random_level_survives_reload(self, small_catalog, store):
        """A saved random level is regenerated from its number."""
        progress = LevelProgress(small_catalog, store)
        finish_campaign(progress, small_catalog)
        progress.start_random_level(Random(5))

        reloaded = LevelProgress(small_catalog, store)

        level = reloaded.current_level()
        assert level.id == "random_1"
        assert level.reputation_goal == 25
        assert reloaded.current_level() is level


class TestPersistence:
    """Tests for saving and loading progress."""

    def test_in_memory_store_copies(self, progress, store):
        """Saved snapshots are not shared with the live progress."""
        progress.save()
        progress.snapshot.completed_levels.append("first")

        assert store.load().completed_levels == []

    def test_json_round_trip(self, small_catalog, tmp_path):
        """Progress written to disk is read back by a new instance."""
        path = tmp_path / "nested" / "progress.json"
        progress = LevelProgress(small_catalog, JsonFileProgressStore(path))
        progress.on_level_completed(small_catalog.level("first"), 12)
        progress.on_reward_unlocked("bigLaunch")

        reloaded = LevelProgress(small_catalog, JsonFileProgressStore(path))

        assert path.exists()
        assert reloaded.current_level().id == "second"
        assert reloaded.snapshot.unlocked_levels == ["first", "second"]
        assert reloaded.unlocked_reward_ids == ["bigLaunch"]

    def test_missing_file(self, tmp_path):
        """No file means no progress."""
        assert JsonFileProgressStore(tmp_path / "none.json").load() is None

    def test_corrupted_file_falls_back_to_defaults(self, small_catalog, tmp_path):
        """An unreadable file is ignored."""
        path = tmp_path / "progress.json"
        path.write_text("{not json", encoding="utf-8")

        progress = LevelProgress(small_catalog, JsonFileProgressStore(path))

        assert progress.current_level().id == "first"
        assert progress.snapshot.completed_levels == []

    def test_non_utf8_file_falls_back_to_defaults(self, small_catalog, tmp_path):
        """A file that is not UTF-8 text is ignored."""
        path = tmp_path / "progress.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        progress = LevelProgress(small_catalog, JsonFileProgressStore(path))

        assert progress.current_level().id == "first"
        assert progress.snapshot.completed_levels == []

    def test_invalid_snapshot_is_ignored(self, tmp_path):
        """Values outside the schema are rejected."""
        path = tmp_path / "progress.json"
        path.write_text('{"random_levels_completed": -1}', encoding="utf-8")

        assert JsonFileProgressStore(path).load() is None

    def test_restore_drops_unknown_ids(self, progress):
        """Rewards and levels the catalog does not know are dropped."""
        progress.restore(ProgressSnapshot(
            unlocked_levels=["first", "ghost"],
            current_level_id="ghost",
            persistent_rewards=PersistentRewards(reward_ids=["extraSteel", "phantom"]),
        ))

        assert progress.snapshot.unlocked_levels == ["first"]
        assert progress.current_level().id == "first"
        assert progress.unlocked_reward_ids == ["extraSteel"]

    def test_restore_drops_invalid_bonuses(self, progress, small_catalog):
        """Bonuses for unknown resources or below zero are dropped."""
        progress.restore(ProgressSnapshot(
            unlocked_levels=["first"],
            current_level_id="first",
            persistent_rewards=PersistentRewards(
                resource_bonuses={"gold": 5, "steel": -3, "fuel": 2},
            ),
        ))

        assert progress.resource_bonuses == {"fuel": 2}
        assert progress.starting_resources(small_catalog.level("first")) == {
            "concrete": 10,
            "steel": 10,
            "fuel": 12,
        }

    def test_reset(self, progress, small_catalog, store):
        """Reset forgets everything and saves."""
        finish_campaign(progress, small_catalog)
        progress.on_reward_unlocked("extraSteel")

        progress.reset()

        assert progress.current_level().id == "first"
        assert progress.unlocked_reward_ids == []
        assert store.load().completed_levels == []

    def test_to_dict(self, progress, small_catalog):
        """The view adds campaign status and the reward offer."""
        progress.on_level_completed(small_catalog.level("first"), 12)

        data = progress.to_dict()

        assert data["current_level_id"] == "second"
        assert data["campaign_complete"] is False
        assert data["available_rewards"] == ["extraSteel", "bigLaunch"]
