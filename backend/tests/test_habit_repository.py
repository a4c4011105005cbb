"""
Habit Tracker Backend - Habit Repository Unit Tests
=====================================================

What:  Tests for create / read / update / delete over the habit forest and
       for the single-writer lock.
How:   Real TreeStore on a temp file; saves are wrapped or patched where a
       test needs to see (or break) them.

What we test:
    ✅ ID = max ID anywhere + 1, never reused for lower deleted IDs
    ✅ Sub-habit creation, at any depth
    ✅ Nesting stops at max_depth and deep chains stay readable
    ✅ Wrong-typed input raises ValidationError and writes nothing
    ✅ Update field rules (empty strings ignored, False / 0 applied)
    ✅ Delete removes exactly one subtree
    ✅ Unknown IDs raise NotFoundError and write nothing
    ✅ Concurrent creates get distinct IDs and all survive
    ✅ The writer lock is released after a failed save
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from habit_tracker.exceptions import NotFoundError, StorageIOError, ValidationError
from habit_tracker.models.habit import count_habits, find_habit, iter_habits
from habit_tracker.services.habit_repository import HabitRepository


class TestCreate:
    """Tests for HabitRepository.create()."""

    @pytest.mark.asyncio
    async def test_first_habit_on_empty_store(self, repository):
        habit = await repository.create("Drink water", "8 glasses/day")

        assert habit.to_document() == {
            "id": 1,
            "title": "Drink water",
            "description": "8 glasses/day",
            "completed": False,
            "streak": 0,
            "subHabits": [],
        }
        forest = await repository.list_all()
        assert [h.id for h in forest] == [1]

    @pytest.mark.asyncio
    async def test_sub_habit_is_appended_to_parent(self, repository):
        await repository.create("Drink water", "8 glasses/day")

        child = await repository.create("Morning glass", "Right after waking up", parent_id=1)

        forest = await repository.list_all()
        assert child.id == 2
        assert len(forest) == 1
        assert [h.id for h in forest[0].sub_habits] == [2]

    @pytest.mark.asyncio
    async def test_sub_habit_of_nested_parent(self, seeded_repository):
        child = await seeded_repository.create("Sparkling", "Fizzy water", parent_id=7)

        parent = await seeded_repository.find_by_id(7)
        assert [h.id for h in parent.sub_habits] == [child.id]

    @pytest.mark.asyncio
    async def test_id_is_max_of_whole_forest_plus_one(self, seeded_repository):
        # Highest ID (7) is nested two levels down
        habit = await seeded_repository.create("Stretch", "10 minutes")

        assert habit.id == 8

    @pytest.mark.asyncio
    async def test_deleted_lower_ids_are_not_reused(self, seeded_repository):
        await seeded_repository.delete(3)

        habit = await seeded_repository.create("Stretch", "10 minutes")

        assert habit.id == 8

    @pytest.mark.asyncio
    async def test_unknown_parent_writes_nothing(self, seeded_repository, data_file):
        before = data_file.read_bytes()

        with pytest.raises(NotFoundError) as exc_info:
            await seeded_repository.create("Orphan", "No parent", parent_id=42)

        assert exc_info.value.habit_id == 42
        assert data_file.read_bytes() == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,description", [("", "d"), ("t", ""), (None, "d")])
    async def test_missing_title_or_description_rejected(
        self, repository, data_file, title, description
    ):
        with pytest.raises(ValidationError, match="required"):
            await repository.create(title, description)

        assert not data_file.exists()

    @pytest.mark.asyncio
    async def test_parent_id_zero_creates_root_habit(self, seeded_repository):
        habit = await seeded_repository.create("Stretch", "10 minutes", parent_id=0)

        forest = await seeded_repository.list_all()
        assert [h.id for h in forest] == [1, 5, habit.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,description", [(123, "d"), ("t", ["d"])])
    async def test_non_string_text_rejected(self, repository, data_file, title, description):
        with pytest.raises(ValidationError, match="must be a string"):
            await repository.create(title, description)

        assert not data_file.exists()

    @pytest.mark.asyncio
    async def test_nesting_stops_at_max_depth(self, tree_store, data_file):
        repository = HabitRepository(tree_store, max_depth=3)
        await repository.create("Level 1", "d")
        await repository.create("Level 2", "d", parent_id=1)
        await repository.create("Level 3", "d", parent_id=2)
        before = data_file.read_bytes()

        with pytest.raises(ValidationError) as exc_info:
            await repository.create("Level 4", "d", parent_id=3)

        assert exc_info.value.field == "parentId"
        assert data_file.read_bytes() == before
        # Siblings at an allowed level are still fine
        await repository.create("Level 3b", "d", parent_id=2)

    @pytest.mark.asyncio
    async def test_deepest_chain_stays_readable(self, repository):
        await repository.create("Level 1", "d")
        for n in range(2, repository.max_depth + 1):
            await repository.create(f"Level {n}", "d", parent_id=n - 1)

        forest = await repository.list_all()
        deepest = await repository.find_by_id(repository.max_depth)
        assert count_habits(forest) == repository.max_depth
        assert deepest.title == f"Level {repository.max_depth}"
        with pytest.raises(ValidationError):
            await repository.create("Too deep", "d", parent_id=repository.max_depth)


class TestRead:
    """Tests for list_all() and find_by_id()."""

    @pytest.mark.asyncio
    async def test_list_all_on_empty_store(self, repository):
        assert await repository.list_all() == []

    @pytest.mark.asyncio
    async def test_list_all_keeps_tree(self, seeded_repository):
        forest = await seeded_repository.list_all()

        assert [h.id for h in iter_habits(forest)] == [1, 2, 7, 3, 5]

    @pytest.mark.asyncio
    async def test_find_nested_habit(self, seeded_repository):
        habit = await seeded_repository.find_by_id(7)

        assert habit.title == "Add lemon"

    @pytest.mark.asyncio
    async def test_find_unknown_habit(self, seeded_repository):
        with pytest.raises(NotFoundError, match="Habit with ID 99 not found"):
            await seeded_repository.find_by_id(99)


class TestUpdate:
    """Tests for HabitRepository.update()."""

    @pytest.mark.asyncio
    async def test_completed_and_streak_only(self, seeded_repository):
        habit = await seeded_repository.update(1, None, None, True, 5)

        assert habit.completed is True
        assert habit.streak == 5
        assert habit.title == "Drink water"
        assert habit.description == "8 glasses/day"
        stored = await seeded_repository.find_by_id(1)
        assert stored.to_document() == habit.to_document()

    @pytest.mark.asyncio
    async def test_false_and_zero_overwrite(self, seeded_repository):
        # Habit 5 starts completed with streak 4
        habit = await seeded_repository.update(5, completed=False, streak=0)

        assert habit.completed is False
        assert habit.streak == 0

    @pytest.mark.asyncio
    async def test_empty_strings_leave_text_unchanged(self, seeded_repository):
        habit = await seeded_repository.update(5, title="", description="")

        assert habit.title == "Read"
        assert habit.description == "20 pages"

    @pytest.mark.asyncio
    async def test_nested_habit_text_update(self, seeded_repository):
        await seeded_repository.update(7, title="Add lime", description="A slice")

        forest = await seeded_repository.list_all()
        nested = find_habit(forest, 7)
        assert (nested.title, nested.description) == ("Add lime", "A slice")
        assert find_habit(forest, 2).title == "Morning glass"

    @pytest.mark.asyncio
    async def test_unknown_habit_writes_nothing(self, seeded_repository, data_file):
        before = data_file.read_bytes()

        with pytest.raises(NotFoundError):
            await seeded_repository.update(99, title="Nope")

        assert data_file.read_bytes() == before

    @pytest.mark.asyncio
    async def test_negative_streak_rejected(self, seeded_repository, data_file):
        before = data_file.read_bytes()

        with pytest.raises(ValidationError) as exc_info:
            await seeded_repository.update(5, streak=-1)

        assert exc_info.value.field == "streak"
        assert data_file.read_bytes() == before
        assert (await seeded_repository.find_by_id(5)).streak == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [{"streak": "5"}, {"streak": 1.5}, {"streak": True}, {"completed": "yes"}, {"title": 123}],
    )
    async def test_wrong_types_rejected(self, seeded_repository, data_file, changes):
        before = data_file.read_bytes()

        with pytest.raises(ValidationError):
            await seeded_repository.update(5, **changes)

        assert data_file.read_bytes() == before


class TestDelete:
    """Tests for HabitRepository.delete()."""

    @pytest.mark.asyncio
    async def test_delete_root_removes_subtree(self, seeded_repository):
        before = count_habits(await seeded_repository.list_all())

        await seeded_repository.delete(1)

        forest = await seeded_repository.list_all()
        # 1 plus its descendants 2, 7, 3
        assert count_habits(forest) == before - 4
        assert [h.id for h in forest] == [5]

    @pytest.mark.asyncio
    async def test_delete_nested_keeps_siblings_and_ancestors(self, seeded_repository):
        await seeded_repository.delete(2)

        forest = await seeded_repository.list_all()
        assert [h.id for h in iter_habits(forest)] == [1, 3, 5]

    @pytest.mark.asyncio
    async def test_deleted_child_is_gone(self, repository):
        await repository.create("Drink water", "8 glasses/day")
        await repository.create("Morning glass", "...", parent_id=1)

        await repository.delete(1)

        assert await repository.list_all() == []
        with pytest.raises(NotFoundError) as exc_info:
            await repository.find_by_id(2)
        assert exc_info.value.habit_id == 2

    @pytest.mark.asyncio
    async def test_unknown_habit_writes_nothing(self, seeded_repository):
        with patch.object(seeded_repository.store, "save", new=AsyncMock()) as save:
            with pytest.raises(NotFoundError):
                await seeded_repository.delete(99)

        save.assert_not_awaited()


class TestWriterLock:
    """Tests for the single-writer discipline."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, repository):
        created = await asyncio.gather(
            *(repository.create(f"Habit {n}", "concurrent") for n in range(10))
        )

        assert sorted(h.id for h in created) == list(range(1, 11))
        forest = await repository.list_all()
        assert sorted(h.id for h in forest) == list(range(1, 11))

    @pytest.mark.asyncio
    async def test_concurrent_mixed_writes(self, seeded_repository):
        await asyncio.gather(
            seeded_repository.create("Stretch", "10 minutes"),
            seeded_repository.create("Lemon zest", "Grated", parent_id=7),
            seeded_repository.update(5, streak=10),
            seeded_repository.delete(3),
        )

        forest = await seeded_repository.list_all()
        ids = [h.id for h in iter_habits(forest)]
        assert sorted(ids) == [1, 2, 5, 7, 8, 9]
        assert find_habit(forest, 5).streak == 10

    @pytest.mark.asyncio
    async def test_lock_held_during_save(self, repository):
        seen = []
        real_save = repository.store.save

        async def spy(habits):
            seen.append(repository.is_writing)
            await real_save(habits)

        with patch.object(repository.store, "save", new=spy):
            await repository.create("Drink water", "8 glasses/day")

        assert seen == [True]
        assert repository.is_writing is False

    @pytest.mark.asyncio
    async def test_lock_released_after_failed_save(self, repository):
        failing = AsyncMock(side_effect=StorageIOError(message="Failed to persist habit data"))

        with patch.object(repository.store, "save", new=failing):
            with pytest.raises(StorageIOError):
                await repository.create("Drink water", "8 glasses/day")

        assert repository.is_writing is False
        habit = await repository.create("Drink water", "8 glasses/day")
        assert habit.id == 1

    @pytest.mark.asyncio
    async def test_lock_released_after_not_found(self, seeded_repository):
        with pytest.raises(NotFoundError):
            await seeded_repository.update(99, streak=1)

        assert seeded_repository.is_writing is False
