"""
Habit Tracker Backend - Habit Repository (Tree Operations + Writer Lock)
==========================================================================

What:  Create, read, update and delete habits anywhere in the habit forest.
How:   Every call loads a fresh forest from the TreeStore, works on it in
       memory with the recursive helpers from models.habit, and (for
       mutations) writes the whole forest back.
Who:   Called by the /habits route handlers; calls the TreeStore.
When:  Once per API request. Nothing is cached between calls.

Write Serialization:
    Two states, Idle and Writing, held by an asyncio.Lock (the writer
    token). A mutation holds the token for its entire load → mutate → save
    cycle, so two concurrent creates can never read the same forest and
    hand out the same ID. `async with` releases the token on success and
    on every failure path.

        create/update/delete:  acquire ─▶ load ─▶ mutate ─▶ save ─▶ release
        list_all/find_by_id:   load (no token)

    Reads skip the token. They still never see a torn document because
    TreeStore.save replaces the file in one rename.

ID Assignment:
    new id = max(id of every node at every depth) + 1
    IDs are never renumbered. Deleting a node that does not hold the
    maximum ID never frees its ID for reuse.
"""

import asyncio
import logging
from typing import List, Optional

from habit_tracker.config import settings
from habit_tracker.exceptions import NotFoundError, ValidationError
from habit_tracker.models.habit import (
    Habit,
    count_habits,
    find_habit,
    habit_depth,
    max_habit_id,
    remove_habit,
)
from habit_tracker.tree_store import TreeStore

logger = logging.getLogger(__name__)


class HabitRepository:
    """
    Recursive tree operations over the persisted habit forest.

    Responsibilities:
        - list_all():   The whole forest, as stored
        - find_by_id(): Depth-first pre-order lookup
        - create():     New root habit or new sub-habit of an existing one
        - update():     Change title / description / completed / streak
        - delete():     Remove a habit together with its subtree

    Error Handling Strategy:
        NotFoundError and ValidationError are raised before anything is
        written, so a failed call leaves the document untouched. Storage
        errors from the TreeStore propagate unchanged.
    """

    def __init__(self, store: Optional[TreeStore] = None, max_depth: Optional[int] = None):
        self.store = store or TreeStore()
        self.max_depth = settings.max_depth if max_depth is None else max_depth
        self._write_lock = asyncio.Lock()

    @property
    def is_writing(self) -> bool:
        """True while a mutation holds the writer token."""
        return self._write_lock.locked()

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_all(self) -> List[Habit]:
        habits = await self.store.load()
        if logger.isEnabledFor(logging.DEBUG):
            for habit in habits:
                for line in habit.render():
                    logger.debug(line)
        return habits

    async def find_by_id(self, habit_id: int) -> Habit:
        """
        Find a habit at any depth.

        Raises:
            NotFoundError: No habit with this ID exists in the forest.
        """
        habits = await self.store.load()
        habit = find_habit(habits, habit_id)
        if habit is None:
            raise NotFoundError(habit_id)
        return habit

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(
        self,
        title: str,
        description: str,
        parent_id: Optional[int] = None,
    ) -> Habit:
        """
        Create a habit at the root or under an existing habit.

        Args:
            title:       Non-empty habit title
            description: Non-empty habit description
            parent_id:   ID of the parent habit; None or 0 appends to the root list

        Returns:
            The new habit: next free ID, completed=False, streak=0, no children.

        Raises:
            ValidationError: title or description is missing, empty or not a
                             string, or the parent already sits at max_depth.
            NotFoundError:   parent_id matches no habit (nothing is written).
        """
        if not title or not description:
            raise ValidationError(
                message="Title and description are required",
                field="title" if not title else "description",
            )
        _require_text(title, "title")
        _require_text(description, "description")

        async with self._write_lock:
            habits = await self.store.load()
            habit = Habit(id=max_habit_id(habits) + 1, title=title, description=description)

            if parent_id:
                parent = find_habit(habits, parent_id)
                if parent is None:
                    raise NotFoundError(parent_id, resource="Parent habit")
                if habit_depth(habits, parent_id) >= self.max_depth:
                    raise ValidationError(
                        message=f"Habits cannot be nested more than {self.max_depth} levels deep",
                        field="parentId",
                        context={"parent_id": parent_id, "max_depth": self.max_depth},
                    )
                parent.add_sub_habit(habit)
            else:
                habits.append(habit)

            await self.store.save(habits)

        logger.info("Habit created (ID: %d, parent: %s): %s", habit.id, parent_id, habit.title)
        return habit

    async def update(
        self,
        habit_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        completed: Optional[bool] = None,
        streak: Optional[int] = None,
    ) -> Habit:
        """
        Update the scalar fields of one habit.

        Field rules:
            title, description: overwritten only by a non-empty string
            completed, streak:  overwritten whenever not None (False and 0 count)

        Raises:
            ValidationError: A supplied value has the wrong type, or streak < 0.
            NotFoundError:   No habit with this ID (nothing is written).
        """
        if title:
            _require_text(title, "title")
        if description:
            _require_text(description, "description")
        if completed is not None and not isinstance(completed, bool):
            raise ValidationError(message="completed must be a boolean", field="completed")
        if streak is not None and (
            isinstance(streak, bool) or not isinstance(streak, int) or streak < 0
        ):
            raise ValidationError(
                message="streak must be a non-negative integer", field="streak"
            )

        async with self._write_lock:
            habits = await self.store.load()
            habit = find_habit(habits, habit_id)
            if habit is None:
                raise NotFoundError(habit_id)

            if title:
                habit.title = title
            if description:
                habit.description = description
            if completed is not None:
                habit.completed = completed
            if streak is not None:
                habit.streak = streak

            await self.store.save(habits)

        logger.info("Habit updated (ID: %d): %s", habit_id, habit.title)
        return habit

    async def delete(self, habit_id: int) -> None:
        """
        Delete a habit and every sub-habit beneath it.

        Raises:
            NotFoundError: No habit with this ID (nothing is written).
        """
        async with self._write_lock:
            habits = await self.store.load()
            removed = remove_habit(habits, habit_id)
            if removed is None:
                raise NotFoundError(habit_id)
            await self.store.save(habits)

        logger.info(
            "Habit deleted (ID: %d, %d habits removed)",
            habit_id,
            count_habits([removed]),
        )


def _require_text(value, field: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(message=f"{field} must be a string", field=field)


# ── Singleton Instance ────────────────────────────────────────────────────
# One repository per process: the writer lock only serializes callers that
# share this instance.
habit_repository = HabitRepository()


def get_habit_repository() -> HabitRepository:
    """FastAPI dependency returning the process-wide repository."""
    return habit_repository
