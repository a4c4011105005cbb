"""
Habit Tracker Backend - Habit Tree Model
==========================================

What:  The Habit node (a habit with nested sub-habits) and the recursive
       helpers that walk, search and prune a forest of them.
How:   Pydantic model with a self-referencing `sub_habits` list. Each node
       owns its children; there are no back-references, so a forest is
       simply a `List[Habit]`.
Who:   Built by the tree store on load, mutated by the habit repository,
       returned directly by the route handlers.

Document shape (one node):
    {
        "id": 1,
        "title": "Drink water",
        "description": "8 glasses/day",
        "completed": false,
        "streak": 0,
        "subHabits": [ ...nodes of the same shape... ]
    }

Unknown keys found in the stored document are kept on the node
(`extra="allow"`) and written back unchanged on the next save.

Forest helpers:
    iter_habits(forest)        → pre-order walk over every node
    find_habit(forest, id)     → first node with that id, or None
    habit_depth(forest, id)    → nesting level of a node (roots are 1), or None
    max_habit_id(forest)       → largest id anywhere (0 for an empty forest)
    remove_habit(forest, id)   → detach a node and its subtree
    count_habits(forest)       → total number of nodes at every depth
"""

from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Habit(BaseModel):
    """
    A single habit and its nested sub-habits.

    Lifecycle:
        1. Created by HabitRepository.create() with completed=False, streak=0
        2. Mutated in place by HabitRepository.update()
        3. Removed together with its whole subtree by HabitRepository.delete()

    `id` is frozen: assigning to it raises a pydantic ValidationError.
    Other assignments are validated too, so a negative streak never reaches
    the document.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        validate_assignment=True,
    )

    id: int = Field(frozen=True, description="Unique ID across the whole forest")
    title: str = Field(description="Short name of the habit")
    description: str = Field(description="What the habit involves")
    completed: bool = Field(default=False, description="Whether the habit is done")
    streak: int = Field(default=0, ge=0, description="Consecutive completions")
    sub_habits: List["Habit"] = Field(
        default_factory=list,
        alias="subHabits",
        description="Child habits, in creation order",
    )

    def add_sub_habit(self, sub_habit: "Habit") -> None:
        """Append a child habit after the existing ones."""
        self.sub_habits.append(sub_habit)

    def render(self, indent: int = 0) -> List[str]:
        """
        Outline of this habit and its descendants, one line per node.

        Example:
            - [x] Drink water (Streak: 5)
              - [ ] Morning glass (Streak: 0)
        """
        mark = "x" if self.completed else " "
        lines = [f"{' ' * indent}- [{mark}] {self.title} (Streak: {self.streak})"]
        for sub in self.sub_habits:
            lines.extend(sub.render(indent + 2))
        return lines

    def to_document(self) -> dict:
        """JSON-ready dict using the document's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


Habit.model_rebuild()


# ══════════════════════════════════════════════════════════════════════════
# Forest Helpers
# ══════════════════════════════════════════════════════════════════════════

def iter_habits(habits: List[Habit]) -> Iterator[Habit]:
    """
    Yield every node in depth-first pre-order.

    Each root is yielded before its subtree, and a whole subtree is
    exhausted before moving on to the next sibling.
    """
    for habit in habits:
        yield habit
        yield from iter_habits(habit.sub_habits)


def find_habit(habits: List[Habit], habit_id: int) -> Optional[Habit]:
    """Return the first node (pre-order) whose id matches, or None."""
    for habit in iter_habits(habits):
        if habit.id == habit_id:
            return habit
    return None


def max_habit_id(habits: List[Habit]) -> int:
    return max((habit.id for habit in iter_habits(habits)), default=0)


def remove_habit(habits: List[Habit], habit_id: int) -> Optional[Habit]:
    """
    Detach the first node matching `habit_id` from whichever list holds it.

    The current level is checked before descending, so a root match wins
    over a nested one. The removed node keeps its children, which leave the
    forest with it.

    Returns:
        The removed node, or None if no node matched (forest untouched).
    """
    for index, habit in enumerate(habits):
        if habit.id == habit_id:
            return habits.pop(index)
    for habit in habits:
        removed = remove_habit(habit.sub_habits, habit_id)
        if removed is not None:
            return removed
    return None


def count_habits(habits: List[Habit]) -> int:
    return sum(1 for _ in iter_habits(habits))


def habit_depth(habits: List[Habit], habit_id: int) -> Optional[int]:
    """Nesting level of the first node (pre-order) whose id matches; roots are 1."""
    stack = [(habit, 1) for habit in reversed(habits)]
    while stack:
        habit, depth = stack.pop()
        if habit.id == habit_id:
            return depth
        stack.extend((sub, depth + 1) for sub in reversed(habit.sub_habits))
    return None
