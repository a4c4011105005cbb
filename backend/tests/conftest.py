"""
Habit Tracker Backend - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own habit document inside pytest's tmp_path, so
       no test can see another test's habits.

Fixture Hierarchy (all function-scoped):
    data_file ─▶ tree_store ─▶ repository ─▶ test_client
    sample_forest           (in-memory habits, nothing written)
    seeded_repository       (repository whose document holds sample_forest)
"""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before habit_tracker.config is imported
os.environ["DATA_FILE"] = os.path.join(
    tempfile.mkdtemp(prefix="habit_tracker_test_"), "habits.json"
)
os.environ["LOG_LEVEL"] = "WARNING"

from habit_tracker.models.habit import Habit  # noqa: E402
from habit_tracker.services.habit_repository import (  # noqa: E402
    HabitRepository,
    get_habit_repository,
)
from habit_tracker.tree_store import TreeStore  # noqa: E402


@pytest.fixture
def data_file(tmp_path):
    """Path of a habit document that does not exist yet."""
    return tmp_path / "data" / "habits.json"


@pytest.fixture
def tree_store(data_file):
    return TreeStore(data_file)


@pytest.fixture
def repository(tree_store):
    """A fresh repository (and writer lock) per test."""
    return HabitRepository(tree_store)


@pytest.fixture
def sample_forest():
    """
    Three levels deep, IDs deliberately not in tree order:

        1 Drink water
        ├── 2 Morning glass
        │   └── 7 Add lemon
        └── 3 Evening glass
        5 Read
    """
    return [
        Habit(
            id=1,
            title="Drink water",
            description="8 glasses/day",
            subHabits=[
                Habit(
                    id=2,
                    title="Morning glass",
                    description="Right after waking up",
                    subHabits=[Habit(id=7, title="Add lemon", description="Half a lemon")],
                ),
                Habit(id=3, title="Evening glass", description="Before dinner"),
            ],
        ),
        Habit(id=5, title="Read", description="20 pages", completed=True, streak=4),
    ]


@pytest_asyncio.fixture
async def seeded_repository(repository, sample_forest):
    await repository.store.save(sample_forest)
    return repository


@pytest_asyncio.fixture
async def test_client(repository):
    """
    HTTPX AsyncClient wired straight into the FastAPI app.

    The app's repository dependency is swapped for the per-test repository,
    so requests read and write this test's document only.
    """
    from habit_tracker.main import app

    app.dependency_overrides[get_habit_repository] = lambda: repository
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
