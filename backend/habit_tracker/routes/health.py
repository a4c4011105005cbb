"""
Habit Tracker Backend - Health Check Route
============================================

What:  Banner route and health check endpoint for monitoring probes.
How:   Loads the habit document once and reports whether it is usable.
Who:   Called by Docker health checks, load balancers and humans with curl.

Status levels:
    healthy:   document readable (or not created yet)    → HTTP 200
    unhealthy: document unreadable or corrupt            → HTTP 503
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse

from habit_tracker import __version__
from habit_tracker.exceptions import CorruptDataError, StorageIOError
from habit_tracker.models.habit import count_habits
from habit_tracker.schemas.habit import HealthResponse
from habit_tracker.services.habit_repository import HabitRepository, get_habit_repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Daily Habit Tracker API is running!"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Habit data unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    repository: HabitRepository = Depends(get_habit_repository),
) -> HealthResponse:
    """
    Check that the habit document can be loaded.

    Goes through the same TreeStore.load() as every API call, so a healthy
    answer means the next request will be able to read the forest.
    """
    storage = "ok"
    habit_count = 0

    try:
        if not await repository.store.exists():
            storage = "missing"
        habit_count = count_habits(await repository.store.load())
    except CorruptDataError as e:
        storage = "corrupt"
        logger.warning("Health check: habit document corrupt: %s", e.message)
    except StorageIOError as e:
        storage = "unreadable"
        logger.warning("Health check: habit document unreadable: %s", e.message)

    overall = "healthy" if storage in ("ok", "missing") else "unhealthy"
    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        storage=storage,
        habit_count=habit_count,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
