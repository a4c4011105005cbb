"""
Habit Tracker Backend - Habit Route Handlers
==============================================

What:  CRUD endpoints for the habit forest under /habits.
How:   Parses path/body values, delegates to HabitRepository, returns JSON.

Status codes:
    GET    /habits         200  forest as a JSON array
    GET    /habits/{id}    200  habit           | 404 unknown id
    POST   /habits         201  created habit   | 400 missing field | 404 unknown parent
    PUT    /habits/{id}    200  updated habit   | 404 unknown id
    DELETE /habits/{id}    204  empty body      | 404 unknown id
    any                    500  storage unreadable, unwritable or corrupt
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from habit_tracker.models.habit import Habit
from habit_tracker.schemas.habit import ErrorResponse, HabitCreate, HabitUpdate
from habit_tracker.services.habit_repository import HabitRepository, get_habit_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/habits", tags=["Habits"])

_not_found = {404: {"description": "Habit not found", "model": ErrorResponse}}
_server_error = {500: {"description": "Habit data unavailable", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[Habit],
    responses={**_server_error},
    summary="List every habit",
)
async def list_habits(
    repository: HabitRepository = Depends(get_habit_repository),
) -> List[Habit]:
    """Root habits in creation order, each with its full sub-habit tree."""
    habits = await repository.list_all()
    logger.info("GET /habits: %d root habits retrieved", len(habits))
    return habits


@router.get(
    "/{habit_id}",
    response_model=Habit,
    responses={**_not_found, **_server_error},
    summary="Get a habit by ID",
)
async def get_habit(
    habit_id: int,
    repository: HabitRepository = Depends(get_habit_repository),
) -> Habit:
    """
    Looks the ID up at every nesting depth, so sub-habits are addressable
    exactly like root habits.
    """
    return await repository.find_by_id(habit_id)


@router.post(
    "",
    status_code=201,
    response_model=Habit,
    responses={
        400: {"description": "Title or description missing", "model": ErrorResponse},
        404: {"description": "Parent habit not found", "model": ErrorResponse},
        **_server_error,
    },
    summary="Create a habit or sub-habit",
)
async def create_habit(
    body: HabitCreate,
    repository: HabitRepository = Depends(get_habit_repository),
) -> Habit:
    """
    Create a habit.

    With `parentId` the habit is appended to that habit's `subHabits`;
    without it (or with `parentId: 0`) the habit becomes a new root. The ID
    is one more than the highest ID anywhere in the forest.
    """
    habit = await repository.create(body.title, body.description, body.parent_id)
    logger.info("POST /habits: New habit created (ID: %d)", habit.id)
    return habit


@router.put(
    "/{habit_id}",
    response_model=Habit,
    responses={**_not_found, **_server_error},
    summary="Update a habit",
)
async def update_habit(
    habit_id: int,
    body: HabitUpdate,
    repository: HabitRepository = Depends(get_habit_repository),
) -> Habit:
    return await repository.update(
        habit_id,
        title=body.title,
        description=body.description,
        completed=body.completed,
        streak=body.streak,
    )


@router.delete(
    "/{habit_id}",
    status_code=204,
    response_class=Response,
    responses={**_not_found, **_server_error},
    summary="Delete a habit and its sub-habits",
)
async def delete_habit(
    habit_id: int,
    repository: HabitRepository = Depends(get_habit_repository),
) -> Response:
    await repository.delete(habit_id)
    return Response(status_code=204)
