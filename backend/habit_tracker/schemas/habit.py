"""
Habit Tracker Backend - Pydantic Request/Response Schemas
===========================================================

What:  Pydantic models defining the API contract for /habits and /health.
How:   FastAPI validates request bodies against these models, serializes
       responses, and generates the OpenAPI docs from them.
Who:   Used by route handlers. Habit responses reuse models.habit.Habit
       directly, since the stored node and the API node share one shape.

Body keys are camelCase to match the stored document (`parentId`); the
snake_case names are accepted too.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class HabitCreate(BaseModel):
    """
    What:  Body of POST /habits.

    title and description are optional at the schema level so that a
    missing value reaches the repository and comes back as the API's own
    400 validation_error ("Title and description are required").
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, description="Habit title (required, non-empty)")
    description: Optional[str] = Field(
        default=None, description="Habit description (required, non-empty)"
    )
    parent_id: Optional[int] = Field(
        default=None,
        alias="parentId",
        description="Attach the new habit under this habit. Omit (or 0) for a root habit.",
    )


class HabitUpdate(BaseModel):
    """
    What:  Body of PUT /habits/{id}. Every field is optional.

    Update rules (applied by HabitRepository.update):
        title / description: an empty string leaves the value unchanged
        completed / streak:  any supplied value applies, including false and 0
    """

    title: Optional[str] = Field(default=None, description="New title")
    description: Optional[str] = Field(default=None, description="New description")
    completed: Optional[bool] = Field(default=None, description="Completion flag")
    streak: Optional[int] = Field(default=None, ge=0, description="Streak counter (>= 0)")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every failed request.

    Example:
        {
            "error": "not_found",
            "status": 404,
            "message": "Habit with ID 7 not found",
            "details": {"resource": "Habit", "habit_id": 7},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    status: int = Field(description="HTTP status code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response.

    storage values:
        ok          document present and parseable
        missing     no document yet (first run, still healthy)
        unreadable  file system refused the read
        corrupt     document is not a valid habit forest
    """
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    storage: str = Field(description="Habit document state")
    habit_count: int = Field(description="Number of habits at every depth")
    uptime_seconds: float = Field(description="Seconds since service started")
