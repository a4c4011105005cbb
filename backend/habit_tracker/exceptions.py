"""
Habit Tracker Backend - Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for every failure the core can signal.
How:   Each exception carries a human-readable message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return one structured JSON error shape with the matching
       HTTP status code.
Who:   Raised by the tree store and the habit repository; caught by handlers.
When:  During request processing. No failure is fatal to the process and
       none is retried by the core.

Exception Hierarchy:
    HabitTrackerError (base)   → 500 Internal Server Error
    ├── ValidationError        → 400 Bad Request (client can fix the input)
    ├── NotFoundError          → 404 Not Found (carries the missing habit ID)
    ├── StorageIOError         → 500 (document unreadable or unwritable)
    └── CorruptDataError       → 500 (document is not a valid habit forest)

Client-side failures: ValidationError, NotFoundError.
Server-side failures: StorageIOError, CorruptDataError, anything else.
"""

from typing import Any, Dict, Optional


class HabitTrackerError(Exception):
    """
    Base exception for all habit tracker errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only exposed for client errors)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class ValidationError(HabitTrackerError):
    """
    Raised when input is missing, empty, of the wrong type or nested too deep.

    When:    POST /habits without a title or description, or a request body
             that does not match the expected schema.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "status": 400,
            "message": "Title and description are required",
            "details": {"field": "title"}
        }
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(HabitTrackerError):
    """
    Raised when a referenced habit does not exist anywhere in the forest.

    When:    GET/PUT/DELETE /habits/{id} with an unknown ID, or POST /habits
             with a parentId that matches no habit.
    HTTP:    404 Not Found

    The repository never writes the document when this is raised.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        habit_id: int,
        resource: str = "Habit",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        ctx["habit_id"] = habit_id
        super().__init__(message=f"{resource} with ID {habit_id} not found", context=ctx)
        self.habit_id = habit_id


class StorageIOError(HabitTrackerError):
    """
    Raised when the habit document cannot be read or written.

    What:    The file system call itself failed (permission denied, disk full,
             path is a directory, ...). A missing document is NOT an error.
    HTTP:    500 Internal Server Error

    The OS error and file path go into `context` for the server log only.
    """

    def __init__(
        self,
        message: str = "Could not access habit data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CorruptDataError(HabitTrackerError):
    """
    Raised when the habit document exists but is not a valid habit forest.

    When:    Invalid JSON, invalid UTF-8, a top-level value that is not an
             array, or entries missing required habit fields.
    HTTP:    500 Internal Server Error

    Kept distinct from StorageIOError: the file was read fine, its content
    is what is broken, so an operator has to repair or remove it.
    """

    error_code = "corrupt_data"

    def __init__(
        self,
        message: str = "Stored habit data is corrupt",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
