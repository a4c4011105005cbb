"""
Habit Tracker Backend - Application Package
=============================================

What: Daily habit tracker API. Habits nest to any depth (a habit can hold
      sub-habits) and the whole collection is stored as one JSON document.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (HabitRepository)        │  ← Tree algorithms, writer lock
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Habit tree + API contracts
    ├─────────────────────────────────────┤
    │     Tree Store (Persistence)        │  ← Whole-document JSON file
    └─────────────────────────────────────┘

Run with `python -m habit_tracker` or `uvicorn habit_tracker.main:app`.
"""

__version__ = "1.0.0"
