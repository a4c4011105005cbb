# Services package init
"""
Habit Tracker Backend - Services Layer
========================================

What:  Business logic between the routes (HTTP) and the tree store (disk).
How:   Services take plain values, apply the habit rules, and return models.
       Routes receive them through FastAPI's dependency injection.

Service Inventory:
    - HabitRepository: recursive find / create / update / delete over the
      habit forest, plus the single-writer lock around every save
"""
