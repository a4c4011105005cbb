# Models package init
"""
Habit Tracker Backend - Domain Models
=======================================

Model Inventory:
    - habit.py: Habit node (nested sub-habits) and the forest helpers
                used by the tree store and the habit repository
"""
