# Routes package init
"""
Habit Tracker Backend - API Routes Package
============================================

Route Inventory:
    - habits.py:  GET    /habits         (whole forest)
                  GET    /habits/{id}    (one habit at any depth)
                  POST   /habits         (create root habit or sub-habit)
                  PUT    /habits/{id}    (update scalar fields)
                  DELETE /habits/{id}    (remove habit and its subtree)
    - health.py:  GET    /               (plain-text banner)
                  GET    /health         (service and storage status)

Design Principle:
    Routes stay THIN: pull values out of the request, call the
    HabitRepository, pick the status code. Failures are raised as
    exceptions and formatted by the handlers registered in main.py.
"""
