# Middleware package init
"""
Habit Tracker Backend - Middleware Package
============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for log lines and error bodies
    2. Logging: one access line per request, tagged with that ID
    3. CORS: FastAPI's CORSMiddleware (handles preflight)

Responses pass back through the chain in reverse, so the access line sees
the final status code and the ID header is set on every response.
"""
