"""
Pokedex Backend — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for log lines and error bodies
    2. Logging: one access line per request with status and duration
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
