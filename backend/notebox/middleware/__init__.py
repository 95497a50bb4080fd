# Middleware package init
"""
Notebox — Middleware Package
=============================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and the X-Request-ID header
    2. Logging: one access line per request, tagged with the request ID
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
