# Middleware package init
"""
Survey Backend — Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID shared by every log line of the request
    2. Logging: method, path, status and duration, tagged with the request ID
    3. GZip / CORS: Starlette built-ins configured in main.py

    Responses travel back through the same chain in reverse, which is how
    the request ID ends up in the X-Request-ID response header.
"""
