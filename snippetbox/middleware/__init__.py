"""
Snippetbox: Middleware Package
==============================

Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request Logging] → [Secure Headers] → Route Handler

Logging is outermost so it sees the final status, including errors turned
into responses by the exception handlers.
"""
