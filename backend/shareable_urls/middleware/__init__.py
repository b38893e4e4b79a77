# Middleware package init
"""
Shareable URLs Backend - Middleware Package
============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS Headers] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS Headers: Stamp the fixed CORS header set on the response

    The order is reversed for responses, so the logged status is the
    final one and every response (including error responses rendered by
    the exception handlers) carries the CORS headers.
"""
