# Routes package init
"""
Shareable URLs Backend - API Routes Package
============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - health.py:          GET  /health             (service health check)
    - records.py:         POST /                   (create record)
                          POST /metadata           (batch metadata)
                          GET|PUT /{key}           (view / update record)

Routes stay thin: decode the body, call ShareableURLService, pick the status code.
"""
