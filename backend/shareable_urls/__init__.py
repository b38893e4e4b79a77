"""
Shareable URLs Backend - Application Package Initializer
=========================================================

What: Marks the `shareable_urls` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is a thin stateless HTTP service over a key-value store:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← path + method dispatch only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← create, view, update, metadata
    ├─────────────────────────────────────┤
    │        Record Store (get / put)     │  ← in-memory or SQL-backed KV
    └─────────────────────────────────────┘

    Every piece of state lives in the record store under one of three key shapes:
        shareable_url:<key>   JSON document for the record
        views:<key>           decimal view counter
        <contentHash>         owning record key (checksum index)
"""

__version__ = "1.0.0"
