# Services package init
"""
Shareable URLs Backend - Services Layer
========================================

What:  Business logic sitting between routes (HTTP) and the record store.
How:   Services receive their store explicitly and return plain dicts;
       routes turn those into responses.

Service Inventory:
    - ShareableURLService: create, view, update and batch-metadata operations
"""
