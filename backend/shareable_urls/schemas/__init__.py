# Schemas package init
"""Pydantic schemas describing the fixed-shape parts of the HTTP contract."""
