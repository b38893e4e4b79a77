# Models package init
"""ORM models for the SQL-backed record store."""
