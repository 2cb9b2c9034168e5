"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each domain area. Queries on
user data always filter on owner_id, and repositories never commit: the
caller decides the transaction boundary.
"""
