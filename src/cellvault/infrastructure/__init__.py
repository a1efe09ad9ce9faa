"""Infrastructure layer — database, cell store, action log.

This layer depends on stdlib, SQLAlchemy, Alembic and the domain layer.
It must never import from services, commands, or output.
"""
