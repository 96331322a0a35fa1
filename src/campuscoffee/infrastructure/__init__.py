"""Infrastructure layer — database engine, schema, migrations, repositories.

This layer depends on stdlib, SQLAlchemy, Alembic, and the domain models
it persists.  It must never import from services, commands, or output.
"""
