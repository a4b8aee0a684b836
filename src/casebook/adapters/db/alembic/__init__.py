"""Alembic migration scripts for Casebook (packaged so `importlib.resources` can locate them)."""
