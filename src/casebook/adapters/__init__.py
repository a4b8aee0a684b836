"""Concrete adapters for Casebook ports (in-memory and SQLAlchemy)."""
