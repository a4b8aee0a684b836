"""SQLAlchemy persistence for Casebook (SQLite and PostgreSQL)."""
