"""Service layer: commands, handlers, message bus, queries and views."""
