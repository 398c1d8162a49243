"""Database schema introspection."""
