"""Schema-driven N-tier CRUD scaffolding generator."""

__version__ = "0.1.0"
