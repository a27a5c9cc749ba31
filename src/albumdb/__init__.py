"""albumdb: PostgreSQL album catalogue walkthrough."""

__version__ = "0.1.0"
