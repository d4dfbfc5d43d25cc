"""Storage services: money helpers, row models and repositories."""
