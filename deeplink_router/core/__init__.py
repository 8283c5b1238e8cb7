"""Core infrastructure: settings, database, cache, observability."""
