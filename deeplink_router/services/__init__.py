"""Deep link services."""
