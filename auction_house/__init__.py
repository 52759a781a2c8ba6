"""Live player auction server."""
