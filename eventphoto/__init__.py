"""Event photo platform API."""
