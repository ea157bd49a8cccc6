"""Game server status API."""
