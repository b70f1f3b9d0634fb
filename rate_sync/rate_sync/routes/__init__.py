"""HTTP routes for the rate sync service."""
