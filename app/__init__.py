"""Georgia 2026 election data service."""
