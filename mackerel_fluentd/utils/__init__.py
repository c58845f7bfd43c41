"""Small shared helpers (environment flags, logging setup)."""
