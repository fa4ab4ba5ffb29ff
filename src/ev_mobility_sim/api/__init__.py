"""HTTP API for the profile generator."""
