"""Profile models and environment settings."""
