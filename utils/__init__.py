"""Shared helpers: time handling, pagination, upload validation, host metrics."""
