"""Shared helpers for validation and filesystem access."""
