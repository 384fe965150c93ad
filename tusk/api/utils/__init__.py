"""Utility modules for the API layer."""
