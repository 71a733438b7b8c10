"""Shared helpers without framework dependencies."""
