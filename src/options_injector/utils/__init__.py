"""Logging and general helpers."""
