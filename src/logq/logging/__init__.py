"""Logging helpers for logq."""
