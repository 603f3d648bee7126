"""Core models, errors and shared helpers for the Sheet Toolkit."""
