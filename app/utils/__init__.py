"""Shared helpers: dates, logging and request validation."""
