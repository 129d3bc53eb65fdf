"""Shared helpers: logging setup."""
