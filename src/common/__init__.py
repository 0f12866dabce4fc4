"""Helpers shared across the version manager: logging, HTTP, archives."""
