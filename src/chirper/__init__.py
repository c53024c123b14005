"""Chirper user account API."""

__version__ = "0.1.0"
