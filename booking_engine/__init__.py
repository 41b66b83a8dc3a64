"""Availability and booking engine for multi-tenant appointment scheduling."""

__version__ = "0.1.0"
