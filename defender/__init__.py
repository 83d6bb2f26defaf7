"""Resolve targets in HTTP requests and responses and compare them against rules."""

__version__ = "1.0.0"