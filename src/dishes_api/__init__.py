"""Dishes API - restaurant ordering backend with member authentication."""

__version__ = "0.1.0"
