"""Inkwell: multi-tenant content platform API."""

__version__ = "0.1.0"
