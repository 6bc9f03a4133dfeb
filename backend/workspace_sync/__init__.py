"""Workspace file collections with environment sync to object storage."""

__version__ = "0.1.0"
