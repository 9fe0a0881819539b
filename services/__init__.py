"""Service modules for the records application."""

__all__ = ["records"]
