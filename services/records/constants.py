"""Shared constants for the records service."""

COUNTER_OWNER = "counter"
"""Partition owner name used for the id counter."""

__all__ = ["COUNTER_OWNER"]
