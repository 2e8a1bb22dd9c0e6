"""
Value objects package for domain layer.
"""

from .dedup_key import DedupKey

__all__ = [
    "DedupKey",
]
