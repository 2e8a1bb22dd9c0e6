"""
Service ports for the tabular file codec.
"""

from .tabular_parser import TabularParser, TabularWriter

__all__ = [
    "TabularParser",
    "TabularWriter",
]
