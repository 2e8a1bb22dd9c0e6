"""
Delimited-text codec for patient import and backup export.
"""

from .pandas_parser import PandasTabularParser
from .pandas_writer import PandasTabularWriter

__all__ = [
    "PandasTabularParser",
    "PandasTabularWriter",
]
