"""
pandas-backed implementation of TabularWriter for the backup export.

Every field is quoted so free text with embedded delimiters survives, and a
UTF-8 byte-order mark is prepended so legacy spreadsheet tools pick the right
encoding.
"""

import csv
from typing import Sequence

import pandas as pd

from vitalscribe.application.ports.services.tabular_parser import TabularWriter

UTF8_BOM = "\ufeff"


class PandasTabularWriter(TabularWriter):
    """Writes quote-all delimited text with a byte-order mark."""

    def __init__(self, delimiter: str = ",", with_bom: bool = True):
        self.delimiter = delimiter
        self.with_bom = with_bom

    def write(self, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
        frame = pd.DataFrame([list(row) for row in rows], columns=list(columns), dtype=str)
        text = frame.to_csv(
            index=False,
            sep=self.delimiter,
            quoting=csv.QUOTE_ALL,
            lineterminator="\r\n",
        )
        if self.with_bom:
            text = UTF8_BOM + text
        return text.encode("utf-8")
