"""
pandas-backed implementation of TabularParser.

Every cell is read as text: no type inference, no NaN conversion, so phone
numbers keep their leading zeros and "N/A" reaches the sanitizer untouched.

Rows wider than the header (typically an unquoted delimiter inside free-text
notes) are never truncated: the extra fields are joined back into the last
column and the row is reported in ``ParsedTable.malformed_rows``.
"""

import csv
import io
import logging
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd

from vitalscribe.application.dto.interchange_dto import ParsedTable
from vitalscribe.application.ports.services.tabular_parser import TabularParser
from vitalscribe.domain.errors import FileParseError

logger = logging.getLogger("vitalscribe")


class PandasTabularParser(TabularParser):
    """Reads UTF-8 (or legacy cp1252) delimited text with an arbitrary delimiter."""

    ENCODINGS: Sequence[str] = ("utf-8-sig", "cp1252")
    DELIMITERS = ",;\t|"
    SNIFF_LINES = 20

    def parse_table(self, content: bytes) -> ParsedTable:
        if not content or not content.strip():
            raise FileParseError("File is empty")

        text = self._decode(content)
        delimiter = self._sniff_delimiter(text)

        wide_line_widths: List[int] = []

        def _record_wide_line(fields: List[str]) -> None:
            wide_line_widths.append(len(fields))
            return None

        # The header line fixes the width; wider lines are only measured here
        frame = self._read(text, delimiter, on_bad_lines=_record_wide_line)
        header_width = len(frame.columns)
        if wide_line_widths:
            frame = self._read(text, delimiter, names=list(range(max(wide_line_widths))))
        frame = frame.fillna("")

        headers = self._header_labels(frame.iloc[0].tolist()[:header_width])
        if not any(headers):
            raise FileParseError("File has no header row")

        data = frame.iloc[1:]
        if data.empty:
            raise FileParseError(
                "File has no data rows", {"headers": [h for h in headers if h]}
            )

        rows: List[Dict[str, str]] = []
        malformed_rows: Dict[int, int] = {}
        for row_number, values in enumerate(data.itertuples(index=False, name=None), start=1):
            cells = [str(value) for value in values]
            overflow = cells[header_width:]
            # Trailing empty fields (spreadsheet padding) carry nothing
            while overflow and not overflow[-1].strip():
                overflow.pop()
            cells = cells[:header_width]
            if overflow:
                malformed_rows[row_number] = header_width + len(overflow)
                cells[-1] = delimiter.join([cells[-1], *overflow])
            rows.append({h: cell for h, cell in zip(headers, cells) if h})

        if malformed_rows:
            logger.warning(
                f"{len(malformed_rows)} row(s) have more fields than the header; "
                f"extra fields kept in the last column"
            )

        logger.debug(
            f"Parsed import file: {len(rows)} rows, {sum(1 for h in headers if h)} columns, "
            f"delimiter={delimiter!r}"
        )
        return ParsedTable(rows=rows, malformed_rows=malformed_rows)

    def _read(
        self,
        text: str,
        delimiter: str,
        names: Optional[List[int]] = None,
        on_bad_lines: Optional[Callable[[List[str]], None]] = None,
    ) -> pd.DataFrame:
        """Read every line, the header line included, as a row of text cells."""
        options = {}
        if names is not None:
            # Wide enough for the widest row, so nothing is cut off
            options.update(names=names, index_col=False)
        if on_bad_lines is not None:
            options.update(on_bad_lines=on_bad_lines)
        try:
            return pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine="python",
                **options,
            )
        except pd.errors.EmptyDataError as e:
            raise FileParseError("File has no header row", {"error": str(e)}) from e
        except (pd.errors.ParserError, csv.Error, ValueError) as e:
            raise FileParseError(f"File could not be parsed: {e}", {"delimiter": delimiter}) from e

    @staticmethod
    def _header_labels(raw: List[str]) -> List[str]:
        """Stripped header labels; blanks stay empty, repeats get a ``.N`` suffix."""
        labels: List[str] = []
        seen: Dict[str, int] = {}
        for value in raw:
            label = str(value).strip()
            if label:
                count = seen.get(label, 0)
                seen[label] = count + 1
                if count:
                    label = f"{label}.{count}"
            labels.append(label)
        return labels

    def _decode(self, content: bytes) -> str:
        for encoding in self.ENCODINGS:
            try:
                return content.decode(encoding)
            except UnicodeDecodeError:
                continue
        raise FileParseError("File is not valid UTF-8 text", {"tried": list(self.ENCODINGS)})

    def _sniff_delimiter(self, text: str) -> str:
        sample = "\n".join(text.splitlines()[: self.SNIFF_LINES])
        try:
            return csv.Sniffer().sniff(sample, delimiters=self.DELIMITERS).delimiter
        except csv.Error:
            return ","
