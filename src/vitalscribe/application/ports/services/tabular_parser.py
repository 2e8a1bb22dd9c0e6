"""
Tabular file codec interfaces.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from ...dto.interchange_dto import ParsedTable


class TabularParser(ABC):
    """Turns uploaded bytes into ordered header -> value rows."""

    @abstractmethod
    def parse_table(self, content: bytes) -> ParsedTable:
        """Parse the whole file, reporting rows wider than the header.

        Raises ``FileParseError`` when the content is empty, undecodable,
        has no header row or no data rows.
        """
        pass

    def parse(self, content: bytes) -> List[Dict[str, str]]:
        """Parse the whole file and return only the rows."""
        return self.parse_table(content).rows


class TabularWriter(ABC):
    """Serializes rows of strings into a delimited text artifact."""

    @abstractmethod
    def write(self, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
        """Return the encoded file, header row first."""
        pass
