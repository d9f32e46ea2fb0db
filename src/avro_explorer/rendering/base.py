"""
Abstract renderer interface.

A renderer is chosen once per run from the output format and then consumes
the whole row stream in a single pass.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, TextIO

from avro_explorer.values import Row


class Renderer(ABC):
    """Base class for all output formats."""

    def __init__(self, sink: TextIO):
        self.sink = sink

    @abstractmethod
    def render(self, columns: List[str], rows: Iterable[Row]) -> int:
        """
        Write the header and every row to the sink.

        Args:
            columns: Column names, in output order
            rows: Projected, filtered and truncated rows

        Returns:
            Number of rows written
        """
        pass
