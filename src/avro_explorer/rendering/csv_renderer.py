"""CSV output, streamed row by row."""

import csv
from typing import Iterable, List, TextIO

from avro_explorer.rendering.base import Renderer
from avro_explorer.rendering.text import to_text
from avro_explorer.values import Row


class CsvRenderer(Renderer):
    """Writes a header line then one CSV record per row.

    Absent cells become empty fields, which reads the same as an empty
    string value.
    """

    def __init__(self, sink: TextIO):
        super().__init__(sink)
        self.writer = csv.writer(sink, lineterminator="\n")
        # Minimal quoting only looks for "\n"; a bare "\r" needs quotes too
        self.quoting_writer = csv.writer(sink, lineterminator="\n", quoting=csv.QUOTE_ALL)

    def _write(self, fields: List[str]) -> None:
        writer = self.quoting_writer if any("\r" in f for f in fields) else self.writer
        writer.writerow(fields)

    def render(self, columns: List[str], rows: Iterable[Row]) -> int:
        self._write(columns)
        count = 0
        for row in rows:
            self._write([to_text(cell, absent="") for cell in row.cells])
            count += 1
        self.sink.flush()
        return count
