"""Line-delimited JSON output."""

from typing import Iterable, List, TextIO

import orjson

from avro_explorer.rendering.base import Renderer
from avro_explorer.rendering.text import to_json
from avro_explorer.values import ABSENT, Row


class JsonLinesRenderer(Renderer):
    """Writes one JSON object per row, omitting absent columns.

    With ``pretty`` each object is indented over several lines instead.
    """

    def __init__(self, sink: TextIO, pretty: bool = False):
        super().__init__(sink)
        self.options = orjson.OPT_INDENT_2 if pretty else 0

    def render(self, columns: List[str], rows: Iterable[Row]) -> int:
        count = 0
        for row in rows:
            obj = {
                name: to_json(cell)
                for name, cell in zip(columns, row.cells)
                if cell is not ABSENT
            }
            self.sink.write(orjson.dumps(obj, option=self.options).decode("utf-8"))
            self.sink.write("\n")
            count += 1
        self.sink.flush()
        return count
