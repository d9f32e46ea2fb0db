"""Output renderers: bordered table, CSV and JSON lines."""

from typing import Optional, TextIO

from avro_explorer.config import OutputFormat
from avro_explorer.rendering.base import Renderer
from avro_explorer.rendering.csv_renderer import CsvRenderer
from avro_explorer.rendering.json_renderer import JsonLinesRenderer
from avro_explorer.rendering.table import TableRenderer
from avro_explorer.rendering.text import NA


def make_renderer(
    output_format: OutputFormat,
    sink: TextIO,
    absent_placeholder: str = NA,
    color: Optional[bool] = None,
) -> Renderer:
    """Pick the renderer for ``output_format``."""
    if output_format is OutputFormat.TABLE:
        return TableRenderer(sink, absent_placeholder=absent_placeholder, color=color)
    if output_format is OutputFormat.CSV:
        return CsvRenderer(sink)
    if output_format is OutputFormat.JSON:
        return JsonLinesRenderer(sink)
    if output_format is OutputFormat.JSON_PRETTY:
        return JsonLinesRenderer(sink, pretty=True)
    raise ValueError(f"No renderer for {output_format!r}")


__all__ = [
    "CsvRenderer",
    "JsonLinesRenderer",
    "Renderer",
    "TableRenderer",
    "make_renderer",
]
