"""Bordered, fixed-width table output."""

from typing import Iterable, List, Optional, TextIO

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from avro_explorer.rendering.base import Renderer
from avro_explorer.rendering.text import NA, to_text
from avro_explorer.values import ABSENT, Row

HEADER_STYLE = "bold blue underline"
MATCH_STYLE = "bold green"
ABSENT_STYLE = "red"


def _lines(text: str) -> List[str]:
    return text.expandtabs().splitlines() or [""]


def column_widths(header: List[List[str]], body: List[List[List[str]]]) -> List[int]:
    """Width of each column: its widest line across the header and all cells."""
    widths = [max((cell_len(line) for line in cell), default=0) for cell in header]
    for row in body:
        for i, cell in enumerate(row):
            for line in cell:
                widths[i] = max(widths[i], cell_len(line))
    return widths


class TableRenderer(Renderer):
    """Lays rows out in a bordered grid.

    Widths depend on every cell, so the whole result set is buffered before
    anything is written. Matched cells are styled for emphasis; absent cells
    show a placeholder in a warning colour. Styling is dropped automatically
    when the sink is not a terminal.
    """

    def __init__(
        self,
        sink: TextIO,
        absent_placeholder: str = NA,
        color: Optional[bool] = None,
    ):
        super().__init__(sink)
        self.absent_placeholder = absent_placeholder
        self.console = Console(
            file=sink,
            force_terminal=color,
            no_color=True if color is False else None,
            highlight=False,
            soft_wrap=True,
        )

    def _border(self, widths: List[int]) -> Text:
        return Text("+" + "+".join("-" * (w + 2) for w in widths) + "+")

    def _emit(self, cells: List[List[str]], styles: List[Optional[str]], widths: List[int]) -> None:
        height = max((len(cell) for cell in cells), default=1)
        for n in range(height):
            line = Text("|")
            for cell, style, width in zip(cells, styles, widths):
                text = cell[n] if n < len(cell) else ""
                line.append(" ")
                line.append(text, style=style)
                line.append(" " * (width - cell_len(text)) + " |")
            self.console.print(line)

    def render(self, columns: List[str], rows: Iterable[Row]) -> int:
        if not columns:
            return 0
        header = [_lines(c) for c in columns]
        body = []
        styles = []
        for row in rows:
            cells = []
            row_styles = []
            for i, cell in enumerate(row.cells):
                cells.append(_lines(to_text(cell, absent=self.absent_placeholder)))
                if row.is_matched(i):
                    row_styles.append(MATCH_STYLE)
                elif cell is ABSENT:
                    row_styles.append(ABSENT_STYLE)
                else:
                    row_styles.append(None)
            body.append(cells)
            styles.append(row_styles)

        widths = column_widths(header, body)
        border = self._border(widths)
        self.console.print(border)
        self._emit(header, [HEADER_STYLE] * len(columns), widths)
        self.console.print(border)
        for cells, row_styles in zip(body, styles):
            self._emit(cells, row_styles, widths)
        if body:
            self.console.print(border)
        return len(body)
