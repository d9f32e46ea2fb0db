"""Row filtering and match highlighting."""

import re
from typing import Iterable, Iterator, Optional, Pattern

from avro_explorer.config import SearchMode
from avro_explorer.errors import PatternError
from avro_explorer.rendering.text import to_text
from avro_explorer.values import ABSENT, MatchReport, Row


def compile_pattern(
    pattern: Optional[str],
    mode: SearchMode = SearchMode.REGEX,
    ignore_case: bool = False,
) -> Optional[Pattern]:
    """Compile a search pattern up front.

    Regex patterns are unanchored (``re.search``); literal patterns match as
    substrings.

    Raises:
        PatternError: if the regex does not compile
    """
    if pattern is None:
        return None
    flags = re.IGNORECASE if ignore_case else 0
    source = re.escape(pattern) if SearchMode(mode) is SearchMode.LITERAL else pattern
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise PatternError(pattern, str(e)) from e


class SearchEngine:
    """Tests every present cell of a row against one compiled pattern."""

    def __init__(self, pattern: Optional[Pattern] = None):
        self.pattern = pattern

    @classmethod
    def from_options(
        cls,
        pattern: Optional[str],
        mode: SearchMode = SearchMode.REGEX,
        ignore_case: bool = False,
    ) -> "SearchEngine":
        return cls(compile_pattern(pattern, mode, ignore_case))

    def evaluate(self, row: Row) -> MatchReport:
        if self.pattern is None:
            return MatchReport(retained=True)
        matched = frozenset(
            i
            for i, cell in enumerate(row.cells)
            if cell is not ABSENT and self.pattern.search(to_text(cell))
        )
        return MatchReport(retained=bool(matched), matched_cells=matched)

    def filter(self, rows: Iterable[Row]) -> Iterator[Row]:
        """Yield retained rows, annotated with the cells that matched."""
        for row in rows:
            report = self.evaluate(row)
            if report.retained:
                yield row.annotate(report)
