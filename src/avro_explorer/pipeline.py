"""
Decode → project → filter → take → render pipeline.

Everything upstream of the renderer is a generator chain, so records are
decoded only as the renderer asks for rows, and a ``take`` limit stops
reading as soon as it is satisfied.
"""

from dataclasses import dataclass, field
from itertools import chain, islice
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from loguru import logger

from avro_explorer.config import ExplorerSettings, QueryOptions
from avro_explorer.container import open_container
from avro_explorer.errors import AvroExplorerError
from avro_explorer.projection import ProjectionEngine, SourcedRecord
from avro_explorer.rendering import make_renderer
from avro_explorer.search import SearchEngine
from avro_explorer.values import Row

PathLike = Union[str, Path]


@dataclass
class FileFailure:
    """A file whose contribution to the run was cut short by an error."""

    source: str
    error: Exception

    def __str__(self) -> str:
        return str(self.error)


@dataclass
class RunSummary:
    columns: List[str] = field(default_factory=list)
    files_read: int = 0
    rows_read: int = 0
    rows_emitted: int = 0
    failures: List[FileFailure] = field(default_factory=list)
    missing_columns: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Explorer:
    """Runs one query over a list of container files.

    The search pattern is compiled on construction, so an invalid pattern
    fails before any file is opened.
    """

    def __init__(self, options: QueryOptions, settings: Optional[ExplorerSettings] = None):
        self.options = options
        self.settings = settings or ExplorerSettings()
        self.search = SearchEngine.from_options(
            options.search, options.search_mode, options.ignore_case
        )
        self.projection = ProjectionEngine(options.fields)
        self.summary = RunSummary()
        self._records: Optional[Iterator[SourcedRecord]] = None

    def records(self, paths: Sequence[PathLike]) -> Iterator[SourcedRecord]:
        """Decode every file in order, recording failures per file."""
        for path in paths:
            source = str(path)
            try:
                with open_container(path) as reader:
                    self.summary.files_read += 1
                    logger.info(f"Reading {source} (codec: {reader.codec})")
                    for i, value in enumerate(reader):
                        self.summary.rows_read += 1
                        yield SourcedRecord(source, i, reader.schema, value)
            except (AvroExplorerError, OSError) as e:
                if isinstance(e, AvroExplorerError):
                    e.with_context(source=source)
                logger.error(f"Failed reading {source}: {e}")
                self.summary.failures.append(FileFailure(source, e))
                if self.settings.fail_fast:
                    logger.warning("Stopping at first failure (fail_fast)")
                    return

    def rows(self, paths: Sequence[PathLike]) -> Tuple[List[str], Iterator[Row]]:
        """Return the columns and the lazy, final row stream."""
        take = self.options.take
        if take == 0:
            return list(self.projection.requested), iter(())

        records = self._records = self.records(paths)
        if not self.projection.discovered:
            first = next(records, None)
            if first is None:
                return [], iter(())
            self.projection.discover(first.schema)
            records = chain([first], records)

        rows = self.search.filter(self.projection.rows(records))
        if take is not None:
            rows = islice(rows, take)
        return list(self.projection.columns), rows

    def run(self, paths: Sequence[PathLike], sink: TextIO) -> RunSummary:
        columns, rows = self.rows(paths)
        self.summary.columns = columns
        renderer = make_renderer(
            self.options.format,
            sink,
            absent_placeholder=self.settings.absent_placeholder,
            color=self.settings.color,
        )
        try:
            self.summary.rows_emitted = renderer.render(columns, rows)
        finally:
            if self._records is not None:
                # Release the file left open when take stopped early
                self._records.close()
        if self.projection.requested and self.summary.rows_read:
            self.summary.missing_columns = self.projection.missing_columns()
        logger.info(
            f"Read {self.summary.rows_read} records from {self.summary.files_read} file(s), "
            f"emitted {self.summary.rows_emitted} rows"
        )
        return self.summary


def explore(
    paths: Sequence[PathLike],
    options: QueryOptions,
    sink: TextIO,
    settings: Optional[ExplorerSettings] = None,
) -> RunSummary:
    """Run a query over ``paths`` and write the rendered result to ``sink``.

    Raises:
        PatternError: if ``options.search`` is not a valid pattern
    """
    return Explorer(options, settings).run(paths, sink)
