"""Field projection across one or more container files."""

from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set

from loguru import logger

from avro_explorer.schema import SchemaTree
from avro_explorer.values import ABSENT, RecordValue, Row


class SourcedRecord(NamedTuple):
    """A decoded value together with the file and schema it came from."""

    source: str
    index: int
    schema: SchemaTree
    value: Any


def dedupe(names: Iterable[str]) -> List[str]:
    """Drop repeated names, keeping first-seen order."""
    seen = set()
    result = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


class ProjectionEngine:
    """Maps decoded records onto a fixed, ordered list of columns.

    With an explicit field list the columns are exactly those names, in the
    order given. Without one, the columns are the fields of the first record's
    schema and stay fixed for the rest of the run, whatever later files hold.
    """

    def __init__(self, fields: Sequence[str] = ()):
        self.requested = dedupe(fields)
        self.columns: Optional[List[str]] = list(self.requested) or None
        self._present: Set[str] = set()
        self._skipped_sources: Set[str] = set()

    @property
    def discovered(self) -> bool:
        return self.columns is not None

    def discover(self, schema: SchemaTree) -> List[str]:
        """Fix the columns from ``schema`` unless they are already known."""
        if self.columns is None:
            record = schema.record
            self.columns = record.field_names if record is not None else []
            logger.debug(f"Discovered columns: {self.columns}")
        return self.columns

    def project(self, record: SourcedRecord) -> Optional[Row]:
        """Build the row for one record, or ``None`` if it is not a record."""
        columns = self.discover(record.schema)
        value = record.value
        if not isinstance(value, RecordValue):
            if record.source not in self._skipped_sources:
                self._skipped_sources.add(record.source)
                logger.warning(f"{record.source}: top-level values are not records, skipping")
            return None
        cells = []
        for name in columns:
            if name in value:
                self._present.add(name)
                cells.append(value[name])
            else:
                cells.append(ABSENT)
        return Row(cells, source=record.source, index=record.index)

    def rows(self, records: Iterable[SourcedRecord]) -> Iterator[Row]:
        for record in records:
            row = self.project(record)
            if row is not None:
                yield row

    def missing_columns(self) -> List[str]:
        """Columns that no projected record has had so far."""
        return [c for c in self.columns or [] if c not in self._present]
