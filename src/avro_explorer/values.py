"""
In-memory value model produced by the decoder and consumed by the pipeline.

Primitives decode to plain Python objects (``None``, ``bool``, ``int``,
``float``, ``bytes``, ``str``), arrays to ``list`` and maps to ``dict``.
Shapes that plain Python would blur get a small wrapper: records keep their
type name, enums keep their index, unions keep their branch, fixed values
stay distinct from bytes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List


@dataclass(frozen=True)
class EnumValue:
    index: int
    symbol: str


@dataclass(frozen=True)
class UnionValue:
    branch: int
    value: Any


@dataclass(frozen=True)
class FixedValue:
    data: bytes


@dataclass(frozen=True)
class Duration:
    """Avro ``duration``: months, days and milliseconds, each unsigned 32-bit."""

    months: int
    days: int
    millis: int


@dataclass
class RecordValue:
    """A decoded record; ``fields`` preserves schema field order."""

    name: str
    fields: Dict[str, Any]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


class _Absent:
    """Marker for a column the current record does not have."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


@dataclass(frozen=True)
class MatchReport:
    retained: bool
    matched_cells: FrozenSet[int] = frozenset()


@dataclass
class Row:
    """One projected record: a cell per column plus where it came from."""

    cells: List[Any]
    source: str = ""
    index: int = 0
    matched: FrozenSet[int] = field(default_factory=frozenset)

    def annotate(self, report: MatchReport) -> "Row":
        self.matched = report.matched_cells
        return self

    def is_matched(self, column: int) -> bool:
        return column in self.matched
