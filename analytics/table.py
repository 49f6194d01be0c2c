"""
In-memory table: ordered column names plus the decoded records.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

Record = Mapping[str, Any]


@dataclass(frozen=True)
class Table:
    """Decoded tabular data. Records share the column set; treat as read-only."""

    columns: Tuple[str, ...] = ()
    records: Tuple[Record, ...] = field(default_factory=tuple)

    @classmethod
    def from_records(cls, records: Sequence[Record], columns: Sequence[str] = ()) -> "Table":
        """Build a table; columns default to the keys of the first record."""
        rows = tuple(dict(r) for r in records)
        cols = tuple(columns) if columns else (tuple(rows[0].keys()) if rows else ())
        return cls(columns=cols, records=rows)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def column_values(self, column: str) -> List[Any]:
        """Raw cell values of one column in row order (None when missing)."""
        return [r.get(column) for r in self.records]

    def head(self, n: int) -> List[Dict[str, Any]]:
        return [dict(r) for r in self.records[:n]]
