"""Uniform query result shape shared by every backend."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Union

NativeResult = Union[Sequence[Mapping[str, Any]], Mapping[str, Any]]


@dataclass
class ExecutionResult:
    """Rows returned by a statement plus the number of rows it touched."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    def first(self):
        return self.rows[0] if self.rows else None


def normalize_result(native: NativeResult) -> ExecutionResult:
    """Map a driver result onto ExecutionResult.

    Row-returning statements come back as a sequence of row mappings.
    Anything else is a count-only header (``{"affectedRows": n, ...}``)
    which is wrapped as a single synthetic row.
    """
    if isinstance(native, (list, tuple)):
        rows = [dict(row) for row in native]
        return ExecutionResult(rows=rows, row_count=len(rows))

    header = dict(native)
    return ExecutionResult(rows=[header], row_count=header.get("affectedRows") or 0)
