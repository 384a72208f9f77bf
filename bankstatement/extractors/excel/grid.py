"""
Spreadsheet grid abstraction.

The extraction engine only ever sees the narrow interface defined here:

- ``Grid``      an open workbook: ``sheet_names()``, ``sheet(name)``, ``close()``
- ``GridSheet`` one worksheet: ``rows()`` as a lazy forward iterator
- ``GridRow``   one populated row: ``cell(column_index)``
- ``GridCell``  one cell with its raw type tag and formatting metadata

Container decoding (xlsx, xls) lives in :mod:`.reader`; this module also
provides an in-memory implementation for rows that are already loaded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from bankstatement.errors import SheetNotFoundError


class CellType(str, Enum):
    """Raw cell type tag as reported by the container decoder."""

    TEXT = "text"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    FORMULA = "formula"
    BLANK = "blank"
    ERROR = "error"


@dataclass(frozen=True)
class GridCell:
    """
    One spreadsheet cell.

    For ``FORMULA`` cells ``value`` holds the cached computed result and
    ``cached_result_type`` its type (``None`` when the file carries no cached
    result). ``display_text`` is the human-readable rendering used when typed
    extraction fails.
    """

    column_index: int
    cell_type: CellType
    value: Any = None
    is_date_formatted: bool = False
    cached_result_type: Optional[CellType] = None
    display_text: str = ""


@dataclass
class GridRow:
    """A row that exists in the sheet, with its cells keyed by column index."""

    index: int
    cells: Dict[int, GridCell] = field(default_factory=dict)

    def cell(self, column_index: int) -> Optional[GridCell]:
        return self.cells.get(column_index)

    def __iter__(self) -> Iterator[GridCell]:
        for column_index in sorted(self.cells):
            yield self.cells[column_index]

    def __len__(self) -> int:
        return len(self.cells)


class GridSheet(ABC):
    """A worksheet exposing its populated rows in ascending row order."""

    name: str = ""

    @abstractmethod
    def rows(self) -> Iterator[GridRow]:
        """
        Yield populated rows top to bottom.

        Rows without any data are not yielded; callers must not assume row
        indices are contiguous. Each call starts a fresh pass.
        """


class Grid(ABC):
    """An open workbook. Use as a context manager so it is always closed."""

    backend: str = ""

    @abstractmethod
    def sheet_names(self) -> List[str]:
        ...

    @abstractmethod
    def sheet(self, name: Optional[str] = None) -> GridSheet:
        """Return sheet *name*, or the active sheet when *name* is ``None``."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "Grid":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Display rendering shared by the decoders
# ---------------------------------------------------------------------------

def format_display_value(value: Any) -> str:
    """Render a raw cell value the way a spreadsheet shows it by default."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    plain_attr = getattr(value, "plain", None)
    if isinstance(plain_attr, str):
        return plain_attr
    text_attr = getattr(value, "text", None)
    if isinstance(text_attr, str):
        return text_attr
    return str(value)


def cell_from_value(column_index: int, value: Any, is_date_formatted: Optional[bool] = None) -> GridCell:
    """Build a :class:`GridCell` from a plain Python value."""
    if value is None:
        cell_type = CellType.BLANK
    elif isinstance(value, bool):
        cell_type = CellType.BOOLEAN
    elif isinstance(value, (int, float, date)):
        cell_type = CellType.NUMERIC
    else:
        cell_type = CellType.TEXT
    if is_date_formatted is None:
        is_date_formatted = isinstance(value, (date, datetime))
    return GridCell(
        column_index=column_index,
        cell_type=cell_type,
        value=value,
        is_date_formatted=is_date_formatted,
        display_text=format_display_value(value),
    )


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class MemorySheet(GridSheet):
    """
    Sheet backed by already-loaded rows.

    *rows* is either a sequence of value lists (row index = position, ``None``
    for a missing row) or a sequence of :class:`GridRow`. Plain values are
    converted with :func:`cell_from_value`; :class:`GridCell` items are kept
    as they are.
    """

    def __init__(self, rows: Sequence[Any], name: str = "Sheet1"):
        self.name = name
        self._rows: List[GridRow] = []
        for position, row in enumerate(rows):
            if row is None:
                continue
            grid_row = row if isinstance(row, GridRow) else self._row_from_values(position, row)
            if len(grid_row):
                self._rows.append(grid_row)
        self._rows.sort(key=lambda r: r.index)

    @staticmethod
    def _row_from_values(row_index: int, values: Iterable[Any]) -> GridRow:
        cells: Dict[int, GridCell] = {}
        for column_index, value in enumerate(values):
            cell = value if isinstance(value, GridCell) else cell_from_value(column_index, value)
            if cell.cell_type is CellType.BLANK:
                continue
            cells[cell.column_index] = cell
        return GridRow(index=row_index, cells=cells)

    def rows(self) -> Iterator[GridRow]:
        return iter(self._rows)


class MemoryGrid(Grid):
    """Workbook made of :class:`MemorySheet` objects; the first one is active."""

    backend = "memory"

    def __init__(self, sheets: Sequence[MemorySheet], active_index: int = 0):
        self._sheets = list(sheets)
        self._active_index = active_index

    def sheet_names(self) -> List[str]:
        return [s.name for s in self._sheets]

    def sheet(self, name: Optional[str] = None) -> GridSheet:
        if name is not None:
            for s in self._sheets:
                if s.name == name:
                    return s
            raise SheetNotFoundError(name, self.sheet_names())
        if not self._sheets:
            raise SheetNotFoundError("<active>", [])
        if 0 <= self._active_index < len(self._sheets):
            return self._sheets[self._active_index]
        return self._sheets[0]
