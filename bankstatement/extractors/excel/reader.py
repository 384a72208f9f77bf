"""
ExcelReader: open a statement file and expose it through the grid interface.

Encapsulates all container-specific work:
- engine selection by file suffix (openpyxl for xlsx/xlsm, xlrd for xls)
- formula cells resolved against their cached results
- active-sheet selection with first-sheet fallback
- wrapping decoder failures into :class:`~bankstatement.errors.WorkbookOpenError`
"""

from __future__ import annotations

import zipfile
from datetime import date, time, timedelta
from itertools import zip_longest
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

import xlrd
from xlrd.compdoc import CompDocError
from xlrd.xldate import XLDateError, xldate_as_datetime
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from bankstatement.errors import SheetNotFoundError, WorkbookOpenError
from bankstatement.extractors.excel.grid import (
    CellType,
    Grid,
    GridCell,
    GridRow,
    GridSheet,
    format_display_value,
)
from bankstatement.logger import get_logger

logger = get_logger(__name__)

OPENPYXL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
XLRD_SUFFIXES = (".xls",)

# openpyxl data_type -> CellType; "f" is handled separately
_OPENPYXL_TYPES: Dict[str, CellType] = {
    "s": CellType.TEXT,
    "str": CellType.TEXT,
    "inlineStr": CellType.TEXT,
    "n": CellType.NUMERIC,
    "d": CellType.NUMERIC,
    "b": CellType.BOOLEAN,
    "e": CellType.ERROR,
}


def _is_date(cell: Any) -> bool:
    """openpyxl converts date-formatted numbers itself and tags them "d"."""
    if cell is None or cell.value is None:
        return False
    if cell.data_type == "d" or getattr(cell, "is_date", False):
        return True
    return isinstance(cell.value, (date, time, timedelta))


class ExcelReader:
    """Factory that opens the right :class:`Grid` implementation for a file."""

    def open(self, file_path: str) -> Grid:
        path = Path(file_path)
        if not path.is_file():
            raise WorkbookOpenError(str(file_path), "file not found")
        suffix = path.suffix.lower()
        if suffix in OPENPYXL_SUFFIXES:
            return OpenpyxlGrid.open(str(path))
        if suffix in XLRD_SUFFIXES:
            return XlrdGrid.open(str(path))
        raise WorkbookOpenError(
            str(file_path),
            f"unsupported file extension {suffix or '<none>'!r}; "
            f"expected one of {', '.join(OPENPYXL_SUFFIXES + XLRD_SUFFIXES)}",
        )

    def list_sheet_names(self, file_path: str) -> Tuple[List[str], str]:
        """Return ``(sheet_names, backend_label)``."""
        with self.open(file_path) as grid:
            return grid.sheet_names(), grid.backend


# ---------------------------------------------------------------------------
# openpyxl (xlsx / xlsm)
# ---------------------------------------------------------------------------

class OpenpyxlSheet(GridSheet):
    """
    One worksheet read twice in lock-step: once with formulas, once with the
    cached values Excel stored for them.
    """

    def __init__(self, formula_ws: Any, value_ws: Any):
        self.name = formula_ws.title
        self._formula_ws = formula_ws
        self._value_ws = value_ws

    def rows(self) -> Iterator[GridRow]:
        # Stored dimensions are often wrong in bank exports; ignore them.
        for ws in (self._formula_ws, self._value_ws):
            reset = getattr(ws, "reset_dimensions", None)
            if reset is not None:
                reset()
        pairs = zip_longest(
            self._formula_ws.iter_rows(min_row=1),
            self._value_ws.iter_rows(min_row=1),
            fillvalue=(),
        )
        for row_index, (formula_row, value_row) in enumerate(pairs):
            cells: Dict[int, GridCell] = {}
            for column_index, (formula_cell, value_cell) in enumerate(
                zip_longest(formula_row, value_row, fillvalue=None)
            ):
                cell = self._to_grid_cell(column_index, formula_cell, value_cell)
                if cell is not None:
                    cells[column_index] = cell
            if cells:
                yield GridRow(index=row_index, cells=cells)

    @staticmethod
    def _classify(cell: Any) -> Optional[CellType]:
        if cell is None or cell.value is None:
            return CellType.BLANK
        if cell.data_type == "f":
            return CellType.FORMULA
        return _OPENPYXL_TYPES.get(cell.data_type)

    def _to_grid_cell(self, column_index: int, formula_cell: Any, value_cell: Any) -> Optional[GridCell]:
        cell_type = self._classify(formula_cell)
        if cell_type is CellType.BLANK:
            return None
        if cell_type is CellType.FORMULA:
            cached_type = self._classify(value_cell)
            cached_value = value_cell.value if value_cell is not None else None
            display = format_display_value(cached_value) if cached_value is not None else str(formula_cell.value)
            return GridCell(
                column_index=column_index,
                cell_type=CellType.FORMULA,
                value=cached_value,
                is_date_formatted=_is_date(value_cell),
                cached_result_type=cached_type,
                display_text=display,
            )
        return GridCell(
            column_index=column_index,
            cell_type=cell_type or CellType.ERROR,
            value=formula_cell.value,
            is_date_formatted=_is_date(formula_cell),
            display_text=format_display_value(formula_cell.value),
        )


class OpenpyxlGrid(Grid):
    backend = "openpyxl"

    def __init__(self, formula_wb: Any, value_wb: Any):
        self._formula_wb = formula_wb
        self._value_wb = value_wb

    @classmethod
    def open(cls, file_path: str) -> "OpenpyxlGrid":
        try:
            formula_wb = load_workbook(file_path, read_only=True, data_only=False)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            raise WorkbookOpenError(file_path, f"{type(exc).__name__}: {exc}") from exc
        try:
            value_wb = load_workbook(file_path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
            formula_wb.close()
            raise WorkbookOpenError(file_path, f"{type(exc).__name__}: {exc}") from exc
        return cls(formula_wb, value_wb)

    def sheet_names(self) -> List[str]:
        return [ws.title for ws in self._formula_wb.worksheets]

    def sheet(self, name: Optional[str] = None) -> GridSheet:
        worksheets = self._formula_wb.worksheets
        if name is not None:
            if name not in self.sheet_names():
                raise SheetNotFoundError(name, self.sheet_names())
            formula_ws = self._formula_wb[name]
        else:
            if not worksheets:
                raise SheetNotFoundError("<active>", [])
            active = self._formula_wb.active
            # Chartsheets and unset/invalid active indices fall back to the first sheet.
            formula_ws = active if active in worksheets else worksheets[0]
        logger.debug("Selected sheet %r (backend=openpyxl)", formula_ws.title)
        return OpenpyxlSheet(formula_ws, self._value_wb[formula_ws.title])

    def close(self) -> None:
        for wb in (self._formula_wb, self._value_wb):
            if wb is not None:
                wb.close()
        self._formula_wb = self._value_wb = None


# ---------------------------------------------------------------------------
# xlrd (legacy xls)
# ---------------------------------------------------------------------------

class XlrdSheet(GridSheet):
    """xlrd exposes formula cells as their cached results, so no FORMULA cells here."""

    def __init__(self, sheet: Any, datemode: int):
        self.name = sheet.name
        self._sheet = sheet
        self._datemode = datemode

    def rows(self) -> Iterator[GridRow]:
        for row_index in range(self._sheet.nrows):
            cells: Dict[int, GridCell] = {}
            for column_index, raw in enumerate(self._sheet.row(row_index)):
                cell = self._to_grid_cell(column_index, raw)
                if cell is not None:
                    cells[column_index] = cell
            if cells:
                yield GridRow(index=row_index, cells=cells)

    def _to_grid_cell(self, column_index: int, raw: Any) -> Optional[GridCell]:
        ctype = raw.ctype
        value = raw.value
        if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if ctype == xlrd.XL_CELL_TEXT:
            return GridCell(column_index, CellType.TEXT, value, display_text=value)
        if ctype == xlrd.XL_CELL_NUMBER:
            return GridCell(column_index, CellType.NUMERIC, value, display_text=format_display_value(value))
        if ctype == xlrd.XL_CELL_DATE:
            try:
                value = xldate_as_datetime(value, self._datemode)
            except (XLDateError, OverflowError, ValueError):
                # Left as a serial; the cell extractor decides what to make of it.
                logger.debug("Unconvertible xls date serial %r at column %d", raw.value, column_index)
            return GridCell(
                column_index,
                CellType.NUMERIC,
                value,
                is_date_formatted=True,
                display_text=format_display_value(value),
            )
        if ctype == xlrd.XL_CELL_BOOLEAN:
            flag = bool(value)
            return GridCell(column_index, CellType.BOOLEAN, flag, display_text=format_display_value(flag))
        if ctype == xlrd.XL_CELL_ERROR:
            text = xlrd.error_text_from_code.get(value, "#ERR")
            return GridCell(column_index, CellType.ERROR, value, display_text=text)
        return GridCell(column_index, CellType.ERROR, value, display_text=format_display_value(value))


class XlrdGrid(Grid):
    backend = "xlrd"

    def __init__(self, book: Any):
        self._book = book

    @classmethod
    def open(cls, file_path: str) -> "XlrdGrid":
        try:
            book = xlrd.open_workbook(file_path)
        except (xlrd.XLRDError, CompDocError, ValueError, OSError) as exc:
            raise WorkbookOpenError(file_path, f"{type(exc).__name__}: {exc}") from exc
        return cls(book)

    def sheet_names(self) -> List[str]:
        return list(self._book.sheet_names())

    def sheet(self, name: Optional[str] = None) -> GridSheet:
        sheets = self._book.sheets()
        if name is not None:
            if name not in self.sheet_names():
                raise SheetNotFoundError(name, self.sheet_names())
            chosen = self._book.sheet_by_name(name)
        else:
            if not sheets:
                raise SheetNotFoundError("<active>", [])
            selected = [s for s in sheets if getattr(s, "sheet_selected", 0)]
            chosen = selected[0] if selected else sheets[0]
        logger.debug("Selected sheet %r (backend=xlrd)", chosen.name)
        return XlrdSheet(chosen, self._book.datemode)

    def close(self) -> None:
        if self._book is not None:
            self._book.release_resources()
            self._book = None
