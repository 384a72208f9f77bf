"""
CellValueExtractor: turn one grid cell into a typed value.

Responsibilities:
- typed conversion (text, number, date, boolean) including formula results
- string form used by header detection (``as_text``)
- local recovery: a cell that cannot be converted yields its display string

Extraction never raises. The outcome is reported through :class:`CellValue`
so callers can tell typed values from display-string fallbacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from bankstatement.extractors.excel.grid import CellType, GridCell
from bankstatement.logger import get_logger

logger = get_logger(__name__)

# 1900 date system epoch as used by Excel serial numbers.
EXCEL_EPOCH = "1899-12-30"


@dataclass(frozen=True)
class CellValue:
    """Result of extracting one cell: a typed value, a fallback string, or nothing."""

    value: Any = None
    fallback: bool = False

    @property
    def is_present(self) -> bool:
        return self.value is not None


ABSENT = CellValue()


class _Unconvertible:
    """Marker returned by the typed path when a cell cannot be converted."""

    def __repr__(self) -> str:
        return "<unconvertible>"


_UNCONVERTIBLE = _Unconvertible()


class CellValueExtractor:
    """Stateless converter from :class:`GridCell` to Python values."""

    # ----- typed path ------------------------------------------------------

    def extract(self, cell: Optional[GridCell]) -> CellValue:
        """
        Convert *cell* for record building.

        Missing and blank cells are :data:`ABSENT`. Formula cells follow the
        rules of their cached result type; an unknown or missing cached result
        is :data:`ABSENT`. Anything else that cannot be converted falls back
        to the cell's display text.
        """
        if cell is None or cell.cell_type is CellType.BLANK:
            return ABSENT

        if cell.cell_type is CellType.FORMULA:
            result_type = cell.cached_result_type
            if result_type not in (CellType.TEXT, CellType.NUMERIC, CellType.BOOLEAN):
                return ABSENT
            converted = self._convert(result_type, cell.value, cell.is_date_formatted)
        else:
            converted = self._convert(cell.cell_type, cell.value, cell.is_date_formatted)

        if converted is _UNCONVERTIBLE:
            logger.debug(
                "Cell at column %d (%s) not convertible, using display text %r",
                cell.column_index, cell.cell_type.value, cell.display_text,
            )
            return CellValue(cell.display_text, fallback=True)
        if converted is None:
            return ABSENT
        return CellValue(converted)

    def _convert(self, cell_type: CellType, value: Any, is_date_formatted: bool) -> Any:
        if cell_type is CellType.TEXT:
            if isinstance(value, str):
                return value.strip()
            text_attr = getattr(value, "plain", None) or getattr(value, "text", None)
            if isinstance(text_attr, str):
                return text_attr.strip()
            return _UNCONVERTIBLE
        if cell_type is CellType.NUMERIC:
            if is_date_formatted:
                return self.to_date(value)
            return self.to_number(value)
        if cell_type is CellType.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, (int, float)) and value in (0, 1):
                return bool(value)
            return _UNCONVERTIBLE
        # ERROR and anything the grid could not classify
        return _UNCONVERTIBLE

    @staticmethod
    def to_number(value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _UNCONVERTIBLE
        if pd.isna(value):
            return None
        return float(value)

    @staticmethod
    def to_date(value: Any) -> Any:
        """Reduce a date-formatted numeric cell to day precision."""
        if isinstance(value, pd.Timestamp):
            if pd.isna(value):
                return None
            return value.date()
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            # time-of-day / duration formats have no calendar day
            return _UNCONVERTIBLE
        if pd.isna(value):
            return None
        if value < 0:
            return _UNCONVERTIBLE
        try:
            # Timestamps past 9999-12-31 have no stdlib date.
            return pd.to_datetime(value, unit="D", origin=EXCEL_EPOCH).date()
        except (ValueError, OverflowError, NotImplementedError):
            return _UNCONVERTIBLE

    # ----- string path -----------------------------------------------------

    def as_text(self, cell: Optional[GridCell]) -> str:
        """Trimmed string form of *cell*; ``""`` when it has no value."""
        result = self.extract(cell)
        return self.render(result.value)

    @staticmethod
    def render(value: Any) -> str:
        """Text rendering of an extracted value, as used for emptiness checks."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, date):
            return value.isoformat()
        return str(value).strip()
