"""
TransactionBuilder: convert the rows below the header into records.

Single forward pass. Rows that yield no value in any mapped column are
dropped without ending the scan, since statements often separate blocks
with empty rows. Footer rows such as "Closing Balance" are kept.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from bankstatement.extractors.excel.cell_extractor import CellValueExtractor
from bankstatement.extractors.excel.grid import GridRow
from bankstatement.extractors.excel.header_detector import ColumnMap, HeaderSelection
from bankstatement.ir import Transaction
from bankstatement.logger import get_logger

logger = get_logger(__name__)


class TransactionBuilder:

    def __init__(self, cell_extractor: Optional[CellValueExtractor] = None):
        self._cells = cell_extractor or CellValueExtractor()

    def build_row(self, row: GridRow, columns: ColumnMap) -> Transaction:
        """Record for one row; empty when no mapped column has a value."""
        record: Transaction = {}
        for column in columns:
            result = self._cells.extract(row.cell(column.index))
            if result.is_present and self._cells.render(result.value):
                record[column.name] = result.value
        return record

    def build(self, rows: Iterable[GridRow], selection: HeaderSelection) -> List[Transaction]:
        transactions: List[Transaction] = []
        blank_rows = 0
        for row in rows:
            if row.index <= selection.row_index:
                continue
            record = self.build_row(row, selection.columns)
            if not record:
                blank_rows += 1
                continue
            transactions.append(record)
        logger.debug(
            "Built %d transactions below header row %d (%d blank rows skipped)",
            len(transactions), selection.row_index, blank_rows,
        )
        return transactions
