"""
Statement extractor: orchestrates one parse.

open grid -> pick sheet -> detect header -> build transactions -> ParseResult

Structural failures (missing file, undecodable container, unknown sheet)
propagate as :class:`~bankstatement.errors.StatementParseError`; the grid is
closed on every exit path.
"""

from __future__ import annotations

from typing import Optional

from bankstatement.extractors.excel.cell_extractor import CellValueExtractor
from bankstatement.extractors.excel.config import DEFAULT_CONFIG, ExtractorConfig
from bankstatement.extractors.excel.grid import GridSheet
from bankstatement.extractors.excel.header_detector import HeaderDetector
from bankstatement.extractors.excel.reader import ExcelReader
from bankstatement.extractors.excel.transaction_builder import TransactionBuilder
from bankstatement.ir import ParseResult
from bankstatement.logger import get_logger

logger = get_logger(__name__)


class StatementExtractor:
    """
    Parses bank statement spreadsheets.

    Holds no per-parse state, so one instance can serve any number of
    sequential or concurrent parses of distinct files.
    """

    def __init__(
        self,
        cfg: ExtractorConfig = DEFAULT_CONFIG,
        reader: Optional[ExcelReader] = None,
    ):
        self._cfg = cfg
        self._reader = reader or ExcelReader()
        cells = CellValueExtractor()
        self._header_detector = HeaderDetector(cfg, cells)
        self._builder = TransactionBuilder(cells)

    def parse(self, bank_name: str, file_path: str, sheet_name: Optional[str] = None) -> ParseResult:
        """Parse *file_path* and label the result with *bank_name*."""
        logger.info("Parsing statement for %s: %s", bank_name, file_path)
        with self._reader.open(file_path) as grid:
            sheet = grid.sheet(sheet_name)
            result = self.parse_sheet(bank_name, sheet)
        logger.info("Parsed %d transactions from %s", result.count, file_path)
        return result

    def parse_sheet(self, bank_name: str, sheet: GridSheet) -> ParseResult:
        """
        Parse an already-open sheet.

        The sheet is iterated twice: the header can sit anywhere, so it must
        be known before any record is built.
        """
        selection = self._header_detector.detect(sheet.rows())
        transactions = self._builder.build(sheet.rows(), selection)
        return ParseResult.from_transactions(bank_name, transactions)


def parse_statement(
    bank_name: str,
    file_path: str,
    sheet_name: Optional[str] = None,
    cfg: ExtractorConfig = DEFAULT_CONFIG,
) -> ParseResult:
    """Convenience entry: parse one statement file."""
    return StatementExtractor(cfg).parse(bank_name, file_path, sheet_name=sheet_name)
