"""
Excel statement extraction subpackage.

Public API:
  - ExcelReader          (file I/O, engine and sheet selection)
  - CellValueExtractor   (cell -> typed value / display fallback)
  - HeaderDetector       (header row identification)
  - TransactionBuilder   (rows -> transaction records)
  - ExtractorConfig      (keyword vocabulary and thresholds)
"""

from bankstatement.extractors.excel.config import ExtractorConfig, DEFAULT_CONFIG, HEADER_KEYWORDS
from bankstatement.extractors.excel.grid import CellType, Grid, GridCell, GridRow, GridSheet, MemoryGrid, MemorySheet
from bankstatement.extractors.excel.cell_extractor import ABSENT, CellValue, CellValueExtractor
from bankstatement.extractors.excel.header_detector import Column, HeaderDetector, HeaderSelection
from bankstatement.extractors.excel.transaction_builder import TransactionBuilder
from bankstatement.extractors.excel.reader import ExcelReader

__all__ = [
    "ExtractorConfig",
    "DEFAULT_CONFIG",
    "HEADER_KEYWORDS",
    "CellType",
    "Grid",
    "GridCell",
    "GridRow",
    "GridSheet",
    "MemoryGrid",
    "MemorySheet",
    "ABSENT",
    "CellValue",
    "CellValueExtractor",
    "Column",
    "HeaderDetector",
    "HeaderSelection",
    "TransactionBuilder",
    "ExcelReader",
]
