"""
Exception hierarchy for structural parse failures.

Cell-level problems never surface here: they are recovered inside
:class:`~bankstatement.extractors.excel.cell_extractor.CellValueExtractor`.
"""


class StatementParseError(Exception):
    """Base class for failures that abort a whole parse."""


class WorkbookOpenError(StatementParseError):
    """The spreadsheet container could not be found, recognised or decoded."""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Cannot open workbook {file_path}: {reason}")


class SheetNotFoundError(StatementParseError):
    """An explicitly requested sheet does not exist in the workbook."""

    def __init__(self, sheet_name: str, available: list):
        self.sheet_name = sheet_name
        self.available = list(available)
        super().__init__(
            f"Sheet {sheet_name!r} not found; available sheets: {', '.join(self.available) or '<none>'}"
        )
