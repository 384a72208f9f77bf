"""
Tests for ExcelReader and the openpyxl / xlrd grid implementations.
"""
from datetime import date, datetime

import pytest
import xlrd
from openpyxl import Workbook
from xlrd.sheet import Cell

from bankstatement.errors import SheetNotFoundError, WorkbookOpenError
from bankstatement.extractors import StatementExtractor
from bankstatement.extractors.excel import reader as reader_module
from bankstatement.extractors.excel.grid import CellType, MemoryGrid, MemorySheet
from bankstatement.extractors.excel.reader import ExcelReader


@pytest.fixture
def reader():
    return ExcelReader()


class TestOpenpyxlGrid:

    def test_cell_types(self, reader, write_xlsx):
        path = write_xlsx([
            ["Date", "Details", "Amount", "Cleared", "Balance"],
            [date(2024, 1, 5), "  ATM  ", 250, True, "=C2*2"],
        ])
        with reader.open(str(path)) as grid:
            rows = list(grid.sheet().rows())

        assert [r.index for r in rows] == [0, 1]
        data = rows[1]
        assert data.cell(0).cell_type is CellType.NUMERIC
        assert data.cell(0).is_date_formatted
        assert isinstance(data.cell(0).value, datetime)
        assert data.cell(1).cell_type is CellType.TEXT
        assert data.cell(2).cell_type is CellType.NUMERIC
        assert not data.cell(2).is_date_formatted
        assert data.cell(3).cell_type is CellType.BOOLEAN
        assert data.cell(4).cell_type is CellType.FORMULA
        assert data.cell(4).value is None
        assert data.cell(4).display_text == "=C2*2"

    def test_empty_rows_are_not_yielded(self, reader, write_xlsx):
        path = write_xlsx([["Date", "Amount"], None, None, [date(2024, 1, 1), 1]])
        with reader.open(str(path)) as grid:
            assert [r.index for r in grid.sheet().rows()] == [0, 3]

    def test_active_sheet_is_default(self, reader, tmp_path):
        wb = Workbook()
        wb.active.title = "Cover"
        ws = wb.create_sheet("Statement")
        ws.append(["Date", "Amount"])
        wb.active = 1
        path = tmp_path / "active.xlsx"
        wb.save(path)

        with reader.open(str(path)) as grid:
            assert grid.sheet_names() == ["Cover", "Statement"]
            assert grid.sheet().name == "Statement"
            assert grid.sheet("Cover").name == "Cover"
            with pytest.raises(SheetNotFoundError):
                grid.sheet("Nope")

    def test_list_sheet_names(self, reader, write_xlsx):
        path = write_xlsx([["a"]], title="Txns")
        assert reader.list_sheet_names(str(path)) == (["Txns"], "openpyxl")


class TestOpenErrors:

    def test_missing_file(self, reader, tmp_path):
        with pytest.raises(WorkbookOpenError, match="file not found"):
            reader.open(str(tmp_path / "missing.xlsx"))

    def test_unsupported_extension(self, reader, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_text("Date,Amount\n")
        with pytest.raises(WorkbookOpenError, match="unsupported file extension"):
            reader.open(str(path))

    def test_corrupt_xlsx(self, reader, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(WorkbookOpenError) as excinfo:
            reader.open(str(path))
        assert excinfo.value.__cause__ is not None


# ---------------------------------------------------------------------------
# xlrd: no xls writer is available, so the book is faked around real xlrd cells
# ---------------------------------------------------------------------------

class DummyXlsSheet:
    def __init__(self, name, rows, selected=0):
        self.name = name
        self._rows = rows
        self.nrows = len(rows)
        self.sheet_selected = selected

    def row(self, rx):
        return self._rows[rx]


class DummyXlsBook:
    datemode = 0

    def __init__(self, sheets):
        self._sheets = sheets
        self.released = False

    def sheets(self):
        return list(self._sheets)

    def sheet_names(self):
        return [s.name for s in self._sheets]

    def sheet_by_name(self, name):
        return next(s for s in self._sheets if s.name == name)

    def release_resources(self):
        self.released = True


def _xls_rows():
    return [
        [Cell(xlrd.XL_CELL_TEXT, "Post Date"), Cell(xlrd.XL_CELL_TEXT, "Cheque No"), Cell(xlrd.XL_CELL_TEXT, "Debit")],
        [Cell(xlrd.XL_CELL_EMPTY, ""), Cell(xlrd.XL_CELL_BLANK, ""), Cell(xlrd.XL_CELL_EMPTY, "")],
        [Cell(xlrd.XL_CELL_DATE, 45292.0), Cell(xlrd.XL_CELL_NUMBER, 1001.0), Cell(xlrd.XL_CELL_NUMBER, 75.5)],
        [Cell(xlrd.XL_CELL_DATE, 45293.0), Cell(xlrd.XL_CELL_BOOLEAN, 1), Cell(xlrd.XL_CELL_ERROR, 0x2A)],
    ]


@pytest.fixture
def fake_xls(monkeypatch, tmp_path):
    path = tmp_path / "statement.xls"
    path.write_bytes(b"")
    book = DummyXlsBook([
        DummyXlsSheet("Notes", [[Cell(xlrd.XL_CELL_TEXT, "n/a")]]),
        DummyXlsSheet("Txns", _xls_rows(), selected=1),
    ])
    monkeypatch.setattr(reader_module.xlrd, "open_workbook", lambda file_path: book)
    return path, book


class TestXlrdGrid:

    def test_selected_sheet_and_cell_types(self, reader, fake_xls):
        path, book = fake_xls
        with reader.open(str(path)) as grid:
            assert grid.backend == "xlrd"
            sheet = grid.sheet()
            assert sheet.name == "Txns"
            rows = list(sheet.rows())

        assert [r.index for r in rows] == [0, 2, 3]
        first = rows[1]
        assert first.cell(0).is_date_formatted
        assert first.cell(0).value == datetime(2024, 1, 1)
        assert first.cell(2).value == 75.5
        assert rows[2].cell(1).cell_type is CellType.BOOLEAN
        assert rows[2].cell(2).cell_type is CellType.ERROR
        assert rows[2].cell(2).display_text == "#N/A"
        assert book.released is True

    def test_parse_xls_statement(self, fake_xls):
        path, _ = fake_xls
        result = StatementExtractor().parse("Canara", str(path))
        assert result.transactions == [
            {"post date": date(2024, 1, 1), "cheque no": 1001.0, "debit": 75.5},
            {"post date": date(2024, 1, 2), "cheque no": True, "debit": "#N/A"},
        ]

    def test_xlrd_failure_is_wrapped(self, reader, monkeypatch, tmp_path):
        path = tmp_path / "bad.xls"
        path.write_bytes(b"garbage")

        def fake_open_workbook(file_path):
            raise xlrd.XLRDError("Unsupported format, or corrupt file")

        monkeypatch.setattr(reader_module.xlrd, "open_workbook", fake_open_workbook)
        with pytest.raises(WorkbookOpenError, match="corrupt file"):
            reader.open(str(path))

    def test_out_of_range_date_keeps_parsing(self, monkeypatch, tmp_path):
        path = tmp_path / "overflow.xls"
        path.write_bytes(b"")
        rows = [
            [Cell(xlrd.XL_CELL_TEXT, "Date"), Cell(xlrd.XL_CELL_TEXT, "Amount")],
            [Cell(xlrd.XL_CELL_DATE, 1e10), Cell(xlrd.XL_CELL_NUMBER, 5.0)],
            [Cell(xlrd.XL_CELL_DATE, 45292.0), Cell(xlrd.XL_CELL_NUMBER, 6.0)],
        ]
        book = DummyXlsBook([DummyXlsSheet("Sheet1", rows)])
        monkeypatch.setattr(reader_module.xlrd, "open_workbook", lambda file_path: book)

        result = StatementExtractor().parse("Canara", str(path))

        assert result.transactions == [
            {"date": "10000000000", "amount": 5.0},
            {"date": date(2024, 1, 1), "amount": 6.0},
        ]


class TestMemoryGrid:

    @pytest.fixture
    def grid(self):
        return MemoryGrid([
            MemorySheet([["Opening summary"]], name="Summary"),
            MemorySheet([["Date", "Amount"], [date(2024, 8, 1), 9]], name="Txns"),
        ], active_index=1)

    def test_active_and_named_sheets(self, grid):
        assert grid.backend == "memory"
        assert grid.sheet_names() == ["Summary", "Txns"]
        assert grid.sheet().name == "Txns"
        assert grid.sheet("Summary").name == "Summary"

    def test_invalid_active_index_uses_first_sheet(self):
        grid = MemoryGrid([MemorySheet([["a"]], name="Only")], active_index=5)
        assert grid.sheet().name == "Only"

    def test_unknown_and_empty(self, grid):
        with pytest.raises(SheetNotFoundError) as excinfo:
            grid.sheet("Nope")
        assert excinfo.value.available == ["Summary", "Txns"]
        with pytest.raises(SheetNotFoundError):
            MemoryGrid([]).sheet()

    def test_extractor_with_memory_reader(self, grid):
        class MemoryReader:
            def open(self, file_path):
                return grid

        result = StatementExtractor(reader=MemoryReader()).parse("Kotak", "in-memory")
        assert result.transactions == [{"date": date(2024, 8, 1), "amount": 9.0}]
