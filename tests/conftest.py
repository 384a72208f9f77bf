"""
Pytest configuration and shared fixtures.
"""
import logging
import os
import sys

import pytest
from openpyxl import Workbook

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from bankstatement.config import reset_settings
from bankstatement.logger import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; re-read the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def log_capture(caplog):
    """caplog wired to the package logger (which does not propagate to root)."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger=ROOT_LOGGER_NAME)
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture
def write_xlsx(tmp_path):
    """
    Factory writing rows to ``<tmp>/<name>`` with openpyxl.

    ``None`` entries in *rows* leave the whole row empty.
    """
    def _write(rows, name="statement.xlsx", title="Sheet1"):
        wb = Workbook()
        ws = wb.active
        ws.title = title
        for row_idx, row in enumerate(rows, start=1):
            if row is None:
                continue
            for col_idx, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=row_idx, column=col_idx, value=value)
        path = tmp_path / name
        wb.save(path)
        return path

    return _write
