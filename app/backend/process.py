"""
Backend Process Module
======================

Wraps one statement parse for the command line: parse -> JSON text ->
optional sibling ``.json`` file.
"""

from pathlib import Path
from typing import Optional, Tuple

from bankstatement.config import get_settings
from bankstatement.extractors import StatementExtractor
from bankstatement.ir import ParseResult
from bankstatement.logger import get_logger

logger = get_logger(__name__)


def output_path_for(file_path: str) -> Path:
    """``statement.xlsx`` -> ``statement.json`` in the same directory."""
    return Path(file_path).with_suffix(".json")


def write_json_output(json_text: str, file_path: str) -> str:
    """Write *json_text* next to *file_path*; returns the written path."""
    json_path = output_path_for(file_path)
    with open(json_path, "w", encoding="utf-8") as f:
        f.write(json_text)
    logger.debug("Wrote %d characters to %s", len(json_text), json_path)
    return str(json_path)


def process_statement(
    bank_name: str,
    file_path: str,
    sheet_name: Optional[str] = None,
    write_file: Optional[bool] = None,
    extractor: Optional[StatementExtractor] = None,
) -> Tuple[ParseResult, str, Optional[str]]:
    """
    Parse one statement and render it.

    Returns ``(result, json_text, json_path)``; ``json_path`` is ``None`` when
    writing is disabled. Nothing is written if parsing fails.
    """
    settings = get_settings()
    if write_file is None:
        write_file = settings.WRITE_OUTPUT_FILE

    extractor = extractor or StatementExtractor()
    result = extractor.parse(bank_name, file_path, sheet_name=sheet_name)
    json_text = result.to_json(indent=settings.JSON_INDENT)

    json_path = write_json_output(json_text, file_path) if write_file else None
    return result, json_text, json_path
