"""
Bank statement parser.

Turns bank-statement spreadsheets with arbitrary layouts into a normalized
list of transaction records.
"""

__version__ = "1.0.0"

from bankstatement.ir import ParseResult
from bankstatement.extractors.statement_extractor import StatementExtractor, parse_statement

__all__ = ["ParseResult", "StatementExtractor", "parse_statement", "__version__"]
