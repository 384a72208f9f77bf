"""
Extractors module.

Provides:
- StatementExtractor: parses one statement spreadsheet into a ParseResult
- parse_statement: convenience wrapper around StatementExtractor
"""

from bankstatement.extractors.statement_extractor import StatementExtractor, parse_statement

__all__ = ["StatementExtractor", "parse_statement"]
