"""
HeaderDetector: identify which row of a statement sheet is the header.

Every row is scored against the keyword vocabulary of an
:class:`ExtractorConfig`; the first row with the highest score (at least
``min_header_score``) wins. When no row qualifies, the first row of the
sheet is used as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from bankstatement.extractors.excel.cell_extractor import CellValueExtractor
from bankstatement.extractors.excel.config import DEFAULT_CONFIG, ExtractorConfig
from bankstatement.extractors.excel.grid import CellType, GridRow
from bankstatement.logger import get_logger

logger = get_logger(__name__)

REASON_KEYWORD_SCORE = "keyword_score_max"
REASON_FALLBACK = "fallback_first_row"


class Column(NamedTuple):
    index: int
    name: str


# Ordered by ascending column index.
ColumnMap = Tuple[Column, ...]


@dataclass(frozen=True)
class HeaderSelection:
    """Chosen header row, its column map, and how it was chosen."""

    row_index: int
    columns: ColumnMap
    score: int
    reason: str
    debug: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_fallback(self) -> bool:
        return self.reason == REASON_FALLBACK

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


class HeaderDetector:
    """
    Stateless detector; one call per sheet.

    The keyword vocabulary comes from the (immutable) config given at
    construction.
    """

    def __init__(
        self,
        cfg: ExtractorConfig = DEFAULT_CONFIG,
        cell_extractor: Optional[CellValueExtractor] = None,
    ):
        self._cfg = cfg
        self._cells = cell_extractor or CellValueExtractor()

    # -----------------------------------------------------------------
    # Scoring
    # -----------------------------------------------------------------

    def matches_keyword(self, value: str) -> bool:
        """
        ``True`` if *value* (already lower-cased) contains a keyword and is
        no longer than that keyword plus the configured slack.
        """
        slack = self._cfg.keyword_length_slack
        return any(kw in value and len(value) <= len(kw) + slack for kw in self._cfg.header_keywords)

    def candidate_columns(self, row: GridRow) -> Dict[int, str]:
        """Lower-cased, trimmed string form of every non-empty cell in *row*."""
        candidate: Dict[int, str] = {}
        for cell in row:
            text = self._cells.as_text(cell).lower()
            if text:
                candidate[cell.column_index] = text
        return candidate

    def score_row(self, candidate: Dict[int, str]) -> int:
        return sum(1 for value in candidate.values() if self.matches_keyword(value))

    # -----------------------------------------------------------------
    # Header row selection
    # -----------------------------------------------------------------

    def detect(self, rows: Iterable[GridRow]) -> HeaderSelection:
        """
        Scan all *rows* and return the header selection.

        Ties keep the earliest row: a later row must score strictly higher
        to replace the current best.
        """
        best_score = 0
        best_row: Optional[GridRow] = None
        best_candidate: Dict[int, str] = {}
        first_row: Optional[GridRow] = None
        scanned: List[Dict[str, Any]] = []

        for row in rows:
            if first_row is None:
                first_row = row
            candidate = self.candidate_columns(row)
            score = self.score_row(candidate)
            scanned.append({"row_idx": row.index, "score": score, "non_empty": len(candidate)})
            if score > best_score and score >= self._cfg.min_header_score:
                best_score = score
                best_row = row
                best_candidate = candidate

        debug: Dict[str, Any] = {"scanned_rows": scanned}
        logger.debug("Header scores: %s", [(s["row_idx"], s["score"]) for s in scanned if s["score"]])

        if best_row is not None:
            columns = self._build_column_map(best_candidate)
            debug["chosen_header_row_idx"] = best_row.index
            debug["chosen_reason"] = REASON_KEYWORD_SCORE
            logger.info(
                "Header row %d selected (score=%d): %s",
                best_row.index, best_score, [c.name for c in columns],
            )
            return HeaderSelection(best_row.index, columns, best_score, REASON_KEYWORD_SCORE, debug)

        return self._fallback(first_row, debug)

    def _fallback(self, first_row: Optional[GridRow], debug: Dict[str, Any]) -> HeaderSelection:
        """Use the first row verbatim when no row looks like a header."""
        logger.warning("Could not identify a clear header row. Trying row 0.")
        debug["chosen_reason"] = REASON_FALLBACK
        if first_row is None:
            debug["chosen_header_row_idx"] = 0
            return HeaderSelection(0, (), 0, REASON_FALLBACK, debug)

        names: Dict[int, str] = {}
        for cell in first_row:
            if cell.cell_type is CellType.BLANK:
                continue
            names[cell.column_index] = self._cells.as_text(cell)
        columns = self._build_column_map(names)
        debug["chosen_header_row_idx"] = first_row.index
        return HeaderSelection(
            first_row.index, columns, self.score_row({k: v.lower() for k, v in names.items()}),
            REASON_FALLBACK, debug,
        )

    def _build_column_map(self, names: Dict[int, str]) -> ColumnMap:
        return tuple(
            Column(index, name.strip() or self._cfg.placeholder_name(index))
            for index, name in sorted(names.items())
        )
