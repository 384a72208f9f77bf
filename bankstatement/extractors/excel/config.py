"""
Centralised configuration for the statement extraction engine.

The header keyword vocabulary and every tunable threshold live here so the
detector and builder stay free of hard-coded values. Instances are frozen:
a detector receives its vocabulary at construction and nothing can change
it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet


# ---------------------------------------------------------------------------
# Keyword vocabulary
# ---------------------------------------------------------------------------

HEADER_KEYWORDS: FrozenSet[str] = frozenset({
    "date", "transaction", "amount", "balance", "withdrawal",
    "deposit", "description", "details", "narration", "debit", "credit",
    "ref", "reference", "value date", "post date", "particulars",
    "cheque", "chk",
})


# ---------------------------------------------------------------------------
# ExtractorConfig
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractorConfig:
    """Immutable bag of knobs used by header detection and row building."""

    header_keywords: FrozenSet[str] = field(default_factory=lambda: HEADER_KEYWORDS)

    # A cell only matches a keyword when len(cell) <= len(keyword) + slack.
    # Keeps narrative lines that merely mention "balance" from scoring.
    keyword_length_slack: int = 15

    # Minimum number of keyword-matching cells for a row to count as header.
    min_header_score: int = 2

    # Name given to header cells whose text is blank.
    placeholder_template: str = "Column_{index}"

    def __post_init__(self) -> None:
        # Accept any iterable of keywords but store a normalised frozenset.
        keywords = frozenset(k.strip().lower() for k in self.header_keywords if k and k.strip())
        if not keywords:
            raise ValueError("header_keywords must contain at least one keyword")
        object.__setattr__(self, "header_keywords", keywords)
        if self.keyword_length_slack < 0:
            raise ValueError("keyword_length_slack must not be negative")
        if self.min_header_score < 1:
            raise ValueError("min_header_score must be at least 1")

    def placeholder_name(self, column_index: int) -> str:
        return self.placeholder_template.format(index=column_index)


DEFAULT_CONFIG = ExtractorConfig()
