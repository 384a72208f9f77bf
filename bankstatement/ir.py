"""
Intermediate Representation Module
==================================

Output data structures shared by the extraction engine and the command line
front end.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator

# One output record: column name -> typed cell value, in ascending column order.
Transaction = Dict[str, Any]


class ParseResult(BaseModel):
    """
    Result of parsing one statement.

    Attributes:
        bank_name: institution label echoed from the caller (``bankName`` in JSON)
        count: number of transactions
        transactions: one ordered mapping per non-blank data row
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    bank_name: str = Field(alias="bankName")
    count: int
    transactions: List[Transaction] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_count(self) -> "ParseResult":
        if self.count != len(self.transactions):
            raise ValueError(
                f"count ({self.count}) does not match number of transactions ({len(self.transactions)})"
            )
        return self

    @classmethod
    def from_transactions(cls, bank_name: str, transactions: List[Transaction]) -> "ParseResult":
        return cls(bank_name=bank_name, count=len(transactions), transactions=list(transactions))

    def to_json(self, indent: int = 2) -> str:
        """
        Serialise with the public key names.

        ``datetime.date`` values become ``yyyy-MM-dd`` strings, floats stay JSON
        numbers and booleans stay JSON booleans.
        """
        return self.model_dump_json(by_alias=True, indent=indent or None)
