"""
Transaction Record Module

Immutable entries of the ledger's append-only transaction log.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TransactionKind(Enum):
    """Kinds of entries recorded per affected account"""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger entry against one account

    Immutable once created. Ordering in the log is insertion order, which is
    also transaction_id order.
    """
    transaction_id: int
    account_number: int
    kind: TransactionKind
    amount: Decimal
    timestamp: datetime
    description: str

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError("Transaction amount must be positive")

    @property
    def date(self) -> str:
        """Timestamp as written to the transactions table"""
        return self.timestamp.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)
