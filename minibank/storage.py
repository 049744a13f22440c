"""
Storage Backend Module

Persists the ledger to two flat-file tables, accounts and transactions.
Each table is a header line followed by one comma-separated line per record,
with no quoting. All monetary values are stored as Decimal strings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .accounts import Account
from .currency import parse_amount
from .errors import (
    LedgerError, OperationResult, PersistenceReadError, PersistenceWriteError
)
from .ledger import DEFAULT_FIRST_ACCOUNT_NUMBER, DEFAULT_FIRST_TRANSACTION_ID, Ledger
from .logging_config import get_logger, log_action
from .transactions import Transaction, TransactionKind, parse_timestamp


DELIMITER = ","
ACCOUNTS_HEADER = ("accNumber", "name", "pin", "balance")
TRANSACTIONS_HEADER = ("id", "accNumber", "type", "amount", "date", "description")

R = TypeVar("R", bound=BaseModel)


class AccountRow(BaseModel):
    """One parsed line of the accounts table"""
    account_number: int
    name: str
    pin: str
    balance: Decimal = Field(ge=0, allow_inf_nan=False)

    def to_record(self) -> Account:
        return Account(self.account_number, self.name, self.pin, self.balance)


class TransactionRow(BaseModel):
    """One parsed line of the transactions table"""
    transaction_id: int
    account_number: int
    kind: TransactionKind
    amount: Decimal = Field(gt=0, allow_inf_nan=False)
    timestamp: datetime
    description: str

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_date(cls, value):
        if isinstance(value, str):
            return parse_timestamp(value)
        return value

    def to_record(self) -> Transaction:
        return Transaction(
            transaction_id=self.transaction_id,
            account_number=self.account_number,
            kind=self.kind,
            amount=parse_amount(self.amount),
            timestamp=self.timestamp,
            description=self.description
        )


def escape_text(value: str) -> str:
    """
    Make free text safe for the fixed-arity line format

    The delimiter and line breaks become spaces. Lossy but deterministic.
    """
    return value.replace(DELIMITER, " ").replace("\r", " ").replace("\n", " ")


def encode_account(account: Account) -> str:
    return DELIMITER.join((
        str(account.account_number),
        escape_text(account.name),
        account.pin,
        str(account.balance),
    ))


def encode_transaction(transaction: Transaction) -> str:
    return DELIMITER.join((
        str(transaction.transaction_id),
        str(transaction.account_number),
        transaction.kind.value,
        str(transaction.amount),
        transaction.date,
        escape_text(transaction.description),
    ))


@dataclass
class LoadResult:
    """Ledger produced by a load, plus what happened while reading"""
    ledger: Ledger
    accounts_loaded: int = 0
    transactions_loaded: int = 0
    skipped_rows: int = 0
    created_files: List[Path] = field(default_factory=list)
    errors: List[LedgerError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class _TableRead:
    records: list = field(default_factory=list)
    skipped: int = 0
    created: bool = False
    error: Optional[LedgerError] = None


class StorageInterface(ABC):
    """Abstract interface for ledger storage backends"""

    @abstractmethod
    def load(self) -> LoadResult:
        """Read persisted state into a fresh Ledger"""
        pass

    @abstractmethod
    def save(self, ledger: Ledger) -> OperationResult[None]:
        """Overwrite persisted state with the ledger's current records"""
        pass


class FlatFileStorage(StorageInterface):
    """Comma-delimited flat-file storage for accounts and transactions"""

    def __init__(
        self,
        accounts_path: Union[str, Path] = "accounts.csv",
        transactions_path: Union[str, Path] = "transactions.csv",
        first_account_number: int = DEFAULT_FIRST_ACCOUNT_NUMBER,
        first_transaction_id: int = DEFAULT_FIRST_TRANSACTION_ID,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.accounts_path = Path(accounts_path)
        self.transactions_path = Path(transactions_path)
        self.first_account_number = first_account_number
        self.first_transaction_id = first_transaction_id
        self.clock = clock
        self.logger = get_logger("minibank.storage")

    @classmethod
    def from_config(cls, config) -> "FlatFileStorage":
        return cls(
            accounts_path=config.accounts_path,
            transactions_path=config.transactions_path,
            first_account_number=config.first_account_number,
            first_transaction_id=config.first_transaction_id
        )

    def load(self) -> LoadResult:
        """
        Load both tables into a fresh Ledger

        Short rows are skipped. The first row whose fields fail to parse stops
        that table; rows read before it are kept. Missing files are created
        with just their header. Nothing here raises.
        """
        accounts = self._read_table(
            self.accounts_path, ACCOUNTS_HEADER, AccountRow, "accounts"
        )
        transactions = self._read_table(
            self.transactions_path, TRANSACTIONS_HEADER, TransactionRow, "transactions"
        )

        ledger = Ledger.from_records(
            accounts.records,
            transactions.records,
            first_account_number=self.first_account_number,
            first_transaction_id=self.first_transaction_id,
            clock=self.clock
        )

        result = LoadResult(
            ledger=ledger,
            accounts_loaded=len(accounts.records),
            transactions_loaded=len(transactions.records),
            skipped_rows=accounts.skipped + transactions.skipped
        )
        for path, table in ((self.accounts_path, accounts), (self.transactions_path, transactions)):
            if table.created:
                result.created_files.append(path)
            if table.error:
                result.errors.append(table.error)

        log_action(
            self.logger, "info", "Ledger loaded",
            action="load",
            extra={
                "accounts": result.accounts_loaded,
                "transactions": result.transactions_loaded,
                "skipped_rows": result.skipped_rows,
                "errors": len(result.errors)
            }
        )
        return result

    def save(self, ledger: Ledger) -> OperationResult[None]:
        """
        Rewrite both tables in full

        Both tables are attempted even if the first fails. In-memory state is
        never touched.
        """
        errors = []
        tables = (
            (self.accounts_path, ACCOUNTS_HEADER, [encode_account(a) for a in ledger.accounts()]),
            (self.transactions_path, TRANSACTIONS_HEADER,
             [encode_transaction(t) for t in ledger.transactions()]),
        )
        for path, header, lines in tables:
            try:
                self._write_table(path, header, lines)
            except OSError as e:
                errors.append(f"{path}: {e}")
                log_action(
                    self.logger, "error", f"Failed to save {path.name}",
                    action="save", resource=str(path), extra={"error": str(e)}
                )

        if errors:
            return OperationResult.failure(
                PersistenceWriteError("Failed to save: " + "; ".join(errors))
            )

        log_action(
            self.logger, "info", "Ledger saved",
            action="save",
            extra={
                "accounts": len(tables[0][2]),
                "transactions": len(tables[1][2])
            }
        )
        return OperationResult.success()

    def _write_table(self, path: Path, header: Tuple[str, ...], lines: List[str]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(DELIMITER.join(header) + "\n")
            for line in lines:
                handle.write(line + "\n")

    def _read_table(self, path: Path, header: Tuple[str, ...],
                    row_model: Type[R], table: str) -> _TableRead:
        read = _TableRead()

        if not path.exists():
            try:
                self._write_table(path, header, [])
                read.created = True
            except OSError as e:
                read.error = PersistenceWriteError(
                    f"Failed to create {table} file: {e}", {"path": str(path)}
                )
                log_action(self.logger, "error", read.error.message,
                           action="load", resource=str(path))
            return read

        arity = len(header)
        names = list(row_model.model_fields)
        line_number = 1
        try:
            with open(path, "r", encoding="utf-8") as handle:
                handle.readline()  # header
                for line in handle:
                    line_number += 1
                    fields = line.rstrip("\r\n").split(DELIMITER)
                    if len(fields) < arity:
                        read.skipped += 1
                        log_action(
                            self.logger, "debug", f"Skipped malformed {table} row",
                            action="load", resource=f"{path.name}:{line_number}"
                        )
                        continue
                    row = row_model(**dict(zip(names, fields[:arity])))
                    read.records.append(row.to_record())
        except (OSError, UnicodeDecodeError) as e:
            read.error = PersistenceReadError(
                f"Failed to load {table}: {e}", {"path": str(path)}
            )
        except (ValidationError, ValueError, LedgerError) as e:
            read.error = PersistenceReadError(
                f"Failed to load {table}: invalid row at line {line_number}",
                {"path": str(path), "line": line_number, "reason": str(e)}
            )

        if read.error:
            log_action(
                self.logger, "error", read.error.message,
                action="load", resource=str(path),
                extra={"rows_kept": len(read.records)}
            )
        return read
