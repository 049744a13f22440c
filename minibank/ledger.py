"""
Ledger Store Module

Owns every account and the append-only transaction log for one run, along
with the monotonic account-number and transaction-id counters. All balance
changes go through the operations here; each one validates before mutating
so a failed operation leaves the ledger exactly as it was.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .accounts import (
    Account, AccountSummary, validate_name, validate_pin
)
from .currency import MAX_AMOUNT, AmountLike, parse_amount
from .errors import (
    AccountNotFoundError, AuthorizationFailedError, InsufficientFundsError,
    InvalidAmountError, LedgerError, OperationResult
)
from .logging_config import get_logger, log_action
from .transactions import Transaction, TransactionKind


DEFAULT_FIRST_ACCOUNT_NUMBER = 1001001000
DEFAULT_FIRST_TRANSACTION_ID = 1

AUTHORIZATION_FAILED_MESSAGE = "Incorrect account number or PIN."


class Ledger:
    """
    In-memory account and transaction ledger

    Public operations never raise for business failures; they return an
    OperationResult carrying either the value or the ErrorKind.
    """

    def __init__(
        self,
        first_account_number: int = DEFAULT_FIRST_ACCOUNT_NUMBER,
        first_transaction_id: int = DEFAULT_FIRST_TRANSACTION_ID,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.first_account_number = first_account_number
        self.first_transaction_id = first_transaction_id
        self._accounts: Dict[int, Account] = {}
        self._transactions: List[Transaction] = []
        self._next_account_number = first_account_number
        self._next_transaction_id = first_transaction_id
        self._clock = clock or datetime.now
        self.logger = get_logger("minibank.ledger")

    @classmethod
    def from_records(
        cls,
        accounts: Iterable[Account],
        transactions: Iterable[Transaction],
        first_account_number: int = DEFAULT_FIRST_ACCOUNT_NUMBER,
        first_transaction_id: int = DEFAULT_FIRST_TRANSACTION_ID,
        clock: Optional[Callable[[], datetime]] = None
    ) -> "Ledger":
        """
        Build a ledger from previously persisted records

        Counters resume one past the highest loaded identifier, and never
        below their configured starting values.
        """
        ledger = cls(first_account_number, first_transaction_id, clock)
        for account in accounts:
            ledger._accounts[account.account_number] = account
            ledger._next_account_number = max(
                ledger._next_account_number, account.account_number + 1
            )
        for transaction in transactions:
            ledger._transactions.append(transaction)
            ledger._next_transaction_id = max(
                ledger._next_transaction_id, transaction.transaction_id + 1
            )
        return ledger

    # ---------- Read accessors ----------

    @property
    def next_account_number(self) -> int:
        return self._next_account_number

    @property
    def next_transaction_id(self) -> int:
        return self._next_transaction_id

    def get_account(self, account_number: int) -> Optional[AccountSummary]:
        """Get an account summary by number (no PIN required)"""
        account = self._accounts.get(account_number)
        return account.summary() if account else None

    def accounts(self) -> List[Account]:
        """Copies of all accounts, ordered by account number"""
        return [
            Account(a.account_number, a.name, a.pin, a.balance)
            for a in sorted(self._accounts.values(), key=lambda a: a.account_number)
        ]

    def transactions(self) -> Tuple[Transaction, ...]:
        """The full transaction log in insertion order"""
        return tuple(self._transactions)

    # ---------- Operations ----------

    def create_account(self, name: str, pin: str) -> OperationResult[AccountSummary]:
        """
        Open a new account with a zero balance

        Args:
            name: Account holder name, trimmed, must not be empty
            pin: Exactly four decimal digits

        Returns:
            OperationResult with the new AccountSummary, or INVALID_INPUT
        """
        try:
            clean_name = validate_name(name)
            clean_pin = validate_pin(pin)
        except LedgerError as e:
            return self._fail("create_account", e)

        account_number = self._next_account_number
        self._next_account_number += 1

        account = Account(account_number, clean_name, clean_pin)
        self._accounts[account_number] = account

        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{account_number}"
        )
        return OperationResult.success(account.summary())

    def deposit(self, account_number: int, amount: AmountLike) -> OperationResult[Transaction]:
        """Credit an account; no PIN is required to deposit"""
        try:
            account = self._require_account(account_number)
            value = parse_amount(amount)
            self._require_capacity(account, value)
        except LedgerError as e:
            return self._fail("deposit", e, account_number)

        account.balance += value
        transaction = self._record(account_number, TransactionKind.DEPOSIT, value, "Deposit")

        self._log_posted("deposit", transaction, account.balance)
        return OperationResult.success(transaction)

    def withdraw(self, account_number: int, pin: str, amount: AmountLike) -> OperationResult[Transaction]:
        """Debit an account after checking its PIN and available balance"""
        try:
            account = self._authorize(account_number, pin)
            value = parse_amount(amount)
            self._require_funds(account, value)
        except LedgerError as e:
            return self._fail("withdraw", e, account_number)

        account.balance -= value
        transaction = self._record(account_number, TransactionKind.WITHDRAW, value, "Withdrawal")

        self._log_posted("withdraw", transaction, account.balance)
        return OperationResult.success(transaction)

    def transfer(
        self,
        from_number: int,
        pin: str,
        to_number: int,
        amount: AmountLike
    ) -> OperationResult[Tuple[Transaction, Transaction]]:
        """
        Move funds between two accounts

        Both balances change together or not at all. A transfer to the same
        account is allowed: the balance is unchanged but both legs are logged.

        Returns:
            OperationResult with the (TRANSFER_OUT, TRANSFER_IN) pair
        """
        try:
            sender = self._authorize(from_number, pin)
            recipient = self._require_account(to_number)
            value = parse_amount(amount)
            self._require_funds(sender, value)
            if recipient is not sender:
                self._require_capacity(recipient, value)
        except LedgerError as e:
            return self._fail("transfer", e, from_number)

        timestamp = self._now()
        sender.balance -= value
        recipient.balance += value

        outgoing = self._record(
            from_number, TransactionKind.TRANSFER_OUT, value,
            f"Transfer to {to_number}", timestamp
        )
        incoming = self._record(
            to_number, TransactionKind.TRANSFER_IN, value,
            f"Transfer from {from_number}", timestamp
        )

        log_action(
            self.logger, "info", "Transfer posted",
            action="transfer", resource=f"account:{from_number}",
            extra={
                "to_account": to_number,
                "amount": str(value),
                "transaction_ids": [outgoing.transaction_id, incoming.transaction_id]
            }
        )
        return OperationResult.success((outgoing, incoming))

    def authorize(self, account_number: int, pin: str) -> OperationResult[AccountSummary]:
        """Check a PIN without revealing whether the account exists"""
        try:
            account = self._authorize(account_number, pin)
        except LedgerError as e:
            return self._fail("authorize", e, account_number)
        return OperationResult.success(account.summary())

    def view_balance(self, account_number: int, pin: str) -> OperationResult[AccountSummary]:
        """Return number, name and balance of a PIN-authorized account"""
        return self.authorize(account_number, pin)

    def view_history(self, account_number: int, pin: str) -> OperationResult[Tuple[Transaction, ...]]:
        """Transactions of a PIN-authorized account, most recent first"""
        try:
            self._authorize(account_number, pin)
        except LedgerError as e:
            return self._fail("view_history", e, account_number)

        history = sorted(
            (tx for tx in self._transactions if tx.account_number == account_number),
            key=lambda tx: tx.transaction_id,
            reverse=True
        )
        return OperationResult.success(tuple(history))

    # ---------- Helpers ----------

    def _require_account(self, account_number: int) -> Account:
        account = self._accounts.get(account_number)
        if account is None:
            raise AccountNotFoundError(
                "Account not found.", {"account_number": account_number}
            )
        return account

    def _authorize(self, account_number: int, pin: str) -> Account:
        account = self._accounts.get(account_number)
        if account is None or not account.pin_matches(pin):
            raise AuthorizationFailedError(AUTHORIZATION_FAILED_MESSAGE)
        return account

    def _require_capacity(self, account: Account, amount: Decimal) -> None:
        if account.balance + amount > MAX_AMOUNT:
            raise InvalidAmountError(
                "Amount would take the balance out of range.",
                {"balance": str(account.balance), "amount": str(amount)}
            )

    def _require_funds(self, account: Account, amount: Decimal) -> None:
        if amount > account.balance:
            raise InsufficientFundsError(
                "Insufficient funds.",
                {"balance": str(account.balance), "amount": str(amount)}
            )

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    def _record(
        self,
        account_number: int,
        kind: TransactionKind,
        amount: Decimal,
        description: str,
        timestamp: Optional[datetime] = None
    ) -> Transaction:
        transaction = Transaction(
            transaction_id=self._next_transaction_id,
            account_number=account_number,
            kind=kind,
            amount=amount,
            timestamp=timestamp or self._now(),
            description=description
        )
        self._next_transaction_id += 1
        self._transactions.append(transaction)
        return transaction

    def _log_posted(self, action: str, transaction: Transaction, balance: Decimal) -> None:
        log_action(
            self.logger, "info", f"{transaction.kind.value} posted",
            action=action, resource=f"account:{transaction.account_number}",
            extra={
                "transaction_id": transaction.transaction_id,
                "amount": str(transaction.amount),
                "balance": str(balance)
            }
        )

    def _fail(self, action: str, error: LedgerError,
              account_number: Optional[int] = None) -> OperationResult:
        log_action(
            self.logger, "warning", f"{action} rejected: {error.message}",
            action=action,
            resource=f"account:{account_number}" if account_number is not None else None,
            extra={"error": error.kind.value}
        )
        return OperationResult.failure(error)
