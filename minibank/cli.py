"""
Console Shell Module

Numbered text menu over the ledger. The shell only parses user input and
prints results; every rule lives in the Ledger operations it calls.
"""

from typing import Callable, Optional

from .accounts import parse_account_number
from .config import MiniBankConfig, get_config
from .currency import format_amount
from .errors import ErrorKind, LedgerError, OperationResult
from .ledger import Ledger
from .logging_config import setup_logging
from .storage import FlatFileStorage, StorageInterface


MENU = """
Select an option:
1. Create Account
2. Deposit
3. Withdraw
4. Transfer
5. View Balance
6. View Transaction History
7. Save & Exit"""

HISTORY_HEADER = "ID | Type         | Amount     | Date                | Description"

# Messages shown for failures the ledger reports
FAILURE_MESSAGES = {
    ErrorKind.ACCOUNT_NOT_FOUND: "Account not found.",
    ErrorKind.AUTHORIZATION_FAILED: "Incorrect PIN.",
    ErrorKind.INVALID_AMOUNT: "Invalid amount. Amount must be positive.",
}


class EndOfInput(Exception):
    """Raised when the input stream is exhausted"""


class BankShell:
    """Interactive menu loop bound to one ledger and its storage"""

    def __init__(
        self,
        ledger: Ledger,
        storage: StorageInterface,
        config: Optional[MiniBankConfig] = None,
        input_func: Optional[Callable[[str], str]] = None,
        output: Optional[Callable[[str], None]] = None
    ):
        self.ledger = ledger
        self.storage = storage
        self.config = config or get_config()
        self._input = input_func or input
        self._output = output or print
        self.commands = {
            "1": self.create_account,
            "2": self.deposit,
            "3": self.withdraw,
            "4": self.transfer,
            "5": self.view_balance,
            "6": self.view_history,
        }

    def run(self) -> bool:
        """
        Run the menu until a successful Save & Exit or end of input

        A failed Save & Exit returns to the menu so the data can be saved
        again; end of input makes one last save attempt and stops.

        Returns:
            True if the final save succeeded
        """
        self._output("=== MiniBank Console ===")
        while True:
            self._output(MENU)
            try:
                choice = self._prompt("> ")
                if choice == "7":
                    if self.save():
                        return True
                    self._output("Data was not saved. Fix the problem and choose 7 again.")
                    continue
                command = self.commands.get(choice)
                if command is None:
                    self._output("Invalid option. Try again.")
                    continue
                command()
            except EndOfInput:
                return self.save()

    def save(self) -> bool:
        result = self.storage.save(self.ledger)
        if result.ok:
            self._output("Data saved. Exiting...")
        else:
            self._output(result.message)
        return result.ok

    # ---------- Commands ----------

    def create_account(self) -> None:
        name = self._prompt("Enter full name: ")
        if not name:
            self._output("Name cannot be empty.")
            return
        while True:
            pin = self._prompt("Choose 4-digit PIN: ")
            result = self.ledger.create_account(name, pin)
            if result.ok:
                break
            self._output(result.message)
        self._output(f"Account created! Account Number: {result.value.account_number}")

    def deposit(self) -> None:
        number = self._prompt_account("Enter account number to deposit to: ")
        if number is None:
            return
        if self.ledger.get_account(number) is None:
            self._output(FAILURE_MESSAGES[ErrorKind.ACCOUNT_NOT_FOUND])
            return
        amount = self._prompt("Enter amount to deposit: ")
        result = self.ledger.deposit(number, amount)
        if self._report_failure(result):
            return
        balance = self.ledger.get_account(number).balance
        self._output(
            f"Deposited {self._money(result.value.amount)} to {number}. "
            f"New balance: {self._money(balance)}"
        )

    def withdraw(self) -> None:
        credentials = self._prompt_credentials("Enter account number to withdraw from: ")
        if credentials is None:
            return
        number, pin = credentials
        amount = self._prompt("Enter amount to withdraw: ")
        result = self.ledger.withdraw(number, pin, amount)
        if self._report_failure(result, number):
            return
        balance = self.ledger.get_account(number).balance
        self._output(
            f"Withdrew {self._money(result.value.amount)}. New balance: {self._money(balance)}"
        )

    def transfer(self) -> None:
        credentials = self._prompt_credentials("Enter your account number (from): ")
        if credentials is None:
            return
        from_number, pin = credentials
        to_number = self._prompt_account("Enter recipient account number (to): ")
        if to_number is None:
            return
        if self.ledger.get_account(to_number) is None:
            self._output("Recipient account not found.")
            return
        amount = self._prompt("Enter amount to transfer: ")
        result = self.ledger.transfer(from_number, pin, to_number, amount)
        if self._report_failure(result, from_number):
            return
        outgoing, _ = result.value
        balance = self.ledger.get_account(from_number).balance
        self._output(f"Transferred {self._money(outgoing.amount)} to {to_number}")
        self._output(f"Your new balance: {self._money(balance)}")

    def view_balance(self) -> None:
        credentials = self._prompt_credentials("Enter account number to view balance: ")
        if credentials is None:
            return
        result = self.ledger.view_balance(*credentials)
        if self._report_failure(result):
            return
        summary = result.value
        self._output(
            f"Account: {summary.account_number} | Name: {summary.name} | "
            f"Balance: {self._money(summary.balance)}"
        )

    def view_history(self) -> None:
        credentials = self._prompt_credentials("Enter account number to view transactions: ")
        if credentials is None:
            return
        number, pin = credentials
        result = self.ledger.view_history(number, pin)
        if self._report_failure(result):
            return
        self._output(f"\nTransactions for {number} (most recent first):")
        self._output(HISTORY_HEADER)
        self._output("-" * 66)
        for tx in result.value:
            self._output(
                f"{tx.transaction_id} | {tx.kind.value:<12} | {self._money(tx.amount):<10} | "
                f"{tx.date:<19} | {tx.description}"
            )

    # ---------- Helpers ----------

    def _prompt(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except EOFError:
            raise EndOfInput()

    def _prompt_account(self, prompt: str) -> Optional[int]:
        try:
            return parse_account_number(self._prompt(prompt))
        except LedgerError as e:
            self._output(e.message)
            return None

    def _prompt_credentials(self, prompt: str):
        number = self._prompt_account(prompt)
        if number is None:
            return None
        if self.ledger.get_account(number) is None:
            self._output(FAILURE_MESSAGES[ErrorKind.ACCOUNT_NOT_FOUND])
            return None
        pin = self._prompt("Enter PIN: ")
        if not self.ledger.authorize(number, pin).ok:
            self._output(FAILURE_MESSAGES[ErrorKind.AUTHORIZATION_FAILED])
            return None
        return number, pin

    def _report_failure(self, result: OperationResult, account_number: Optional[int] = None) -> bool:
        if result.ok:
            return False
        if result.error is ErrorKind.INSUFFICIENT_FUNDS and account_number is not None:
            balance = self.ledger.get_account(account_number).balance
            self._output(f"Insufficient funds. Current balance: {self._money(balance)}")
        else:
            self._output(FAILURE_MESSAGES.get(result.error, result.message))
        return True

    def _money(self, amount) -> str:
        return format_amount(amount, self.config.currency_symbol)


def main() -> int:
    """Console entry point: load, run the menu, save on exit"""
    config = get_config()
    setup_logging(
        level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file
    )

    storage = FlatFileStorage.from_config(config)
    loaded = storage.load()
    for error in loaded.errors:
        print(error.message)
    if loaded.accounts_loaded or loaded.transactions_loaded:
        print(f"Loaded {loaded.accounts_loaded} accounts and "
              f"{loaded.transactions_loaded} transactions.")

    shell = BankShell(loaded.ledger, storage, config)
    return 0 if shell.run() else 1
