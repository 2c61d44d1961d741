"""
Interactive Shell

Text menu over the public Ledger API. The shell parses and checks input,
formats amounts and prints results; every rule about money lives in the
Ledger. Any LedgerError is reported and the menu comes back.
"""

import sys
from decimal import Decimal
from typing import Callable

from .config import get_config
from .currency import format_amount, to_decimal
from .errors import LedgerError
from .ledger import Ledger
from .logging_config import setup_logging
from .accounts import PIN_PATTERN

MENU = (
    "",
    "--- Minibank ---",
    "1. Create account",
    "2. Check balance",
    "3. Deposit",
    "4. Withdraw",
    "5. Transfer",
    "6. Transaction history",
    "7. Exit",
)


class InputError(Exception):
    """Malformed text typed at a prompt"""


class BankShell:
    """Menu loop driving a Ledger"""

    def __init__(
        self,
        ledger: Ledger,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print
    ):
        self.ledger = ledger
        self._input = input_func
        self._output = output_func
        self._actions = {
            "1": self.create_account,
            "2": self.check_balance,
            "3": self.deposit,
            "4": self.withdraw,
            "5": self.transfer,
            "6": self.transaction_history,
        }

    def run(self) -> None:
        """Loop until the exit choice (or end of input)"""
        while True:
            for line in MENU:
                self._output(line)
            try:
                choice = self._prompt("Choice: ")
            except EOFError:
                break
            if choice == "7":
                break
            action = self._actions.get(choice)
            if action is None:
                self._output("Invalid choice. Please try again.")
                continue
            try:
                action()
            except EOFError:
                break
            except (InputError, LedgerError) as e:
                self._output(f"Error: {e}")
        self._output("Goodbye!")

    # Menu actions

    def create_account(self) -> None:
        owner = self._prompt("Account holder name: ")
        initial_balance = self._prompt_amount("Opening balance: ")
        currency_code = self._prompt_currency()
        pin = self._prompt_pin("Choose a 4-digit PIN: ")
        account_id = self.ledger.create_account(owner, initial_balance, currency_code, pin)
        self._output(f"Account {account_id} created for {owner}.")

    def check_balance(self) -> None:
        account_id = self._prompt_account_id("Account number: ")
        currency_code = self._prompt_currency()
        pin = self._prompt("PIN: ")
        balance = self.ledger.get_balance(account_id, currency_code, pin)
        self._output(f"Balance: {self._format(balance, currency_code)}")

    def deposit(self) -> None:
        account_id = self._prompt_account_id("Account number: ")
        amount = self._prompt_amount("Amount to deposit: ")
        currency_code = self._prompt_currency()
        pin = self._prompt("PIN: ")
        balance = self.ledger.deposit(account_id, amount, currency_code, pin)
        self._output(f"Done. New balance: {self._format(balance, currency_code)}")

    def withdraw(self) -> None:
        account_id = self._prompt_account_id("Account number: ")
        amount = self._prompt_amount("Amount to withdraw: ")
        currency_code = self._prompt_currency()
        pin = self._prompt("PIN: ")
        balance = self.ledger.withdraw(account_id, amount, currency_code, pin)
        self._output(f"Done. New balance: {self._format(balance, currency_code)}")

    def transfer(self) -> None:
        from_id = self._prompt_account_id("Sender account number: ")
        to_id = self._prompt_account_id("Receiver account number: ")
        amount = self._prompt_amount("Amount to transfer: ")
        currency_code = self._prompt_currency()
        pin = self._prompt("Sender PIN: ")
        self.ledger.transfer(from_id, to_id, amount, currency_code, pin)
        self._output("Transfer complete.")

        sender_balance = self.ledger.get_balance(from_id, currency_code, pin)
        self._output(f"Sender new balance: {self._format(sender_balance, currency_code)}")
        # The receiver's balance is only shown when the sender's PIN also opens it
        try:
            receiver_balance = self.ledger.get_balance(to_id, currency_code, pin)
        except LedgerError:
            return
        self._output(f"Receiver new balance: {self._format(receiver_balance, currency_code)}")

    def transaction_history(self) -> None:
        account_id = self._prompt_account_id("Account number: ")
        pin = self._prompt("PIN: ")
        for txn in self.ledger.list_transactions(account_id, pin):
            self._output(
                f"{txn.timestamp.isoformat()} - {txn.description}: "
                f"{format_amount(txn.signed_amount, txn.currency)} "
                f"(Balance: {format_amount(txn.resulting_balance, txn.currency)})"
            )

    # Prompt helpers

    def _prompt(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _prompt_account_id(self, prompt: str) -> int:
        text = self._prompt(prompt)
        if not (text.isascii() and text.isdigit()):
            raise InputError(f"Invalid account number: {text!r}")
        return int(text)

    def _prompt_amount(self, prompt: str) -> Decimal:
        text = self._prompt(prompt)
        try:
            return to_decimal(text)
        except ValueError:
            raise InputError(f"Invalid amount: {text!r}") from None

    def _prompt_currency(self) -> str:
        codes = "/".join(self.ledger.currencies.codes())
        return self._prompt(f"Currency ({codes}): ").upper()

    def _prompt_pin(self, prompt: str) -> str:
        pin = self._prompt(prompt)
        if not PIN_PATTERN.fullmatch(pin):
            raise InputError("Invalid PIN. It must be a 4-digit number.")
        return pin

    def _format(self, amount: Decimal, currency_code: str) -> str:
        return format_amount(amount, self.ledger.currencies.lookup(currency_code))


def main() -> int:
    """Console entry point"""
    settings = get_config()
    setup_logging(settings.log_level, fmt=settings.log_format)
    ledger = Ledger(config=settings)
    try:
        BankShell(ledger).run()
    except KeyboardInterrupt:
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
