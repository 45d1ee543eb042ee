import logging
from dataclasses import dataclass, field, replace
from decimal import MAX_PREC, Context, Decimal, Inexact, localcontext
from enum import Enum
from typing import Dict, Optional

from errors import (
    AccountLockedError,
    InsufficientFundsError,
    MissingAmountError,
    NotADepositError,
    NotADisputeError,
    UnknownDepositError,
    UnknownDisputeError,
    WrongClientError,
)

logger = logging.getLogger(__name__)

# Balance sums never round, however many records accumulate.
LEDGER_CONTEXT = Context(prec=MAX_PREC, traps=[Inexact])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    FAILED = "failed"


# target kind -> (kind the record must currently have, error raised otherwise)
_TRANSITIONS = {
    TransactionType.DISPUTE: (TransactionType.DEPOSIT, NotADepositError),
    TransactionType.RESOLVE: (TransactionType.DISPUTE, NotADisputeError),
    TransactionType.CHARGEBACK: (TransactionType.DISPUTE, NotADisputeError),
}


@dataclass
class Transaction:
    """
    A single transaction record.

    Deposits kept by an account are re-tagged in place as they move through
    their dispute lifecycle: DEPOSIT -> DISPUTE -> RESOLVE | CHARGEBACK.
    Withdrawals never change kind.
    """

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"

    def dispute(self, from_client: int) -> None:
        """Only deposits can be disputed."""
        self._transition(TransactionType.DISPUTE, from_client)

    def resolve(self, from_client: int) -> None:
        """Only disputed transactions can be resolved."""
        self._transition(TransactionType.RESOLVE, from_client)

    def chargeback(self, from_client: int) -> None:
        """Only disputed transactions can be charged back."""
        self._transition(TransactionType.CHARGEBACK, from_client)

    def _transition(self, target: TransactionType, from_client: int) -> None:
        required, error = _TRANSITIONS[target]
        if self.transaction_type != required:
            raise error(
                f"cannot {target.value} {self!r}: it is a {self.transaction_type.value}, not a {required.value}"
            )
        if self.client_id != from_client:
            raise WrongClientError(
                f"cannot {target.value} transaction {self.transaction_id} belonging to client {self.client_id} as client {from_client}"
            )
        self.transaction_type = target


@dataclass
class ClientAccount:
    """
    Balances of one client plus the deposits that may later be disputed.

    apply_transaction raises a LedgerError subclass when a record cannot be
    applied. Balances are only touched once every check for that record passed.
    """

    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False
    deposits: Dict[int, Transaction] = field(default_factory=dict, repr=False)

    @property
    def total(self) -> Decimal:
        with localcontext(LEDGER_CONTEXT):
            return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        with localcontext(LEDGER_CONTEXT):
            self.available += amount

    def debit(self, amount: Decimal) -> None:
        with localcontext(LEDGER_CONTEXT):
            self.available -= amount

    def hold(self, amount: Decimal) -> None:
        with localcontext(LEDGER_CONTEXT):
            self.available -= amount
            self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        with localcontext(LEDGER_CONTEXT):
            self.held -= amount
            self.available += amount

    def lock(self) -> None:
        self.locked = True

    def apply_transaction(self, transaction: Transaction) -> None:
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._deposit(transaction)
            case TransactionType.WITHDRAWAL:
                self._withdraw(self._require_amount(transaction))
            case TransactionType.DISPUTE:
                self._dispute(transaction)
            case TransactionType.RESOLVE:
                self._resolve(transaction)
            case TransactionType.CHARGEBACK:
                self._chargeback(transaction)

    def _require_amount(self, transaction: Transaction) -> Decimal:
        if transaction.amount is None:
            raise MissingAmountError(f"transaction {transaction.transaction_id} missing amount")
        return transaction.amount

    def _deposit(self, transaction: Transaction) -> None:
        amount = self._require_amount(transaction)

        # Deposits are recorded even when the account is locked.
        if transaction.transaction_id in self.deposits:
            logger.warning(f"Deposit tx {transaction.transaction_id}: replaces an earlier deposit with the same id")
        # The account owns its copy; only it moves the record through disputes.
        self.deposits[transaction.transaction_id] = replace(transaction)

        if self.locked:
            raise AccountLockedError(f"account {self.client_id} locked")
        self.credit(amount)

    def _withdraw(self, amount: Decimal) -> None:
        if self.locked:
            raise AccountLockedError(f"account {self.client_id} locked")
        if self.available < amount:
            raise InsufficientFundsError(
                f"account {self.client_id}: insufficient funds, want {amount:.4f}, have {self.available:.4f}"
            )
        self.debit(amount)

    def _dispute(self, transaction: Transaction) -> None:
        original = self.deposits.get(transaction.transaction_id)
        if original is None:
            raise UnknownDepositError(
                f"dispute refers to non-existent deposit transaction {transaction.transaction_id}"
            )
        original.dispute(self.client_id)
        self.hold(original.amount)

    def _resolve(self, transaction: Transaction) -> None:
        original = self.deposits.get(transaction.transaction_id)
        if original is None:
            raise UnknownDisputeError(
                f"resolve refers to non-existent dispute transaction {transaction.transaction_id}"
            )
        original.resolve(self.client_id)
        self.release_hold(original.amount)

    def _chargeback(self, transaction: Transaction) -> None:
        original = self.deposits.get(transaction.transaction_id)
        if original is None:
            raise UnknownDisputeError(
                f"chargeback refers to non-existent dispute transaction {transaction.transaction_id}"
            )
        original.chargeback(self.client_id)
        self.release_hold(original.amount)
        # A failed withdrawal here leaves the release applied and the account unlocked.
        self._withdraw(original.amount)
        self.lock()


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.skipped = 0

    def record_success(self):
        self.processed += 1

    def record_failure(self):
        self.failed += 1

    def record_skip(self):
        self.skipped += 1
