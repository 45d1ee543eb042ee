import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import NotADepositError, NotADisputeError, WrongClientError
from models import Transaction, TransactionType, ClientAccount, ProcessingResult, ProcessingStats


def make_transaction(transaction_type: TransactionType, amount=Decimal("10")) -> Transaction:
    return Transaction(
        transaction_type=transaction_type,
        client_id=1,
        transaction_id=1,
        amount=amount,
    )


class TestTransaction:
    def test_create_deposit(self):
        transaction = Transaction(
            transaction_type=TransactionType.DEPOSIT,
            client_id=1,
            transaction_id=1,
            amount=Decimal("100.0"),
        )
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.client_id == 1
        assert transaction.transaction_id == 1
        assert transaction.amount == Decimal("100.0")

    def test_create_dispute_no_amount(self):
        transaction = Transaction(
            transaction_type=TransactionType.DISPUTE,
            client_id=1,
            transaction_id=1,
        )
        assert transaction.amount is None

    def test_deposit_can_be_disputed(self):
        transaction = make_transaction(TransactionType.DEPOSIT)
        transaction.dispute(1)
        assert transaction == make_transaction(TransactionType.DISPUTE)

    def test_dispute_wrong_client(self):
        transaction = make_transaction(TransactionType.DEPOSIT)
        with pytest.raises(WrongClientError):
            transaction.dispute(2)
        assert transaction.transaction_type == TransactionType.DEPOSIT
        assert transaction.amount == Decimal("10")

    def test_deposit_cannot_be_resolved_or_charged_back(self):
        transaction = make_transaction(TransactionType.DEPOSIT)
        with pytest.raises(NotADisputeError):
            transaction.resolve(1)
        with pytest.raises(NotADisputeError):
            transaction.chargeback(1)
        assert transaction.transaction_type == TransactionType.DEPOSIT

    def test_dispute_can_be_resolved(self):
        transaction = make_transaction(TransactionType.DISPUTE)
        transaction.resolve(1)
        assert transaction == make_transaction(TransactionType.RESOLVE)

    def test_resolve_wrong_client(self):
        transaction = make_transaction(TransactionType.DISPUTE)
        with pytest.raises(WrongClientError):
            transaction.resolve(2)
        assert transaction.transaction_type == TransactionType.DISPUTE

    def test_dispute_can_be_charged_back(self):
        transaction = make_transaction(TransactionType.DISPUTE)
        transaction.chargeback(1)
        assert transaction == make_transaction(TransactionType.CHARGEBACK)

    def test_chargeback_wrong_client(self):
        transaction = make_transaction(TransactionType.DISPUTE)
        with pytest.raises(WrongClientError):
            transaction.chargeback(2)
        assert transaction.transaction_type == TransactionType.DISPUTE

    def test_dispute_cannot_be_disputed_again(self):
        transaction = make_transaction(TransactionType.DISPUTE)
        with pytest.raises(NotADepositError):
            transaction.dispute(1)
        assert transaction.transaction_type == TransactionType.DISPUTE

    def test_withdrawal_cannot_be_disputed(self):
        transaction = make_transaction(TransactionType.WITHDRAWAL)
        with pytest.raises(NotADepositError):
            transaction.dispute(1)
        assert transaction.transaction_type == TransactionType.WITHDRAWAL

    @pytest.mark.parametrize("terminal", [TransactionType.RESOLVE, TransactionType.CHARGEBACK])
    def test_terminal_states_have_no_transitions(self, terminal):
        transaction = make_transaction(terminal)
        with pytest.raises(NotADepositError):
            transaction.dispute(1)
        with pytest.raises(NotADisputeError):
            transaction.resolve(1)
        with pytest.raises(NotADisputeError):
            transaction.chargeback(1)
        assert transaction == make_transaction(terminal)

    def test_wrong_kind_reported_before_wrong_client(self):
        transaction = make_transaction(TransactionType.CHARGEBACK)
        with pytest.raises(NotADisputeError):
            transaction.resolve(2)


class TestClientAccount:
    def test_default_values(self):
        account = ClientAccount(client_id=1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is False
        assert account.deposits == {}

    def test_total_property(self):
        account = ClientAccount(
            client_id=1,
            available=Decimal("100"),
            held=Decimal("50"),
        )
        assert account.total == Decimal("150")

    def test_hold_and_release(self):
        account = ClientAccount(client_id=1, available=Decimal("100"))
        account.hold(Decimal("40"))
        assert account.available == Decimal("60")
        assert account.held == Decimal("40")
        account.release_hold(Decimal("40"))
        assert account.available == Decimal("100")
        assert account.held == Decimal("0")

    def test_lock(self):
        account = ClientAccount(client_id=1)
        account.lock()
        assert account.locked is True


class TestProcessingResult:
    def test_enum_values(self):
        assert ProcessingResult.SUCCESS.value == "success"
        assert ProcessingResult.FAILED.value == "failed"


class TestProcessingStats:
    def test_counters(self):
        stats = ProcessingStats()
        stats.record_success()
        stats.record_success()
        stats.record_failure()
        stats.record_skip()
        assert (stats.processed, stats.failed, stats.skipped) == (2, 1, 1)
