import logging

from errors import LedgerError
from models import Transaction, ProcessingResult, ProcessingStats
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the account of their client.
    Returns ProcessingResult so a failing transaction never stops the run.
    """

    def __init__(self, state: StateManager, stats: ProcessingStats):
        self._state = state
        self._stats = stats

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            FAILED: Rejected by the account, balances left as the failure reports
        """
        account = self._state.get_or_create_account(transaction.client_id)

        try:
            account.apply_transaction(transaction)
        except LedgerError as e:
            logger.warning(f"{transaction}: {e}")
            self._stats.record_failure()
            return ProcessingResult.FAILED

        self._stats.record_success()
        return ProcessingResult.SUCCESS
