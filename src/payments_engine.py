import csv
import logging
import re
import sys
from decimal import Decimal
from typing import Dict, Iterable, Optional

from models import Transaction, TransactionType, ClientAccount, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
AMOUNT_PRECISION = 4
AMOUNT_STEP = Decimal(1).scaleb(-AMOUNT_PRECISION)
MAX_AMOUNT_DIGITS = 28

ID_PATTERN = re.compile(r"[0-9]+")
AMOUNT_PATTERN = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


class PaymentsEngine:
    """
    Replays transactions from a CSV file against client accounts.
    Records are applied one at a time, strictly in file order.
    """

    def __init__(self):
        self._state = StateManager()
        self._stats = ProcessingStats()
        self._processor = TransactionProcessor(self._state, self._stats)

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing transactions from {filepath}")
        with open(filepath, "r", newline="") as f:
            accounts = self.process_rows(csv.DictReader(f, skipinitialspace=True))

        print(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Skipped: {self._stats.skipped}",
            file=sys.stderr
        )
        return accounts

    def process_rows(self, rows: Iterable[Dict[str, str]]) -> Dict[int, ClientAccount]:
        """Apply already-split CSV rows in order and return final account states."""
        for row in rows:
            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_skip()
                continue
            self._processor.process_transaction(transaction)

        logger.info("Processing complete")
        return self._state.get_all_accounts()

    def _parse_csv_row(self, row: Dict[str, str]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            # Short rows leave missing columns as None, long rows put extras under a None key.
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

            transaction_type_str = normalized["type"].lower()
            client_id = self._parse_id(normalized["client"], "client id", MAX_CLIENT_ID)
            transaction_id = self._parse_id(normalized["tx"], "transaction id", MAX_TRANSACTION_ID)

            amount = None
            amount_str = normalized.get("amount", "")
            if amount_str:
                amount = self._parse_amount(amount_str)

            return Transaction(
                transaction_type=TransactionType(transaction_type_str),
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None

    @staticmethod
    def _parse_id(value: str, name: str, maximum: int) -> int:
        if not ID_PATTERN.fullmatch(value):
            raise ValueError(f"invalid {name} {value!r}")
        parsed = int(value)
        if parsed > maximum:
            raise ValueError(f"{name} {parsed} out of range")
        return parsed

    @staticmethod
    def _parse_amount(amount_str: str) -> Decimal:
        if not AMOUNT_PATTERN.fullmatch(amount_str):
            raise ValueError(f"invalid amount {amount_str!r}")
        amount = Decimal(amount_str)
        if amount < 0:
            raise ValueError(f"invalid amount {amount_str!r}")
        # Keeps the quantized value within the default 28 digit context.
        if amount and amount.adjusted() >= MAX_AMOUNT_DIGITS - AMOUNT_PRECISION:
            raise ValueError(f"amount {amount_str!r} is too large")
        if amount != amount.quantize(AMOUNT_STEP):
            raise ValueError(f"amount {amount_str!r} has more than {AMOUNT_PRECISION} decimal places")
        return amount
