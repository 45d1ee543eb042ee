import csv
import logging
import os
import sys
from decimal import Decimal
from typing import Dict, TextIO

from models import ClientAccount
from payments_engine import PaymentsEngine

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"


def log_level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        print(f"Unknown {LOG_LEVEL_ENV} {name!r}, using WARNING", file=sys.stderr)
        return logging.WARNING
    return level


def configure_logging() -> None:
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value:.4f}"


def write_accounts(accounts: Dict[int, ClientAccount], out: TextIO) -> None:
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(["client", "available", "held", "total", "locked"])
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])


def main():
    configure_logging()

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Cannot read {filepath}: {e}", file=sys.stderr)
        sys.exit(1)

    write_accounts(accounts, sys.stdout)


if __name__ == "__main__":
    main()
