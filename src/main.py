import argparse
import logging
import sys
from decimal import Decimal
from typing import Dict, Optional, Sequence, TextIO

from errors import RowParseError, TransactionError
from models import ClientAccount
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

OUTPUT_HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.normalize()
    if normalized == 0:
        return "0"
    return f"{normalized:f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    print(OUTPUT_HEADER, file=stream)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        print(
            f"{client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}",
            file=stream,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toy-ledger",
        description="Apply a CSV log of client transactions and print the final account balances.",
    )
    parser.add_argument("input", help="CSV file with type, client, tx, amount columns")
    parser.add_argument("--strict", action="store_true", help="Stop at the first rejected or unparseable record")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log processing progress to stderr")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(halt_on_error=args.strict)
    try:
        accounts = engine.process_file(args.input)
    except OSError as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1
    except (TransactionError, RowParseError) as e:
        logger.error(f"Stopped at first failure: {e}")
        return 2

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
