"""Parse a statement file from the command line.

    python -m packages.statement_ingestion.cli statement.pdf --password secret
    python -m packages.statement_ingestion.cli export.csv --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from .errors import IngestionError
from .models import Transaction
from .parser import parse_bank_statement


def _configure_logging(verbose: bool) -> None:
    # Logs go to stderr so --json output stays machine readable
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def format_table(transactions: List[Transaction]) -> str:
    lines = []
    for txn in transactions:
        sign = "+" if txn.type.value == "income" else "-"
        lines.append(
            f"{txn.date:%Y-%m-%d}  {sign}{txn.amount:>12}  "
            f"{str(txn.category.value):<14} {str(txn.payment_method.value):<8} {txn.description}"
        )
    lines.append(f"{len(transactions)} transaction(s)")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract transactions from a bank statement")
    parser.add_argument("file", help="Path to a PDF, Excel or CSV statement")
    parser.add_argument("--password", default=None, help="Password for encrypted files")
    parser.add_argument("--json", action="store_true", help="Print transactions as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    path = Path(args.file)
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 1

    try:
        transactions = parse_bank_statement(
            path.read_bytes(), filename=path.name, password=args.password
        )
    except IngestionError as e:
        print(f"Error: {e.detail}", file=sys.stderr)
        return 2

    if args.json:
        payload = {"transactions": [t.to_dict() for t in transactions], "count": len(transactions)}
        print(json.dumps(payload, indent=2))
    else:
        print(format_table(transactions))
    return 0


if __name__ == "__main__":
    sys.exit(main())
