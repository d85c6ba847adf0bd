"""
Statement Ingestion

Bank and card statement parsing (PDF, Excel, CSV) into normalized
transactions.
"""

__version__ = "0.1.0"

from .errors import (
    CorruptSourceError,
    IngestionError,
    PasswordProtectedError,
    UnsupportedFormatError,
)
from .models import Category, PaymentMethod, RawLabel, Transaction, TransactionType
from .parser import (
    SourceKind,
    StatementParser,
    detect_source_kind,
    parse_bank_statement,
    parse_bank_statement_async,
)

__all__ = [
    "Category",
    "CorruptSourceError",
    "IngestionError",
    "PasswordProtectedError",
    "PaymentMethod",
    "RawLabel",
    "SourceKind",
    "StatementParser",
    "Transaction",
    "TransactionType",
    "UnsupportedFormatError",
    "detect_source_kind",
    "parse_bank_statement",
    "parse_bank_statement_async",
]
