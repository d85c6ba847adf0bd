"""
Statement ingestion entry point.

Dispatches on the declared media kind, reads the document into either
reconstructed text (PDF) or raw rows (spreadsheet/CSV), and routes rows
through schema detection. Rows without a confident header, and all PDF
text, go through the free-text extractor instead.
"""

import asyncio
from dataclasses import asdict
from enum import Enum
from pathlib import PurePath
from typing import List, Optional

import structlog

from .config import IngestionSettings, get_settings
from .errors import UnsupportedFormatError
from .free_text import extract_from_text
from .models import Transaction
from .readers import read_pdf_pages, read_tabular_rows, rows_to_text
from .schema import find_header_row, map_columns
from .structured import can_extract, extract_from_rows
from .text_lines import reconstruct_text

logger = structlog.get_logger()

TABULAR_EXTENSIONS = (".xlsx", ".xls", ".csv")
TABULAR_MIME_MARKERS = ("sheet", "excel", "csv")


class SourceKind(str, Enum):
    PDF = "pdf"
    TABULAR = "tabular"


def detect_source_kind(filename: str = "", content_type: str = "") -> SourceKind:
    """Classify an upload by MIME type and file extension."""
    mime = (content_type or "").lower()
    suffix = PurePath(filename or "").suffix.lower()

    if mime == "application/pdf" or suffix == ".pdf":
        return SourceKind.PDF
    if suffix in TABULAR_EXTENSIONS or any(m in mime for m in TABULAR_MIME_MARKERS):
        return SourceKind.TABULAR
    raise UnsupportedFormatError()


class StatementParser:
    """Parse one statement file into transactions.

    Holds only read-only settings, so one instance can serve concurrent
    calls.
    """

    def __init__(self, settings: Optional[IngestionSettings] = None):
        self.settings = settings or get_settings()

    def parse(
        self,
        file_content: bytes,
        filename: str = "",
        content_type: str = "",
        password: Optional[str] = None,
    ) -> List[Transaction]:
        kind = detect_source_kind(filename, content_type)
        logger.info("statement_parse_started", filename=filename, kind=kind.value, size=len(file_content))

        if kind is SourceKind.PDF:
            transactions = self._parse_pdf(file_content, password)
        else:
            transactions = self._parse_tabular(file_content, password)

        if not transactions:
            logger.warning("no_transactions_found", filename=filename, kind=kind.value)
        else:
            logger.info("statement_parsed", filename=filename, count=len(transactions))
        return transactions

    def _parse_pdf(self, file_content: bytes, password: Optional[str]) -> List[Transaction]:
        pages = read_pdf_pages(file_content, password)
        text = reconstruct_text(pages, self.settings.LINE_TOLERANCE)
        return extract_from_text(text, self.settings)

    def _parse_tabular(self, file_content: bytes, password: Optional[str]) -> List[Transaction]:
        rows = read_tabular_rows(file_content, password)
        header_index = find_header_row(
            rows,
            scan_limit=self.settings.HEADER_SCAN_ROWS,
            threshold=self.settings.HEADER_SCORE_THRESHOLD,
        )

        if header_index is None:
            logger.info("header_not_found", rows=len(rows))
            return extract_from_text(rows_to_text(rows), self.settings)

        columns = map_columns(rows[header_index])
        mapped = {role: index for role, index in asdict(columns).items() if index is not None}
        logger.info("header_detected", row=header_index, columns=mapped)
        if not can_extract(columns):
            logger.info("header_unusable", row=header_index, columns=mapped)
            return extract_from_text(rows_to_text(rows), self.settings)
        return extract_from_rows(rows[header_index + 1 :], columns)


def parse_bank_statement(
    file_content: bytes,
    filename: str = "",
    content_type: str = "",
    password: Optional[str] = None,
) -> List[Transaction]:
    """
    Convenience function to parse a bank statement.

    Args:
        file_content: Raw file bytes.
        filename: Original filename, used for format detection.
        content_type: Declared MIME type, used for format detection.
        password: Password for encrypted PDFs or workbooks.

    Returns:
        Transactions in document order.

    Raises:
        UnsupportedFormatError: Neither PDF nor spreadsheet/CSV.
        PasswordProtectedError: Encrypted and no valid password given.
        CorruptSourceError: The bytes could not be read.
    """
    return StatementParser().parse(file_content, filename, content_type, password)


async def parse_bank_statement_async(
    file_content: bytes,
    filename: str = "",
    content_type: str = "",
    password: Optional[str] = None,
) -> List[Transaction]:
    """Awaitable variant; the parse runs in a worker thread."""
    return await asyncio.to_thread(
        parse_bank_statement, file_content, filename, content_type, password
    )
