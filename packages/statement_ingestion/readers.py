"""Byte-level readers: PDF word boxes and spreadsheet/CSV rows.

Both readers translate library-specific failures into the ingestion
error taxonomy so callers only ever see ``IngestionError`` subclasses.
"""

import io
from typing import Any, List, Optional, Tuple

import msoffcrypto
import pandas as pd
import pdfplumber
import structlog
from msoffcrypto.exceptions import InvalidKeyError
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfplumber.utils.exceptions import PdfminerException

from .errors import CorruptSourceError, PasswordProtectedError
from .resolvers import is_missing
from .text_lines import TextFragment

logger = structlog.get_logger()

# OLE2 Compound Document: legacy .xls, or an encrypted .xlsx wrapper
_OLE2_MAGIC = b"\xD0\xCF\x11\xE0\xA1\xB1\x1A\xE1"
_ZIP_MAGIC = b"PK\x03\x04"

CSV_ENCODINGS = ("utf-8", "utf-8-sig", "latin-1", "cp1252")

Row = List[Any]


def _is_password_failure(exc: BaseException) -> bool:
    if isinstance(exc, PDFPasswordIncorrect):
        return True
    if isinstance(exc.__cause__, PDFPasswordIncorrect):
        return True
    if any(isinstance(arg, PDFPasswordIncorrect) for arg in exc.args):
        return True
    return "password" in str(exc).lower()


def read_pdf_pages(content: bytes, password: Optional[str] = None) -> List[List[TextFragment]]:
    """Word boxes for every page, converted to y-up coordinates."""
    pages: List[List[TextFragment]] = []
    try:
        with pdfplumber.open(io.BytesIO(content), password=password or "") as pdf:
            for page in pdf.pages:
                height = float(page.height)
                pages.append(
                    [
                        TextFragment(
                            x=float(word["x0"]),
                            y=height - float(word["bottom"]),
                            text=word["text"],
                        )
                        for word in page.extract_words()
                    ]
                )
    except (PDFPasswordIncorrect, PdfminerException) as e:
        if _is_password_failure(e):
            raise PasswordProtectedError() from e
        raise CorruptSourceError() from e
    except Exception as e:
        logger.error("pdf_read_failed", error=str(e))
        raise CorruptSourceError() from e

    logger.debug("pdf_read", pages=len(pages))
    return pages


def _decrypt_ole2(content: bytes, password: Optional[str]) -> bytes:
    """Plain legacy workbooks pass through; encrypted ones need the password."""
    try:
        office_file = msoffcrypto.OfficeFile(io.BytesIO(content))
        encrypted = office_file.is_encrypted()
    except Exception as e:
        raise CorruptSourceError() from e

    if not encrypted:
        return content
    if not password:
        raise PasswordProtectedError()

    decrypted = io.BytesIO()
    try:
        office_file.load_key(password=password)
        office_file.decrypt(decrypted)
    except InvalidKeyError as e:
        raise PasswordProtectedError("Incorrect password for encrypted workbook.") from e
    except Exception as e:
        msg = str(e).lower()
        if "password" in msg or "key" in msg:
            raise PasswordProtectedError("Incorrect password for encrypted workbook.") from e
        raise CorruptSourceError() from e
    return decrypted.getvalue()


def _workbook_engine(content: bytes) -> str:
    return "openpyxl" if content.startswith(_ZIP_MAGIC) else "xlrd"


def _frame_rows(df: pd.DataFrame) -> List[Row]:
    return [
        [None if is_missing(value) else value for value in row]
        for row in df.itertuples(index=False, name=None)
    ]


def _read_workbook(content: bytes) -> List[Row]:
    """First sheet of an xlsx/xls workbook, raw cells, no header inference."""
    try:
        df = pd.read_excel(
            io.BytesIO(content), header=None, dtype=object, engine=_workbook_engine(content)
        )
    except Exception as e:
        logger.error("workbook_read_failed", error=str(e))
        raise CorruptSourceError() from e
    return _frame_rows(df)


def decode_text(content: bytes) -> Tuple[str, str]:
    """Decode CSV bytes, returning ``(text, encoding)``."""
    for encoding in CSV_ENCODINGS:
        try:
            return content.decode(encoding).lstrip("\ufeff"), encoding
        except UnicodeDecodeError:
            continue
    raise CorruptSourceError()


def _read_csv(content: bytes) -> List[Row]:
    if b"\x00" in content[:1024]:
        raise CorruptSourceError()

    text, encoding = decode_text(content)
    lines = text.splitlines()
    if not any(line.strip() for line in lines):
        return []

    # Ragged exports (preamble rows, trailing totals) need a fixed width up front
    width = max(line.count(",") for line in lines) + 1
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CorruptSourceError() from e

    logger.debug("csv_read", encoding=encoding, rows=len(df), columns=width)
    return _frame_rows(df)


def read_tabular_rows(content: bytes, password: Optional[str] = None) -> List[Row]:
    """Rows of cells from xlsx, xls (optionally encrypted) or CSV bytes."""
    if content.startswith(_ZIP_MAGIC):
        return _read_workbook(content)
    if content.startswith(_OLE2_MAGIC):
        return _read_workbook(_decrypt_ole2(content, password))
    return _read_csv(content)


def rows_to_text(rows: List[Row]) -> str:
    """Join non-empty rows into text lines for the free-text path."""
    lines = []
    for row in rows:
        cells = [str(c).strip() for c in row if not is_missing(c) and str(c).strip()]
        if cells:
            lines.append(" ".join(cells))
    return "\n".join(lines)
