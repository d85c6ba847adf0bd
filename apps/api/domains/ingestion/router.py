"""Ingestion router: statement upload endpoint.

Parsing runs off the event loop; parser failures propagate to the RFC 7807
handlers registered in ``apps.api.core.errors``.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile

from apps.api.core.config import Settings, get_settings
from apps.api.core.errors import PayloadTooLargeError, UnsupportedMediaError
from apps.api.domains.ingestion.schemas import IngestResponse, TransactionOut
from packages.statement_ingestion.errors import UnsupportedFormatError
from packages.statement_ingestion.parser import detect_source_kind, parse_bank_statement_async

router = APIRouter(prefix="/ingest", tags=["ingestion"])
logger = structlog.get_logger()


@router.post("/statement", response_model=IngestResponse)
async def ingest_statement(
    file: UploadFile = File(...),
    password: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
):
    """Accept a PDF, Excel or CSV statement and return its transactions.

    An empty list is a valid result (200, ``count: 0``).
    """
    filename = file.filename or ""
    content_type = file.content_type or ""

    # Reject before reading the body
    try:
        detect_source_kind(filename, content_type)
    except UnsupportedFormatError as e:
        raise UnsupportedMediaError(e.detail) from e

    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise PayloadTooLargeError(f"File too large (max {limit_mb}MB)")

    transactions = await parse_bank_statement_async(
        contents, filename=filename, content_type=content_type, password=password or None
    )

    logger.info("ingest_complete", count=len(transactions), filename=filename)
    return IngestResponse(
        transactions=[TransactionOut.from_transaction(t) for t in transactions],
        count=len(transactions),
    )
