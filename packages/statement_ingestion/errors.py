"""Terminal failures raised by the ingestion pipeline.

Anything below this level (a bad row, an unreadable line) is recovered
locally and never surfaces as an exception.
"""


class IngestionError(Exception):
    """Base error for a statement that cannot be ingested at all."""

    default_message = "Failed to read file"

    def __init__(self, detail: str = ""):
        self.detail = detail or self.default_message
        super().__init__(self.detail)


class UnsupportedFormatError(IngestionError):
    """The media kind is neither PDF nor spreadsheet/CSV."""

    default_message = "Unsupported file format. Please upload PDF, Excel, or CSV."


class CorruptSourceError(IngestionError):
    """The bytes could not be decoded as a document or workbook."""

    default_message = "Could not parse file. Ensure it is not corrupted."


class PasswordProtectedError(IngestionError):
    """The document is encrypted and no (valid) password was supplied."""

    default_message = (
        "File is password protected. "
        "Supply the password or remove the protection and try again."
    )
