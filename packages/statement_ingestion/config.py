"""Tunable heuristics for statement ingestion via Pydantic Settings.

The thresholds below were tuned against a handful of Indian bank layouts
(HDFC, SBI, ICICI, Kotak). They are empirical, so every one of them can be
overridden through ``STATEMENT_*`` environment variables.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class IngestionSettings(BaseSettings):
    """Heuristic constants shared by the extraction paths."""

    # Text line reconstruction (PDF)
    LINE_TOLERANCE: float = Field(
        default=4.0,
        description="Max vertical delta (PDF units) for fragments on one line",
    )

    # Header detection
    HEADER_SCAN_ROWS: int = Field(default=100, description="Rows/lines scanned for a header")
    HEADER_SCORE_THRESHOLD: float = Field(
        default=2.0, description="Minimum signature score for a header row"
    )

    # Free-text amount disambiguation
    SERIAL_NUMBER_MAX: int = Field(
        default=1000, description="Leading bare integers up to this are serial numbers"
    )
    REFERENCE_NUMBER_MIN: int = Field(
        default=1000, description="Leading bare integers above this are reference numbers"
    )
    YEAR_MIN: int = Field(default=1990, description="Lower bound of year-like integers")
    YEAR_MAX: int = Field(default=2030, description="Upper bound of year-like integers")
    MARKER_WINDOW: int = Field(
        default=15, description="Characters after an amount searched for Dr/Cr"
    )

    model_config = {"env_prefix": "STATEMENT_", "env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> IngestionSettings:
    """Process-wide settings instance, read once."""
    return IngestionSettings()
