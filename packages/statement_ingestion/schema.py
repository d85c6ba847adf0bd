"""Header row detection and column-role mapping for tabular statements.

Bank exports bury the real table under a preamble (account details,
address, statement period), so the header is found by scoring rows
against a rubric of well-known column labels rather than assumed to be
row zero.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .resolvers import is_missing

# (signature, weight, pattern over a single lower-cased cell)
HEADER_SIGNATURES = (
    ("date", 1.0, re.compile(r"\bdate\b")),
    ("description", 1.0, re.compile(r"description|narration|particulars|remarks|details")),
    ("debit", 1.0, re.compile(r"debit|withdrawal|\bdr\b")),
    ("credit", 1.0, re.compile(r"credit|deposit|\bcr\b")),
    ("balance", 0.5, re.compile(r"balance|\bbal\b")),
    ("amount", 1.0, re.compile(r"amount|\bamt\b")),
)

_DIRECTION_HEADERS = ("drcr", "crdr")

# Roles are claimed in this order; a column taken by an earlier role is
# never reused, which keeps "Description" away from the "cr" credit
# synonym and "Withdrawal Amt." away from the single-amount role.
# (role, synonyms, normalized headers the role must never take)
COLUMN_ROLES = (
    ("date", ("date",), ()),
    ("month", ("month",), ()),
    ("description", ("narration", "description", "particulars", "remarks", "details", "desc"), ()),
    ("balance", ("balance", "bal"), ()),
    ("direction", ("drcr", "crdr", "type", "direction"), ()),
    ("debit", ("withdrawal", "debit", "dr"), _DIRECTION_HEADERS),
    ("credit", ("deposit", "credit", "cr"), _DIRECTION_HEADERS),
    ("amount", ("amount", "amt"), ()),
    ("category", ("category",), ()),
    ("payment", ("payment", "mode", "method", "channel"), ()),
    ("reference", ("ref", "chq", "cheque"), ()),
)


@dataclass(frozen=True)
class ColumnMap:
    """Resolved column index per semantic role (``None`` = not present)."""

    date: Optional[int] = None
    month: Optional[int] = None
    description: Optional[int] = None
    balance: Optional[int] = None
    direction: Optional[int] = None
    debit: Optional[int] = None
    credit: Optional[int] = None
    amount: Optional[int] = None
    category: Optional[int] = None
    payment: Optional[int] = None
    reference: Optional[int] = None


def normalize_cell(value: Any) -> str:
    """Lower-cased, trimmed text used for scoring only."""
    if is_missing(value):
        return ""
    return str(value).lower().strip()


def score_header_row(cells: Sequence[Any]) -> float:
    """Score a row as a candidate header.

    Each signature counts once and must come from its own cell, so a
    single "Date;Description;Amount" cell scores as one date label.
    """
    normalized = [normalize_cell(c) for c in cells]
    claimed = set()
    score = 0.0
    for _, weight, pattern in HEADER_SIGNATURES:
        for index, cell in enumerate(normalized):
            if cell and index not in claimed and pattern.search(cell):
                claimed.add(index)
                score += weight
                break
    return score


def find_header_row(
    rows: Sequence[Sequence[Any]], scan_limit: int = 100, threshold: float = 2.0
) -> Optional[int]:
    """Index of the best-scoring header row, or ``None`` when none qualifies.

    Ties keep the earliest row.
    """
    best_index = None
    best_score = 0.0
    for index, row in enumerate(rows[:scan_limit]):
        score = score_header_row(row)
        if score > best_score and score >= threshold:
            best_score = score
            best_index = index
    return best_index


def _matches(header: str, synonym: str) -> bool:
    if len(synonym) <= 2:
        return synonym in re.findall(r"[a-z0-9]+", header)
    return synonym in re.sub(r"[^a-z0-9]", "", header)


def map_columns(header: Sequence[Any]) -> ColumnMap:
    """Assign each semantic role to the first matching, unclaimed column."""
    labels: List[str] = [normalize_cell(c) for c in header]
    claimed = set()
    resolved = {}

    for role, synonyms, excluded in COLUMN_ROLES:
        for index, label in enumerate(labels):
            if index in claimed or not label:
                continue
            if re.sub(r"[^a-z0-9]", "", label) in excluded:
                continue
            if any(_matches(label, s) for s in synonyms):
                resolved[role] = index
                claimed.add(index)
                break

    return ColumnMap(**resolved)
