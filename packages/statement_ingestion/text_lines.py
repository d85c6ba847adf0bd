"""Rebuild reading-order text lines from positioned PDF fragments.

A page renderer hands back words with coordinates but no notion of a
line. Fragments are read top-to-bottom, left-to-right; consecutive
fragments whose vertical position stays within a small tolerance of the
line's anchor are treated as one row of the statement table.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence


@dataclass(frozen=True)
class TextFragment:
    """A rendered piece of text; ``y`` grows upwards (PDF user space)."""

    x: float
    y: float
    text: str


def _flush(line: List[TextFragment], lines: List[str]) -> None:
    if line:
        ordered = sorted(line, key=lambda f: f.x)
        lines.append(" ".join(f.text for f in ordered))


def reconstruct_page_lines(fragments: Iterable[TextFragment], tolerance: float = 4.0) -> List[str]:
    """Group one page's fragments into ordered lines of text."""
    ordered = sorted(fragments, key=lambda f: (-f.y, f.x))

    lines: List[str] = []
    current: List[TextFragment] = []
    anchor_y = None

    for fragment in ordered:
        if anchor_y is None:
            anchor_y = fragment.y
        if abs(fragment.y - anchor_y) > tolerance:
            _flush(current, lines)
            current = []
            anchor_y = fragment.y
        if fragment.text.strip():
            current.append(fragment)

    _flush(current, lines)
    return lines


def reconstruct_text(pages: Sequence[Iterable[TextFragment]], tolerance: float = 4.0) -> str:
    """Reconstructed text for a whole document, pages in order."""
    page_texts = []
    for fragments in pages:
        page_texts.append("\n".join(reconstruct_page_lines(fragments, tolerance)))
    return "\n".join(page_texts)
