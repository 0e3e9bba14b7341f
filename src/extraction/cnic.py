"""CNIC number detection and normalization.

A CNIC is 13 digits, displayed as ``NNNNN-NNNNNNN-N``. OCR output may
render it dashed, spaced, bare, or with mixed separators, so patterns
are tried from strictest to loosest and the first hit wins.
"""

import re
from dataclasses import dataclass

from src.utils.logger import get_logger

logger = get_logger(__name__)

# Ordered strictest first; digit lookarounds reject longer digit runs.
CNIC_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("dashed", re.compile(r"(?<!\d)(\d{5}-\d{7}-\d)(?!\d)")),
    ("spaced", re.compile(r"(?<!\d)(\d{5}\s+\d{7}\s+\d)(?!\d)")),
    ("bare", re.compile(r"(?<!\d)(\d{13})(?!\d)")),
    ("mixed", re.compile(r"(?<!\d)(\d{5}\s*-?\s*\d{7}\s*-?\s*\d)(?!\d)")),
]

_CNIC_FORMAT = re.compile(r"^\d{5}-\d{7}-\d$")


@dataclass
class CnicMatch:
    """A CNIC found in OCR text."""

    value: str
    start: int
    end: int
    pattern: str


def normalize_cnic(value: str | None) -> str | None:
    """Normalize a CNIC candidate to ``NNNNN-NNNNNNN-N``.

    Args:
        value: Candidate string, possibly with separators or stray characters.

    Returns:
        The dashed CNIC, or ``None`` unless it holds exactly 13 digits.
    """
    if not value:
        return None
    digits = re.sub(r"\D", "", value)
    if len(digits) != 13:
        return None
    return f"{digits[:5]}-{digits[5:12]}-{digits[12]}"


def is_valid_cnic(value: str | None) -> bool:
    """Check whether a value is already in canonical CNIC format."""
    return bool(value) and _CNIC_FORMAT.match(value) is not None


def find_cnic(text: str) -> CnicMatch | None:
    """Find the first CNIC in text using progressively looser patterns.

    Args:
        text: Raw OCR text.

    Returns:
        The normalized match with its text offsets, or ``None``.
    """
    for name, pattern in CNIC_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        value = normalize_cnic(match.group(1))
        if value:
            logger.debug("CNIC found (%s pattern): %s", name, value)
            return CnicMatch(
                value=value, start=match.start(), end=match.end(), pattern=name
            )
    return None
