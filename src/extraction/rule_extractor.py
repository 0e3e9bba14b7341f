"""Rule-based ID card field extraction using regex patterns.

Local fallback used when the language-model extractor is unavailable.
Extracts the CNIC number, holder name, father name, and date of birth
from noisy OCR text of Pakistani identity cards.
"""

import math
import re
from dataclasses import dataclass

from src.utils.logger import get_logger

from .cnic import find_cnic

logger = get_logger(__name__)


@dataclass
class CardFields:
    """Structured fields extracted from ID card text."""

    full_name: str | None = None
    father_name: str | None = None
    cnic_number: str | None = None
    dob: str | None = None
    method: str = "rule"


NAME_STOPWORDS: frozenset[str] = frozenset(
    {
        "CNIC",
        "PAKISTAN",
        "NATIONAL",
        "IDENTITY",
        "CARD",
        "ISLAMIC",
        "REPUBLIC",
        "GOVERNMENT",
        "NADRA",
        "NAME",
        "FATHER",
        "HUSBAND",
        "GENDER",
        "SEX",
        "MALE",
        "FEMALE",
        "COUNTRY",
        "STAY",
        "DATE",
        "BIRTH",
        "ISSUE",
        "EXPIRY",
        "NUMBER",
        "HOLDER",
        "SIGNATURE",
        "DOB",
        "M",
        "F",
        "X",
    }
)

_NAME_WORD = r"[A-Za-z][A-Za-z.'\-]*"
_CAPITALIZED_PHRASE = r"[A-Z][A-Za-z.'\-]*(?:[ \t]+[A-Z][A-Za-z.'\-]*){1,4}"

_NAME_LABEL = re.compile(
    r"(?<![A-Za-z])(?i:name)\b[ \t]*:?[ \t]*(?:\n[ \t]*)*(" + _CAPITALIZED_PHRASE + ")"
)
_TITLE_CASE_PHRASE = re.compile(
    r"(?<![A-Za-z])([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){1,4})(?![A-Za-z])"
)
_UPPER_CASE_PHRASE = re.compile(
    r"(?<![A-Za-z])([A-Z]{2,}(?:[ \t]+[A-Z]{2,}){1,4})(?![A-Za-z])"
)

_FATHER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?<![A-Za-z])[SD][ \t]*/[ \t]*O\b[\s:.\-]*("
        + _NAME_WORD
        + r"(?:[ \t]+"
        + _NAME_WORD
        + r"){1,4})",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?<![A-Za-z])(?i:father(?:'s)?(?:[ \t]+name)?)\b[ \t]*:?\s*("
        + _NAME_WORD
        + r"(?:[ \t]+"
        + _NAME_WORD
        + r"){1,4})"
    ),
]

_FATHER_PREFIX = re.compile(r"(?i:[SD][ \t]*/[ \t]*O|father)[^\n]*$")

_DOB_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?i:DOB|Date\s+of\s+Birth|Birth)[\s:]+(\d{2}[-/.]\d{2}[-/.]\d{4})(?!\d)"
    ),
    re.compile(
        r"(?i:DOB|Date\s+of\s+Birth|Birth)[\s:]+(\d{4}[-/.]\d{2}[-/.]\d{2})(?!\d)"
    ),
    re.compile(r"(?<!\d)(\d{2}[-/.]\d{2}[-/.]\d{4})(?!\d)"),
    re.compile(r"(?<!\d)(\d{4}[-/.]\d{2}[-/.]\d{2})(?!\d)"),
]

# Share of leading lines searched for an all-caps holder name.
_UPPER_CASE_LINE_RATIO = 0.4


def clean_name(candidate: str) -> str | None:
    """Validate a name candidate and convert it to title case.

    Args:
        candidate: Raw phrase captured from OCR text.

    OCR often merges card columns onto one line, so the candidate is cut
    at the first stoplisted or digit-bearing word (``Haider Abbas Gender M``
    becomes ``Haider Abbas``).

    Returns:
        The title-cased name, or ``None`` if fewer than 2 words precede the
        first label word or the candidate runs past 5 words.
    """
    candidate = re.sub(r"[:.,;]+$", "", candidate.strip()).strip()
    words = candidate.split()
    if len(words) > 5:
        return None

    kept: list[str] = []
    for word in words:
        if any(ch.isdigit() for ch in word):
            break
        if word.upper().strip(".'-") in NAME_STOPWORDS:
            break
        kept.append(re.sub(r"[:.,;]+$", "", word))

    if len(kept) < 2:
        return None
    return " ".join(word.capitalize() for word in kept)


class RuleExtractor:
    """Regex-based extractor for Pakistani ID card fields."""

    def extract(self, text: str) -> CardFields:
        """Extract card fields from OCR text.

        Args:
            text: Raw OCR text.

        Returns:
            Extracted fields; any field may be ``None``.
        """
        result = CardFields()

        cnic = find_cnic(text)
        cnic_offset = len(text)
        if cnic:
            result.cnic_number = cnic.value
            cnic_offset = cnic.start

        result.full_name = self.extract_name(text, cnic_offset)
        father_name = self.extract_father_name(text)
        if father_name and father_name != result.full_name:
            result.father_name = father_name
        result.dob = self.extract_dob(text)

        logger.info(
            "Rule extraction: name=%s father=%s cnic=%s dob=%s",
            result.full_name is not None,
            result.father_name is not None,
            result.cnic_number is not None,
            result.dob is not None,
        )
        return result

    def extract_name(self, text: str, cnic_offset: int | None = None) -> str | None:
        """Find the card holder's name.

        Tries a ``Name`` label first, then a title-case phrase before the
        CNIC, then an all-caps phrase in the leading lines before the CNIC.

        Args:
            text: Raw OCR text.
            cnic_offset: Text offset of the CNIC; names are searched before it.

        Returns:
            The title-cased name, or ``None``.
        """
        if cnic_offset is None:
            cnic_offset = len(text)

        for match in _NAME_LABEL.finditer(text):
            preceding = text[max(0, match.start() - 10) : match.start()].lower()
            if "father" in preceding or "husband" in preceding:
                continue
            name = clean_name(match.group(1))
            if name:
                logger.debug("Name found via label: %s", name)
                return name

        name = self._first_valid_phrase(_TITLE_CASE_PHRASE, text, cnic_offset)
        if name:
            logger.debug("Name found via title-case phrase: %s", name)
            return name

        lines = text.splitlines(keepends=True)
        leading = math.ceil(len(lines) * _UPPER_CASE_LINE_RATIO)
        leading_end = sum(len(line) for line in lines[:leading])
        name = self._first_valid_phrase(
            _UPPER_CASE_PHRASE, text, min(leading_end, cnic_offset)
        )
        if name:
            logger.debug("Name found via upper-case phrase: %s", name)
        return name

    def _first_valid_phrase(
        self, pattern: re.Pattern[str], text: str, end: int
    ) -> str | None:
        """Return the first phrase before ``end`` that passes validation.

        Phrases introduced by a father label belong to the father and are skipped.
        """
        for match in pattern.finditer(text, 0, end):
            line_start = text.rfind("\n", 0, match.start()) + 1
            if _FATHER_PREFIX.search(text[line_start : match.start()]):
                continue
            name = clean_name(match.group(1))
            if name:
                return name
        return None

    def extract_father_name(self, text: str) -> str | None:
        """Find the father's name via ``S/O``, ``D/O`` or ``Father`` labels.

        Args:
            text: Raw OCR text.

        Returns:
            The title-cased father name, or ``None``.
        """
        for pattern in _FATHER_PATTERNS:
            for match in pattern.finditer(text):
                name = clean_name(match.group(1))
                if name:
                    logger.debug("Father name found: %s", name)
                    return name
        return None

    def extract_dob(self, text: str) -> str | None:
        """Find a date of birth, preferring labeled dates.

        Args:
            text: Raw OCR text.

        Returns:
            The date string as printed, or ``None``.
        """
        clean_text = re.sub(r"[ \t]+", " ", text).strip()
        for pattern in _DOB_PATTERNS:
            match = pattern.search(clean_text)
            if match:
                return match.group(1)
        return None
