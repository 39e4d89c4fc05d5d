"""
Agenda legislation extractor.

Scans agenda plaintext (usually extracted from a PDF) for ordinance and
resolution numbers, pulls a title from the rest of the line, and guesses
author and status from nearby words. This is a heuristic classifier, not a
grammar: expect misses and the occasional false positive.

Responsibility: Turn agenda text into candidate legislation items
"""

import logging
import re
from dataclasses import dataclass, asdict
from typing import List, Optional

from ..models.legislation import LegislationRecord, LegislationStatus
from .keyword_tags import extract_keyword_tags
from ..utils.dedupe import dedupe_by_key

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 20
MAX_TITLE_LENGTH = 200
MIN_TITLE_LETTERS = 8
AUTHOR_WINDOW = 500
STATUS_WINDOW_BEFORE = 250
STATUS_WINDOW_AFTER = 500

_TITLE_TAIL = r"\s*[:\-–—]?\s*([^\n\r]{15,250})?"

ORDINANCE_PATTERNS = [
    # "Ordinance No. 2025-001", "Ordinance 2025-001"
    re.compile(r"\bOrdinance\s+(?:No\.?|Number|#)?\s*(\d{4}[-_]\d+)" + _TITLE_TAIL, re.IGNORECASE),
    # "Ord. No. 123", "Ordinance 20250115"
    re.compile(r"\bOrd(?:inance)?\.?\s+(?:No\.?|Number|#)?\s*(\d{3,6})(?![-_\d])" + _TITLE_TAIL, re.IGNORECASE),
]

RESOLUTION_PATTERNS = [
    # "Resolution No. 2025-15", "Resolution 95-0926"
    re.compile(r"\bResolution\s+(?:No\.?|Number|#)?\s*(\d{2,4}[-_][\dA-Z]+)" + _TITLE_TAIL, re.IGNORECASE),
    # "Res. No. 123"
    re.compile(r"\bRes(?:olution)?\.?\s+(?:No\.?|Number|#)?\s*(\d{3,6})(?![-_\d])" + _TITLE_TAIL, re.IGNORECASE),
]

SPANISH_BOILERPLATE = (
    "también pueden",
    "los miembros",
    "siguientes",
    "está disponible",
    "deben usar",
    "han adoptado",
    "es una entidad",
    "distritales también",
    "del condado de",
    "antes de la audiencia",
    "que hayan recibido",
    "para obtener",
    "la junta",
)

_LEADING_STOPWORD_RE = re.compile(
    r"^(with|and|or|for|to|in|on|at|by|of|include|the amount|that|which)\s",
    re.IGNORECASE,
)

_NAME = r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"

AUTHOR_PATTERNS = [
    re.compile(r"(?i:Author|Sponsor|Introduced by|By):\s*" + _NAME),
    re.compile(r"(?i:Supervisor|Councilmember|Council Member|Member)\s+" + _NAME),
    re.compile(_NAME + r",\s*(?i:Supervisor|Councilmember|District)"),
    re.compile(r"(?i:District)\s+\d+[:\s]+" + _NAME),
    re.compile(r"(?i:Moved by)\s+(?i:Supervisor|Director|Member)\s+([A-Z][a-z]+)"),
    re.compile(r"(?i:Presented by)\s+(?i:Supervisor|Director|Member)\s+([A-Z][a-z]+)"),
]

AUTHOR_EXCLUDE = ("Board", "Council", "Staff", "Department", "Committee", "Clerk", "Manager", "Attorney")

STATUS_KEYWORDS = [
    ("passed", ("approved", "adopted", "passed", "enacted")),
    ("continued", ("continued", "postponed", "deferred")),
    ("tabled", ("tabled", "withdrawn")),
    ("public_hearing", ("public hearing", "hearing scheduled")),
]


# Agenda actions folded onto the stored legislation lifecycle
AGENDA_STATUS_TO_LEGISLATION = {
    "introduced": LegislationStatus.INTRODUCED,
    "public_hearing": LegislationStatus.PENDING,
    "continued": LegislationStatus.PENDING,
    "passed": LegislationStatus.PASSED,
    "tabled": LegislationStatus.WITHDRAWN,
}


@dataclass
class AgendaLegislation:
    type: str
    number: str
    title: str
    status: str = "introduced"
    author: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def to_record(self, jurisdiction_slug: str, doc_url: Optional[str] = None) -> LegislationRecord:
        """Legislation row keyed per jurisdiction, e.g. austin-tx-ordinance-2025-001"""
        return LegislationRecord(
            external_id=f"{jurisdiction_slug}-{self.type}-{self.number}".lower(),
            title=self.title,
            status=AGENDA_STATUS_TO_LEGISLATION.get(self.status, LegislationStatus.INTRODUCED),
            author=self.author,
            doc_url=doc_url,
            tags=extract_keyword_tags(self.title),
        )


def clean_title(title: str) -> str:
    """Strip PDF noise and redundant prefixes from a captured title"""
    title = re.sub(r"\s+", " ", title).strip()
    title = re.sub(r"Page \d+ of \d+", "", title, flags=re.IGNORECASE)
    title = re.sub(r"^[\d\s]+", "", title)
    title = re.sub(r"^(?:An|A|The)\s+(?:Ordinance|Resolution)\s+", "", title, flags=re.IGNORECASE)
    title = re.sub(r"^to\s+", "", title, flags=re.IGNORECASE)

    if title:
        title = title[0].upper() + title[1:]

    title = re.sub(r"[,;:\-_]+$", "", title)
    return title.strip()


def is_valid_title(title: str) -> bool:
    """
    Reject titles that are too short or long, mostly noise, or boilerplate.

    Example:
        >>> is_valid_title("Amending City Code Chapter 25-2 relating to zoning")
        True
        >>> is_valid_title("los miembros de la junta directiva del condado")
        False
    """
    if not title:
        return False

    if len(title) < MIN_TITLE_LENGTH or len(title) > MAX_TITLE_LENGTH:
        return False

    if len(re.findall(r"[a-zA-Z]", title)) < MIN_TITLE_LETTERS:
        return False

    lower_title = title.lower()
    if any(phrase in lower_title for phrase in SPANISH_BOILERPLATE):
        return False

    if _LEADING_STOPWORD_RE.match(title):
        return False

    special_chars = re.sub(r"[a-zA-Z0-9\s]", "", title)
    if len(special_chars) > len(title) / 3:
        return False

    if len(re.findall(r"\d", title)) > len(title) / 2:
        return False

    return True


def extract_author(text: str, match_index: int) -> Optional[str]:
    context = text[max(0, match_index - AUTHOR_WINDOW):match_index + AUTHOR_WINDOW]

    for pattern in AUTHOR_PATTERNS:
        match = pattern.search(context)
        if not match:
            continue
        name = match.group(1).strip()
        if not any(word in name for word in AUTHOR_EXCLUDE):
            return name

    return None


def derive_status(text: str, match_index: int) -> str:
    context = text[max(0, match_index - STATUS_WINDOW_BEFORE):match_index + STATUS_WINDOW_AFTER].lower()

    for status, keywords in STATUS_KEYWORDS:
        if any(keyword in context for keyword in keywords):
            return status

    return "introduced"


def _scan(text: str, patterns: List[re.Pattern], item_type: str) -> List[AgendaLegislation]:
    items: List[AgendaLegislation] = []

    for pattern in patterns:
        for match in pattern.finditer(text):
            number = match.group(1)
            raw_title = (match.group(2) or "").strip() or f"{item_type.title()} {number}"
            title = clean_title(raw_title)

            if not is_valid_title(title):
                logger.debug(f"Skipping invalid {item_type} {number}: {title[:60]}")
                continue

            items.append(AgendaLegislation(
                type=item_type,
                number=number,
                title=title,
                author=extract_author(text, match.start()),
                status=derive_status(text, match.start()),
            ))

    return items


def extract_legislation_from_agenda(text: Optional[str]) -> List[AgendaLegislation]:
    """
    Extract ordinances and resolutions from agenda plaintext.

    Each (type, number) pair is reported once, first occurrence wins.

    Returns:
        List of AgendaLegislation items, ordinances first
    """
    if not text:
        return []

    found = _scan(text, ORDINANCE_PATTERNS, "ordinance") + _scan(text, RESOLUTION_PATTERNS, "resolution")
    unique, duplicates = dedupe_by_key(found, lambda item: (item.type, item.number.upper()))

    logger.info(f"Extracted {len(unique)} agenda items ({duplicates} duplicates dropped)")
    return unique
