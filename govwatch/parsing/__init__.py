"""Text analysis helpers: agenda extraction, PDF text, topic tags, meeting classification."""

from .agenda_extractor import AgendaLegislation, extract_legislation_from_agenda, is_valid_title, clean_title
from .keyword_tags import extract_keyword_tags, KEYWORD_TAG_MAP, TOPIC_VOCABULARY
from .meetings import determine_meeting_type, derive_meeting_status, classify_meeting
from .pdf_extractor import PDFExtractor, extract_text_from_bytes

__all__ = [
    "AgendaLegislation",
    "extract_legislation_from_agenda",
    "is_valid_title",
    "clean_title",
    "extract_keyword_tags",
    "KEYWORD_TAG_MAP",
    "TOPIC_VOCABULARY",
    "determine_meeting_type",
    "derive_meeting_status",
    "classify_meeting",
    "PDFExtractor",
    "extract_text_from_bytes",
]
