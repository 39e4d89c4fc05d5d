"""
Keyword topic tagger.

Responsibility: Map text onto the fixed topic vocabulary by substring hits
"""

from typing import Dict, List, Optional

KEYWORD_TAG_MAP: Dict[str, List[str]] = {
    "zoning": ["zoning", "land use", "platting", "variance", "rezoning"],
    "short-term-rentals": ["short-term rental", "STR", "airbnb", "vacation rental"],
    "budget": ["budget", "appropriation", "general fund", "fiscal"],
    "water": ["water", "drought", "conservation", "wastewater"],
    "transportation": ["transit", "bus", "rail", "traffic", "mobility", "road"],
    "housing": ["housing", "affordable", "homeless", "shelter"],
    "environment": ["environment", "climate", "sustainability", "green", "pollution"],
    "parks": ["park", "recreation", "trail", "greenspace"],
    "police": ["police", "public safety", "crime", "enforcement"],
    "fire": ["fire", "emergency", "EMS"],
    "taxes": ["tax", "property tax", "rate", "levy"],
}

TOPIC_VOCABULARY: List[str] = list(KEYWORD_TAG_MAP)


def extract_keyword_tags(text: Optional[str]) -> List[str]:
    """Return topics whose keywords appear in the text, in vocabulary order"""
    if not text:
        return []

    lower_text = text.lower()
    return [
        tag
        for tag, keywords in KEYWORD_TAG_MAP.items()
        if any(keyword.lower() in lower_text for keyword in keywords)
    ]
