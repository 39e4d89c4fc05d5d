"""
PDF text extraction for agendas and legislation documents.

Responsibility: Download a size-capped PDF and return its page text
"""

import io
import logging
from typing import Optional

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from ..exceptions import GovWatchError
from ..utils.http_client import PoliteFetcher

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"
MAX_PAGES = 50


def extract_text_from_bytes(data: bytes, max_pages: int = MAX_PAGES) -> Optional[str]:
    """
    Extract text from raw PDF bytes.

    Page breaks become blank lines so line-oriented scanners (such as the
    agenda extractor) still see the document's line structure.

    Returns:
        Extracted text, or None when the bytes are not a readable PDF
        or contain no text layer
    """
    if not data or not data.lstrip()[:4].startswith(PDF_SIGNATURE):
        return None

    try:
        reader = PdfReader(io.BytesIO(data))
        parts = []
        for page in reader.pages[:max_pages]:
            page_text = page.extract_text() or ""
            if page_text.strip():
                parts.append(page_text)
    except (PdfReadError, ValueError, KeyError) as e:
        logger.warning(f"PyPDF2 extraction failed: {e}")
        return None

    text = "\n\n".join(parts).strip()
    return text or None


class PDFExtractor:
    """
    Fetches PDFs through the polite fetcher and extracts their text.

    A HEAD request runs first; documents whose Content-Length exceeds the
    configured cap are skipped without downloading.
    """

    def __init__(self, fetcher: PoliteFetcher, max_bytes: Optional[int] = None):
        self.fetcher = fetcher
        self.max_bytes = max_bytes or fetcher.config.pdf_max_bytes

    async def extract(self, pdf_url: Optional[str]) -> Optional[str]:
        if not pdf_url:
            return None

        try:
            head = await self.fetcher.fetch(pdf_url, method="HEAD")
            content_length = head.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
                logger.warning(f"Skipping large PDF: {pdf_url} ({content_length} bytes)")
                return None

            data = await self.fetcher.get_bytes(pdf_url)
        except GovWatchError as e:
            logger.error(f"Failed to download PDF {pdf_url}: {e}")
            return None

        if len(data) > self.max_bytes:
            logger.warning(f"Skipping large PDF: {pdf_url} ({len(data)} bytes)")
            return None

        text = extract_text_from_bytes(data)
        if text is None:
            logger.info(f"No extractable text in {pdf_url}")
        return text
