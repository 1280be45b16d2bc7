"""
Page Text Extractor
===================
Extracts plain text from PDF files using PyMuPDF (fitz), one string per page.
No layout analysis: the reading order is whatever PyMuPDF reports.
"""

from __future__ import annotations

import logging
from typing import Optional

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)


class PageTextExtractor:
    """Handles PDF ingestion and per-page text extraction."""

    def get_page_count(self, pdf_path: str) -> int:
        """Get total number of pages in the PDF."""
        with fitz.open(pdf_path) as doc:
            return doc.page_count

    def extract_pages(
        self,
        pdf_path: str,
        page_range: Optional[tuple[int, int]] = None,
    ) -> list[str]:
        """
        Extract the text of each page.

        Args:
            pdf_path: Path to the PDF file.
            page_range: Optional (start, end) range (1-indexed, inclusive).

        Returns:
            One text string per page, in page order.
        """
        pages: list[str] = []

        with fitz.open(pdf_path) as doc:
            total_pages = doc.page_count

            start_page = 1
            end_page = total_pages
            if page_range:
                start_page = max(1, page_range[0])
                end_page = min(total_pages, page_range[1])

            logger.info(
                f"Extracting text from {pdf_path} "
                f"(pages {start_page} to {end_page})"
            )

            for page_idx in range(start_page - 1, end_page):
                pages.append(doc[page_idx].get_text("text"))

        logger.debug(f"Extracted {len(pages)} pages")
        return pages
