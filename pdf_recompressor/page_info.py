"""
page_info.py - Page size and orientation of the input PDF using PyMuPDF.

Not part of the default pipeline. Used for --show-pages and, when the
layout is orientation aware, to decide which output pages go landscape.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

try:
    import fitz  # pip install pymupdf
except ImportError:
    import pymupdf as fitz  # apt install python3-pymupdf

logger = logging.getLogger(__name__)

PORTRAIT = "portrait"
LANDSCAPE = "landscape"


@dataclass(frozen=True)
class PageInfo:
    page_num: int       # 1-based
    width: float        # PDF points, after /Rotate
    height: float
    orientation: str

    @property
    def is_landscape(self) -> bool:
        return self.orientation == LANDSCAPE


def get_page_count(pdf_path: Path) -> int:
    """Get total page count."""
    with fitz.open(pdf_path) as doc:
        return len(doc)


def get_page_dimensions(pdf_path: Path, page_num: int) -> Tuple[float, float]:
    """Get page dimensions in PDF points (1/72 inch). page_num is 0-indexed."""
    with fitz.open(pdf_path) as doc:
        rect = doc[page_num].rect
        return rect.width, rect.height


class PageInspector:
    """Reports width, height and orientation for each page of a PDF."""

    def inspect(self, pdf_path: Path) -> List[PageInfo]:
        raise NotImplementedError


class FitzPageInspector(PageInspector):

    def inspect(self, pdf_path: Path) -> List[PageInfo]:
        pages = []
        with fitz.open(Path(pdf_path)) as doc:
            for i, page in enumerate(doc, start=1):
                # page.rect already accounts for /Rotate
                rect = page.rect
                orientation = LANDSCAPE if rect.width > rect.height else PORTRAIT
                pages.append(PageInfo(i, rect.width, rect.height, orientation))
                logger.debug(f"Page {i}: {rect.width:.2f} x {rect.height:.2f} - {orientation}")
        return pages


def inspect_pages(pdf_path: Path) -> List[PageInfo]:
    return FitzPageInspector().inspect(pdf_path)
