"""
pipeline.py - Image recompression pipeline.

Pipeline:
1. Read the input PDF into memory
2. Locate embedded image streams
3. Decode and re-encode each as a lower-quality JPEG
4. Place each on its own fixed-size page and save

Strictly linear. A bad image is skipped; a bad input or output file
ends the run.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .compression import DEFAULT_QUALITY, TranscodeResult, transcode_regions, validate_quality
from .locator import PatternRegionFinder, RegionFinder
from .page_info import FitzPageInspector, PageInspector
from .pdf_writer import PageLayout, PDFWriter

logger = logging.getLogger(__name__)


@dataclass
class RecompressionResult:
    """Result of recompressing a PDF."""
    input_path: Path
    output_path: Path
    success: bool
    error: Optional[str] = None

    regions_found: int = 0
    pages_ok: int = 0
    pages_failed: int = 0

    input_size: int = 0
    output_size: int = 0
    total_time: float = 0.0

    failures: List[TranscodeResult] = field(default_factory=list)

    @property
    def size_delta_pct(self) -> float:
        """Signed change in file size, (output - input) / input * 100."""
        if self.input_size == 0:
            return 0.0
        return (self.output_size - self.input_size) / self.input_size * 100

    def summary(self) -> str:
        return (
            f"PDF created successfully: {self.output_path}\n"
            f"Input PDF size: {self.input_size} bytes\n"
            f"Output PDF size: {self.output_size} bytes\n"
            f"Percentage difference in file size: {self.size_delta_pct:.2f}%\n"
            f"Pages: {self.pages_ok}/{self.regions_found} images\n"
            f"Time: {self.total_time:.1f}s"
        )


def page_orientations(
    input_path: Path,
    inspector: Optional[PageInspector] = None
) -> List[bool]:
    """
    Landscape flag for each input page, in page order.

    Image i is paired with page i, which only holds for one-image-per-page
    scans.
    """
    inspector = inspector or FitzPageInspector()
    try:
        return [p.is_landscape for p in inspector.inspect(input_path)]
    except Exception as e:
        logger.warning(f"Page inspection failed, using portrait pages: {e}")
        return []


def recompress_pdf(
    input_path: Path,
    output_path: Path,
    quality: int = DEFAULT_QUALITY,
    layout: Optional[PageLayout] = None,
    finder: Optional[RegionFinder] = None,
    max_workers: int = 1,
    inspector: Optional[PageInspector] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None
) -> RecompressionResult:
    """
    Rebuild a PDF from its recompressed embedded images.

    Args:
        input_path: Input PDF
        output_path: Output PDF
        quality: JPEG quality (1-100)
        layout: Output page settings (A4 portrait by default)
        finder: Image stream locator (pattern scan by default)
        max_workers: Parallel transcode workers (1 = sequential)
        inspector: Page inspector for orientation-aware layouts
        progress_callback: Optional callback(current, total)

    Returns:
        RecompressionResult with statistics
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    layout = layout or PageLayout()
    finder = finder or PatternRegionFinder()
    validate_quality(quality)

    result = RecompressionResult(
        input_path=input_path,
        output_path=output_path,
        success=False
    )
    start_time = time.time()

    try:
        data = input_path.read_bytes()
    except OSError as e:
        logger.error(f"Error reading file: {e}")
        result.error = f"Error reading file: {e}"
        return result

    result.input_size = len(data)
    logger.info(f"Processing {input_path.name}: {result.input_size:,} bytes")

    try:
        regions = finder.find_regions(data)
    except Exception as e:
        logger.error(f"Could not locate images: {e}")
        result.error = f"Could not locate images: {e}"
        return result
    del data

    result.regions_found = len(regions)

    results = transcode_regions(
        regions,
        quality=quality,
        max_workers=max_workers,
        progress_callback=progress_callback
    )
    result.failures = [r for r in results if not r.success]
    result.pages_failed = len(result.failures)

    orientations = page_orientations(input_path, inspector) if layout.orientation_aware else []

    writer = PDFWriter(layout)
    for i, payload in enumerate(r.payload for r in results if r.success):
        landscape = i < len(orientations) and orientations[i]
        writer.append(payload, landscape=landscape)
    result.pages_ok = writer.page_count

    try:
        writer.save(output_path)
    except Exception as e:
        logger.error(f"Failed to create PDF: {e}")
        result.error = f"Failed to create PDF: {e}"
        result.total_time = time.time() - start_time
        return result

    try:
        result.output_size = output_path.stat().st_size
    except OSError as e:
        logger.error(f"Error getting output file size: {e}")
        result.error = f"Error getting output file size: {e}"
        result.total_time = time.time() - start_time
        return result

    result.success = True
    result.total_time = time.time() - start_time

    logger.info(
        f"{result.pages_ok}/{result.regions_found} images kept, "
        f"{result.input_size:,} -> {result.output_size:,} bytes "
        f"({result.size_delta_pct:+.2f}%)"
    )
    return result
