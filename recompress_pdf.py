#!/usr/bin/env python3
"""
recompress_pdf.py - Shrink a scanned PDF by recompressing its images.

Every embedded image is re-encoded as a lower-quality JPEG and placed on
its own A4 page.

Usage:
    python recompress_pdf.py input.pdf -o output.pdf
    python recompress_pdf.py input.pdf -q 40 --workers 4
    python recompress_pdf.py input.pdf --show-pages
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent to path when running as script
if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).parent))

from pdf_recompressor.compression import DEFAULT_QUALITY
from pdf_recompressor.locator import FINDERS, get_region_finder
from pdf_recompressor.page_info import inspect_pages
from pdf_recompressor.pdf_writer import (
    DEFAULT_PAGE_HEIGHT_MM,
    DEFAULT_PAGE_WIDTH_MM,
    PageLayout,
)
from pdf_recompressor.pipeline import recompress_pdf


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Recompress the images inside a PDF into a smaller one-image-per-page PDF.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python recompress_pdf.py scan.pdf -o smaller.pdf
  python recompress_pdf.py scan.pdf -q 40
  python recompress_pdf.py scan.pdf --finder structured

The output PDF will be:
  - One page per embedded image, in the order found in the file
  - Each image re-encoded as JPEG at the chosen quality
  - Fixed page size (A4 portrait unless changed)
  - No text, vectors or metadata from the original
"""
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input PDF file"
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file (default: <input>_recompressed.pdf)"
    )

    parser.add_argument(
        "-q", "--quality",
        type=int,
        default=DEFAULT_QUALITY,
        help=f"JPEG quality 1-100 (default: {DEFAULT_QUALITY})"
    )

    parser.add_argument(
        "--finder",
        choices=sorted(FINDERS),
        default="pattern",
        help="How to locate images: byte pattern scan or PDF object table (default: pattern)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Parallel transcode workers (default: 1)"
    )

    parser.add_argument(
        "--page-width",
        type=float,
        default=DEFAULT_PAGE_WIDTH_MM,
        help=f"Page width in mm (default: {DEFAULT_PAGE_WIDTH_MM:g})"
    )

    parser.add_argument(
        "--page-height",
        type=float,
        default=DEFAULT_PAGE_HEIGHT_MM,
        help=f"Page height in mm (default: {DEFAULT_PAGE_HEIGHT_MM:g})"
    )

    parser.add_argument(
        "--no-swap",
        action="store_true",
        help="Draw images page-width x page-height instead of the swapped size"
    )

    parser.add_argument(
        "--orientation-aware",
        action="store_true",
        help="Use landscape pages (rotated image) where the input page is landscape"
    )

    parser.add_argument(
        "--show-pages",
        action="store_true",
        help="Print size and orientation of each input page and exit"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser.parse_args(argv)


def print_progress(current: int, total: int):
    """Print progress bar."""
    width = 40
    filled = int(width * current / total)
    bar = "=" * filled + "-" * (width - filled)
    pct = current / total * 100
    print(f"\r[{bar}] {current}/{total} ({pct:.0f}%)", end="", file=sys.stderr)
    if current == total:
        print(file=sys.stderr)


def show_pages(input_path: Path) -> int:
    for page in inspect_pages(input_path):
        print(f"Page {page.page_num}: {page.width:.2f} x {page.height:.2f} - {page.orientation}")
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    input_path = args.input
    if not input_path.exists():
        print(f"Error reading file: {input_path} not found", file=sys.stderr)
        return 1

    if not 1 <= args.quality <= 100:
        print(f"Error: quality must be 1-100, got {args.quality}", file=sys.stderr)
        return 1

    if args.show_pages:
        return show_pages(input_path)

    output_path = args.output or input_path.with_name(input_path.stem + "_recompressed.pdf")

    layout = PageLayout(
        width_mm=args.page_width,
        height_mm=args.page_height,
        swap_dimensions=not args.no_swap,
        orientation_aware=args.orientation_aware,
    )

    result = recompress_pdf(
        input_path,
        output_path,
        quality=args.quality,
        layout=layout,
        finder=get_region_finder(args.finder),
        max_workers=args.workers,
        progress_callback=print_progress if args.verbose else None
    )

    for failure in result.failures:
        print(failure.message)

    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    print(result.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
