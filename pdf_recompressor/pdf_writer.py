"""
pdf_writer.py - PDF assembly from recompressed images.

Each page is a fixed-size canvas holding exactly one JPEG (DCTDecode)
image anchored at the top-left corner.

Page lifecycle: add_page() must be followed by exactly one place_image()
before the next add_page(); save() seals the document and nothing is
accepted afterwards.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import pikepdf
from pikepdf import Pdf, Stream, Dictionary, Name

from .compression import CompressedImage

logger = logging.getLogger(__name__)

MM_TO_PTS = 72.0 / 25.4

# A4 portrait
DEFAULT_PAGE_WIDTH_MM = 210.0
DEFAULT_PAGE_HEIGHT_MM = 297.0


class AssemblerStateError(RuntimeError):
    """Raised on an out-of-order add_page / place_image / save call."""


@dataclass(frozen=True)
class PageLayout:
    """
    Output canvas settings.

    swap_dimensions: draw the image page-height wide and page-width tall
        (the original tool's behaviour). False draws it exactly page size.
    orientation_aware: give landscape-flagged pages a landscape canvas and
        draw the image rotated 90 degrees. Off by default.
    """
    width_mm: float = DEFAULT_PAGE_WIDTH_MM
    height_mm: float = DEFAULT_PAGE_HEIGHT_MM
    swap_dimensions: bool = True
    orientation_aware: bool = False

    def page_size(self, landscape: bool = False) -> Tuple[float, float]:
        """Page (width, height) in PDF points."""
        width = self.width_mm * MM_TO_PTS
        height = self.height_mm * MM_TO_PTS
        if landscape and self.orientation_aware:
            return height, width
        return width, height


def placement_matrix(
    page_width: float,
    page_height: float,
    swap: bool = True,
    rotate: bool = False
) -> Tuple[float, float, float, float, float, float]:
    """
    Operands for the `cm` operator that draws the unit image square.

    The image is anchored at the page's top-left corner. Without rotation
    it is drawn (page_width x page_height), or (page_height x page_width)
    when swap is set. With rotation the image is turned 90 degrees
    counter-clockwise so its width runs up the page.
    """
    if not rotate:
        draw_w, draw_h = (page_height, page_width) if swap else (page_width, page_height)
        return (draw_w, 0.0, 0.0, draw_h, 0.0, page_height - draw_h)

    # Rotated: the image's own width spans the page height when filling
    draw_w, draw_h = (page_width, page_height) if swap else (page_height, page_width)
    return (0.0, draw_w, -draw_h, 0.0, draw_h, page_height - draw_w)


class PDFWriter:
    """
    Assembles recompressed images into a PDF, one image per page.

    No text layers, no masks, no layering.
    """

    def __init__(self, layout: Optional[PageLayout] = None):
        self.layout = layout or PageLayout()
        self.pdf = Pdf.new()
        self.pages: List[CompressedImage] = []
        self._pending = None  # (page, width_pts, height_pts, rotate)
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def page_count(self) -> int:
        return len(self.pdf.pages)

    def _check_open(self, action: str):
        if self._sealed:
            raise AssemblerStateError(f"Cannot {action}: document already saved")

    def add_page(self, landscape: bool = False):
        """Append a blank page of the layout's size."""
        self._check_open("add page")
        if self._pending is not None:
            raise AssemblerStateError(
                f"Cannot add page: page {self.page_count} has no image yet"
            )

        width_pts, height_pts = self.layout.page_size(landscape)
        self.pdf.add_blank_page(page_size=(width_pts, height_pts))
        rotate = landscape and self.layout.orientation_aware
        self._pending = (self.pdf.pages[-1], width_pts, height_pts, rotate)

    def place_image(self, compressed: CompressedImage):
        """Draw a JPEG onto the page created by the last add_page()."""
        self._check_open("place image")
        if self._pending is None:
            raise AssemblerStateError("Cannot place image: call add_page() first")

        page, width_pts, height_pts, rotate = self._pending
        page_num = self.page_count

        colorspace = Name.DeviceRGB if compressed.is_color else Name.DeviceGray
        image_dict = Dictionary({
            '/Type': Name.XObject,
            '/Subtype': Name.Image,
            '/Width': compressed.width,
            '/Height': compressed.height,
            '/ColorSpace': colorspace,
            '/BitsPerComponent': 8,
            '/Filter': Name.DCTDecode,
        })
        img_stream = Stream(self.pdf, compressed.image_data, image_dict)

        # Unique per page, like image1.jpg, image2.jpg, ...
        image_name = f"/Image{page_num}"
        xobjects = Dictionary({})
        xobjects[image_name] = self.pdf.make_indirect(img_stream)
        page.Resources = Dictionary({'/XObject': xobjects})

        matrix = placement_matrix(
            width_pts, height_pts, swap=self.layout.swap_dimensions, rotate=rotate
        )
        operands = " ".join(f"{v:.4f}" for v in matrix)
        content = f"""
q
{operands} cm
{image_name} Do
Q
"""
        page.Contents = self.pdf.make_indirect(
            Stream(self.pdf, content.strip().encode("ascii"))
        )

        self.pages.append(compressed)
        self._pending = None

        mode = "color" if compressed.is_color else "gray"
        logger.debug(
            f"Added page {page_num}: image {compressed.index}, "
            f"{compressed.total_size:,} bytes ({mode}{', rotated' if rotate else ''})"
        )

    def append(self, compressed: CompressedImage, landscape: bool = False):
        """add_page() + place_image() in one call."""
        self.add_page(landscape=landscape)
        self.place_image(compressed)

    def save(self, output_path):
        """
        Seal the document and write it out with compressed content
        streams and generated object streams.

        Args:
            output_path: Destination path or writable binary stream
        """
        self._check_open("save")
        if self._pending is not None:
            raise AssemblerStateError(
                f"Cannot save: page {self.page_count} has no image"
            )

        if isinstance(output_path, (str, Path)):
            output_path = Path(output_path)

        # Sealed even if the write fails; the builder is not reusable
        self._sealed = True
        try:
            self.pdf.save(
                output_path,
                compress_streams=True,
                object_stream_mode=pikepdf.ObjectStreamMode.generate
            )
        finally:
            self.pdf.close()

        logger.info(f"Saved {len(self.pages)} pages to {output_path}")

    def get_total_size(self) -> int:
        """Get total image payload size (before PDF overhead)."""
        return sum(p.total_size for p in self.pages)


def create_pdf(
    pages: List[CompressedImage],
    output_path: Path,
    layout: Optional[PageLayout] = None,
    orientations: Optional[List[bool]] = None
) -> int:
    """
    Create PDF from recompressed images.

    orientations, if given, holds a landscape flag per image (only used
    when the layout is orientation aware).

    Returns output file size in bytes.
    """
    output_path = Path(output_path)
    writer = PDFWriter(layout)
    for i, page in enumerate(pages):
        landscape = bool(orientations and i < len(orientations) and orientations[i])
        writer.append(page, landscape=landscape)
    writer.save(output_path)
    return output_path.stat().st_size
