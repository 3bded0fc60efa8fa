"""
locator.py - Find embedded image streams in raw PDF bytes.

Two finders:
- PatternRegionFinder: byte pattern scan, no object model (default)
- StructuredRegionFinder: walks the object table with pikepdf

Both return the same ImageRegion sequence so either can feed the
transcoder.
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

import pikepdf
from pikepdf import Name

logger = logging.getLogger(__name__)

# /Type /XObject ... /Subtype /Image ... stream <payload> endstream
IMAGE_STREAM_PATTERN = re.compile(
    rb"/Type\s*/XObject.*?/Subtype\s*/Image.*?stream(.*?)endstream",
    re.DOTALL,
)

# Space, CR, LF, tab, form feed
REGION_PADDING = b" \r\n\t\x0c"

# Filters whose stream bytes are a complete image file on their own
PASSTHROUGH_FILTERS = (Name.DCTDecode, Name.JPXDecode)


@dataclass(frozen=True)
class ImageRegion:
    """A byte range believed to hold one encoded raster image."""
    index: int                      # 1-based order of appearance
    data: bytes
    offset: Optional[int] = None    # Start of captured bytes, if known

    @property
    def size(self) -> int:
        return len(self.data)


def iter_regions(
    data: bytes,
    pattern: "re.Pattern[bytes]" = IMAGE_STREAM_PATTERN
) -> Iterator[ImageRegion]:
    """
    Yield image regions in order of appearance.

    Non-greedy, so each match stops at the first endstream after its
    stream keyword. Object numbers, xref tables and /Filter entries are
    not checked.
    """
    for index, match in enumerate(pattern.finditer(data), start=1):
        region = ImageRegion(
            index=index,
            data=match.group(1).strip(REGION_PADDING),
            offset=match.start(1),
        )
        logger.debug(
            f"Region {region.index}: {region.size:,} bytes at offset {region.offset}"
        )
        yield region


class RegionFinder:
    """Interface for anything that can locate image regions in a PDF."""

    name = "base"

    def find_regions(self, data: bytes) -> List[ImageRegion]:
        raise NotImplementedError


class PatternRegionFinder(RegionFinder):
    """Heuristic scanner matching image XObject markers in the raw bytes."""

    name = "pattern"

    def __init__(self, pattern: "re.Pattern[bytes]" = IMAGE_STREAM_PATTERN):
        self.pattern = pattern

    def find_regions(self, data: bytes) -> List[ImageRegion]:
        regions = list(iter_regions(data, self.pattern))
        logger.info(f"Found {len(regions)} image stream(s) by pattern scan")
        return regions


class StructuredRegionFinder(RegionFinder):
    """
    Object-table walker built on pikepdf.

    Keeps image XObjects whose stream is stored with a single DCTDecode or
    JPXDecode filter and returns the raw (undecoded) stream bytes, which
    are a complete JPEG / JPEG 2000 file. Images with any other filter
    chain are skipped.
    """

    name = "structured"

    def find_regions(self, data: bytes) -> List[ImageRegion]:
        regions = []

        with pikepdf.open(io.BytesIO(data)) as pdf:
            for obj in pdf.objects:
                if not isinstance(obj, pikepdf.Stream):
                    continue
                if obj.get("/Subtype") != Name.Image:
                    continue

                filters = obj.get("/Filter")
                if isinstance(filters, pikepdf.Array):
                    filters = filters[0] if len(filters) == 1 else None
                if filters not in PASSTHROUGH_FILTERS:
                    logger.debug(f"Skipping image {obj.objgen}: filter {obj.get('/Filter')}")
                    continue

                raw = obj.read_raw_bytes().strip(REGION_PADDING)
                regions.append(ImageRegion(index=len(regions) + 1, data=raw))

        logger.info(f"Found {len(regions)} image stream(s) in object table")
        return regions


FINDERS = {
    PatternRegionFinder.name: PatternRegionFinder,
    StructuredRegionFinder.name: StructuredRegionFinder,
}


def get_region_finder(name: str = "pattern") -> RegionFinder:
    """Return a finder instance by name ("pattern" or "structured")."""
    try:
        return FINDERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown region finder {name!r}, expected one of: {', '.join(FINDERS)}"
        ) from None


def find_image_regions(data: bytes) -> List[ImageRegion]:
    """Locate image regions with the default pattern scanner."""
    return PatternRegionFinder().find_regions(data)
