"""
compression.py - Decode image regions and re-encode them as JPEG.

Decoding uses Pillow's format detection, so JPEG (the usual case) and any
other raster Pillow understands are accepted. Output is always JPEG at a
fixed quality. Raster dimensions are never changed.

Failures are per item: a region that cannot be decoded or re-encoded is
reported and dropped, the rest carry on.
"""

import io
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
from PIL import Image

from .locator import ImageRegion

logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 50

FAILURE_LABELS = {
    "decode": "Failed to decode image",
    "encode": "Failed to encode and compress image",
}


@dataclass
class CompressedImage:
    """Recompressed image data ready for PDF embedding."""
    index: int
    image_data: bytes
    width: int
    height: int
    is_color: bool
    source_format: Optional[str] = None
    source_size: int = 0

    @property
    def total_size(self) -> int:
        return len(self.image_data)

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height


@dataclass
class TranscodeResult:
    """Outcome of one region: a payload or the reason it was skipped."""
    index: int
    payload: Optional[CompressedImage] = None
    error: Optional[str] = None
    stage: Optional[str] = None  # "decode" or "encode" on failure

    @property
    def success(self) -> bool:
        return self.payload is not None

    @property
    def message(self) -> Optional[str]:
        """Console wording for a failed item, None on success."""
        if self.stage is None:
            return None
        return f"{FAILURE_LABELS[self.stage]} {self.index}: {self.error}"


def validate_quality(quality: int) -> int:
    if not 1 <= quality <= 100:
        raise ValueError(f"JPEG quality must be 1-100, got {quality}")
    return quality


def decode_region(region: ImageRegion) -> Tuple[np.ndarray, Optional[str]]:
    """
    Decode a region to a uint8 numpy array.

    Returns:
        (image array, source format name)

    Grayscale stays 2-D, everything else becomes RGB (alpha is dropped,
    CMYK/palette are converted).
    """
    with Image.open(io.BytesIO(region.data)) as img:
        img.load()
        source_format = img.format
        if img.mode not in ("L", "RGB"):
            img = img.convert("RGB")
        image = np.array(img)

    logger.debug(
        f"Decoded image {region.index}: {source_format} "
        f"{image.shape[1]}x{image.shape[0]}"
    )
    return image, source_format


def encode_jpeg(image: np.ndarray, quality: int = DEFAULT_QUALITY) -> bytes:
    """
    Encode a raster as JPEG.

    Args:
        image: RGB (HxWx3) or grayscale (HxW) uint8 array
        quality: JPEG quality (1-100, lower = smaller)
    """
    validate_quality(quality)

    if len(image.shape) == 3 and image.shape[2] == 4:
        image = image[:, :, :3]
    img = Image.fromarray(np.ascontiguousarray(image, dtype=np.uint8))

    buffer = io.BytesIO()
    img.save(
        buffer,
        format="JPEG",
        quality=quality,
        optimize=True,
        subsampling=2  # 4:2:0 chroma subsampling
    )
    return buffer.getvalue()


def transcode_region(region: ImageRegion, quality: int = DEFAULT_QUALITY) -> TranscodeResult:
    """
    Decode then re-encode one region. Never raises for codec errors.
    """
    result = TranscodeResult(index=region.index)

    try:
        image, source_format = decode_region(region)
    except Exception as e:
        result.error = str(e) or type(e).__name__
        result.stage = "decode"
        logger.warning(result.message)
        return result

    try:
        jpeg_data = encode_jpeg(image, quality=quality)
    except Exception as e:
        result.error = str(e) or type(e).__name__
        result.stage = "encode"
        logger.warning(result.message)
        return result

    height, width = image.shape[:2]
    result.payload = CompressedImage(
        index=region.index,
        image_data=jpeg_data,
        width=width,
        height=height,
        is_color=len(image.shape) == 3,
        source_format=source_format,
        source_size=region.size,
    )

    logger.info(
        f"Image {region.index}: {region.size:,} -> {len(jpeg_data):,} bytes | "
        f"{width}x{height} | q={quality}"
    )
    return result


def transcode_regions(
    regions: Iterable[ImageRegion],
    quality: int = DEFAULT_QUALITY,
    max_workers: int = 1,
    progress_callback: Optional[Callable[[int, int], None]] = None
) -> List[TranscodeResult]:
    """
    Transcode every region, returning results in region order.

    Args:
        regions: Regions from the locator
        quality: JPEG quality (1-100)
        max_workers: Thread pool size (1 = sequential)
        progress_callback: Optional callback(completed, total)
    """
    validate_quality(quality)
    regions = list(regions)
    total = len(regions)
    results: List[Optional[TranscodeResult]] = [None] * total

    if max_workers <= 1 or total <= 1:
        # Sequential processing
        for i, region in enumerate(regions):
            results[i] = transcode_region(region, quality)
            if progress_callback:
                progress_callback(i + 1, total)
        return results

    # Parallel processing, results slotted back by position
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(transcode_region, region, quality): i
            for i, region in enumerate(regions)
        }

        completed = 0
        for future in as_completed(futures):
            results[futures[future]] = future.result()
            completed += 1
            if progress_callback:
                progress_callback(completed, total)

    return results


def successful_payloads(results: Iterable[TranscodeResult]) -> List[CompressedImage]:
    """Keep the payloads that made it, in their original order."""
    return [r.payload for r in results if r.payload is not None]
