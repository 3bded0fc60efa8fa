"""
Test fixtures: JPEG payloads and small hand-built PDFs.

The PDFs are written byte by byte (with a correct xref table) so the image
dictionaries keep /Type before /Subtype, as scanner output usually does.
"""

import io

import numpy as np
from PIL import Image


def make_jpeg(width: int, height: int, color: bool = True, quality: int = 95, seed: int = 0) -> bytes:
    """Photo-like JPEG: smooth gradient plus noise."""
    rng = np.random.default_rng(seed)
    x = np.linspace(0, 255, width)[None, :]
    y = np.linspace(0, 255, height)[:, None]
    base = (x + y) / 2

    if color:
        channels = [base, base[::-1, :], np.full_like(base, 128)]
        image = np.stack(channels, axis=2)
        image = image + rng.normal(0, 25, size=image.shape)
    else:
        image = base + rng.normal(0, 25, size=base.shape)

    image = np.clip(image, 0, 255).astype(np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(image).save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def build_pdf(images, padding: bytes = b"", page_size=(595, 842)) -> bytes:
    """
    Build a PDF with one page per image.

    images: list of (stream_bytes, width, height). The stream bytes are
    embedded as-is under /DCTDecode, surrounded by `padding` inside the
    stream (padding counts towards /Length).
    """
    page_w, page_h = page_size
    objects = []  # index 0 -> object 1

    def add(body: bytes) -> int:
        objects.append(body)
        return len(objects)

    add(b"<< /Type /Catalog /Pages 2 0 R >>")
    add(b"")  # Pages, filled in below

    kids = []
    for i, (data, width, height) in enumerate(images):
        stream = padding + data + padding
        image_num = add(
            b"<< /Type /XObject /Subtype /Image /Width %d /Height %d "
            b"/ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /DCTDecode "
            b"/Length %d >>\nstream" % (width, height, len(stream))
            + b"\n" + stream + b"\nendstream"
        )
        content = b"q %d 0 0 %d 0 0 cm /Im%d Do Q" % (page_w, page_h, i)
        content_num = add(
            b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
        )
        page_num = add(
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 %d %d] "
            b"/Resources << /XObject << /Im%d %d 0 R >> >> /Contents %d 0 R >>"
            % (page_w, page_h, i, image_num, content_num)
        )
        kids.append(b"%d 0 R" % page_num)

    objects[1] = b"<< /Type /Pages /Kids [%s] /Count %d >>" % (b" ".join(kids), len(kids))

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % num + body + b"\nendobj\n")

    xref_offset = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(
        b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%EOF\n"
        % (len(objects) + 1, xref_offset)
    )
    return out.getvalue()


def make_wide_png(width: int = 70000) -> bytes:
    """Grayscale PNG one pixel high; decodes fine but is too wide for JPEG (max 65500)."""
    buffer = io.BytesIO()
    Image.new("L", (width, 1), 128).save(buffer, format="PNG")
    return buffer.getvalue()
