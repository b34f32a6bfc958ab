"""
Image format detection shared by the format parsers.

Office packages store media under arbitrary names (``image1.bin`` is not
rare), so the format is sniffed from the signature first and only then
guessed from the file extension.
"""

from __future__ import annotations

import posixpath
import struct
from typing import Optional

from office2pdf.ir import ImageFormat

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURE = b"GIF8"
BMP_SIGNATURE = b"BM"
TIFF_LE_SIGNATURE = b"II\x2a\x00"
TIFF_BE_SIGNATURE = b"MM\x00\x2a"

_EXTENSION_FORMATS = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
    "svg": ImageFormat.SVG,
}

# Start of Frame markers (SOF0-SOF15, excluding DHT, DAC, RST, SOI, EOI)
_JPEG_SOF_MARKERS = frozenset(
    (0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF)
)


def detect_image_format(data: bytes, name: str | None = None) -> Optional[ImageFormat]:
    """
    Detect the image format from its signature, falling back to the name.

    Args:
        data: Raw image bytes.
        name: Optional part name used when the signature is unknown.

    Returns:
        The ImageFormat, or None for formats the renderer cannot embed
        (EMF/WMF and friends).
    """
    if data[:8] == PNG_SIGNATURE:
        return ImageFormat.PNG
    if data[:3] == JPEG_SIGNATURE:
        return ImageFormat.JPEG
    if data[:4] == GIF_SIGNATURE:
        return ImageFormat.GIF
    if data[:2] == BMP_SIGNATURE:
        return ImageFormat.BMP
    if data[:4] in (TIFF_LE_SIGNATURE, TIFF_BE_SIGNATURE):
        return ImageFormat.TIFF
    head = data[:256].lstrip().lower()
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return ImageFormat.SVG

    if name:
        ext = posixpath.splitext(name)[1].lower().lstrip(".")
        return _EXTENSION_FORMATS.get(ext)
    return None


def get_image_dimensions(data: bytes) -> tuple[Optional[int], Optional[int]]:
    """
    Best-effort extraction of pixel dimensions from common raster formats.

    Returns:
        Tuple of (width, height) or (None, None) if not extractable.
    """
    try:
        if data.startswith(PNG_SIGNATURE) and len(data) >= 24:
            if data[12:16] == b"IHDR":
                width, height = struct.unpack(">II", data[16:24])
                return (width or None, height or None)

        elif data[:4] == GIF_SIGNATURE and len(data) >= 10:
            width, height = struct.unpack_from("<HH", data, 6)
            return (width or None, height or None)

        elif data[:2] == BMP_SIGNATURE and len(data) >= 26:
            width, height = struct.unpack_from("<ii", data, 18)
            return (abs(width) or None, abs(height) or None)

        elif data.startswith(b"\xff\xd8"):
            return _get_jpeg_dimensions(data)

    except struct.error:
        pass

    return (None, None)


def _get_jpeg_dimensions(data: bytes) -> tuple[Optional[int], Optional[int]]:
    offset = 2  # Skip SOI marker

    while offset + 9 <= len(data):
        if data[offset] != 0xFF:
            offset += 1
            continue

        marker = data[offset + 1]

        # Padding bytes
        if marker == 0xFF:
            offset += 1
            continue
        if marker in (0xD9, 0xDA):
            break

        if marker in _JPEG_SOF_MARKERS:
            height, width = struct.unpack(">HH", data[offset + 5 : offset + 9])
            return (width or None, height or None)

        segment_len = struct.unpack(">H", data[offset + 2 : offset + 4])[0]
        if segment_len < 2:
            break
        offset += 2 + segment_len

    return (None, None)
