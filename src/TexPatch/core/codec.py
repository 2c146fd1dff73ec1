"""Reference pixel codec for uncompressed texture layouts.

Raw buffers are ``(height, width, 4)`` uint8 RGBA arrays in stored row
order (bottom-up, as texture records keep them). Block-compressed formats
are recognised but not encoded or decoded here.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

import numpy as np
from PIL import Image

from .formats import BYTE_LAYOUTS, PACKED16_LAYOUTS, TextureFormat, bytes_per_pixel
from .records import TextureRecord

logger = logging.getLogger("texpatch.codec")


class TextureFormatError(ValueError):
    """Raised for pixel formats this codec cannot convert."""


@dataclass
class DecodedPixelBuffer:
    """Transient RGBA8 pixels plus dimensions."""

    pixels: np.ndarray
    width: int
    height: int


def _resolve_format(code: int) -> TextureFormat:
    try:
        return TextureFormat(int(code))
    except ValueError as exc:
        raise TextureFormatError(f"unknown texture format code {code}") from exc


def _require_supported(fmt: TextureFormat) -> int:
    bpp = bytes_per_pixel(fmt)
    if bpp is None:
        raise TextureFormatError(f"texture format {fmt.name} is not supported by this codec")
    return bpp


class PixelCodec:
    """Convert between stored pixel bytes, RGBA buffers and image files."""

    def __init__(self, max_image_pixels: int = 0):
        self.max_image_pixels = max_image_pixels

    # ------------------------------------------
    # Encoded byte retrieval
    # ------------------------------------------

    def fetch_encoded(self, record: TextureRecord, container_path: str) -> bytes:
        """Return the record's encoded pixel bytes.

        Inline ``image data`` wins; otherwise the external stream file is
        resolved next to ``container_path`` by its base name.
        """
        if record.image_data:
            return record.image_data
        if not record.stream.is_external:
            raise ValueError(f"texture '{record.name}' has no pixel data")

        stream_name = PureWindowsPath(PurePosixPath(record.stream.path).name).name
        stream_path = os.path.join(os.path.dirname(os.path.abspath(container_path)), stream_name)
        if not os.path.isfile(stream_path):
            raise FileNotFoundError(f"stream file not found: {stream_path}")
        with open(stream_path, "rb") as f:
            f.seek(record.stream.offset)
            data = f.read(record.stream.size)
        if len(data) != record.stream.size:
            raise ValueError(
                f"stream file {stream_name} truncated: expected {record.stream.size} "
                f"bytes at offset {record.stream.offset}, got {len(data)}"
            )
        logger.debug("Read %d stream bytes for '%s' from %s", len(data), record.name, stream_path)
        return data

    # ------------------------------------------
    # Raw decode / encode
    # ------------------------------------------

    def decode_raw(self, record: TextureRecord, encoded: bytes) -> DecodedPixelBuffer:
        """Decode the first mip level of ``encoded`` into an RGBA8 buffer."""
        fmt = _resolve_format(record.texture_format)
        bpp = _require_supported(fmt)
        width, height = record.width, record.height
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid texture size {width}x{height}")
        needed = width * height * bpp
        if len(encoded) < needed:
            raise ValueError(
                f"{fmt.name} data too short for {width}x{height}: {len(encoded)} < {needed}"
            )
        data = np.frombuffer(encoded, dtype=np.uint8, count=needed)

        rgba = np.zeros((height, width, 4), dtype=np.uint8)
        rgba[..., 3] = 255
        if fmt in BYTE_LAYOUTS:
            _, channels = BYTE_LAYOUTS[fmt]
            stored = data.reshape(height, width, bpp)
            for i, src in enumerate(channels):
                rgba[..., src] = stored[..., i]
            if fmt == TextureFormat.Alpha8:
                rgba[..., :3] = 255
        elif fmt == TextureFormat.R16:
            words = data.view("<u2").reshape(height, width)
            rgba[..., 0] = (words >> 8).astype(np.uint8)
        else:
            words = data.view("<u2").reshape(height, width).astype(np.uint32)
            bits, shifts = PACKED16_LAYOUTS[fmt]
            for ch, (nbits, shift) in enumerate(zip(bits, shifts)):
                if nbits == 0:
                    continue
                mask = (1 << nbits) - 1
                value = (words >> shift) & mask
                rgba[..., ch] = ((value * 255 + mask // 2) // mask).astype(np.uint8)
        return DecodedPixelBuffer(pixels=rgba, width=width, height=height)

    def encode_raw(self, record: TextureRecord, buffer: DecodedPixelBuffer,
                   width: int, height: int, quality: int) -> bytes:
        """Encode ``buffer`` into the record's current format and store it.

        ``quality`` is accepted for parity with block encoders; uncompressed
        layouts are lossless apart from channel truncation.
        """
        fmt = _resolve_format(record.texture_format)
        _require_supported(fmt)
        pixels = np.asarray(buffer.pixels, dtype=np.uint8)
        if pixels.shape != (height, width, 4):
            raise ValueError(
                f"buffer shape {pixels.shape} does not match {width}x{height} RGBA"
            )
        logger.debug(
            "Encoding %dx%d buffer to %s (quality=%d) for '%s'",
            width, height, fmt.name, quality, record.name,
        )
        encoded = self._pack(fmt, pixels)
        record.set_encoded(encoded, width, height)
        return encoded

    def encode_image(self, record: TextureRecord, image_path: str) -> bytes:
        """Load an external image and encode it into the record's format."""
        fmt = _resolve_format(record.texture_format)
        _require_supported(fmt)
        with Image.open(image_path) as img:
            if self.max_image_pixels > 0 and img.width * img.height > self.max_image_pixels:
                raise ValueError(
                    f"Image too large: {img.width}x{img.height} = "
                    f"{img.width * img.height:,} pixels (max {self.max_image_pixels:,})"
                )
            rgba = np.asarray(img.convert("RGBA"), dtype=np.uint8)
        # Image files are top-down; stored texture rows are bottom-up.
        rgba = np.ascontiguousarray(rgba[::-1])
        height, width = rgba.shape[:2]
        logger.debug(
            "Importing %s (%dx%d) as %s for '%s'",
            Path(image_path).name, width, height, fmt.name, record.name,
        )
        encoded = self._pack(fmt, rgba)
        record.set_encoded(encoded, width, height)
        return encoded

    @staticmethod
    def _pack(fmt: TextureFormat, rgba: np.ndarray) -> bytes:
        if fmt in BYTE_LAYOUTS:
            _, channels = BYTE_LAYOUTS[fmt]
            return np.ascontiguousarray(rgba[..., list(channels)]).tobytes()
        if fmt == TextureFormat.R16:
            words = rgba[..., 0].astype(np.uint16) * 257
            return words.astype("<u2").tobytes()
        bits, shifts = PACKED16_LAYOUTS[fmt]
        words = np.zeros(rgba.shape[:2], dtype=np.uint32)
        for ch, (nbits, shift) in enumerate(zip(bits, shifts)):
            if nbits == 0:
                continue
            mask = (1 << nbits) - 1
            value = (rgba[..., ch].astype(np.uint32) * mask + 127) // 255
            words |= value << shift
        return words.astype("<u2").tobytes()
