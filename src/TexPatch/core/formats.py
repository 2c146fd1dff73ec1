"""Texture enumerations and pixel-layout tables."""

from enum import IntEnum
from typing import Dict, Optional, Tuple

# Class id of Texture2D records inside asset containers.
TEXTURE2D_CLASS_ID = 28


class TextureFormat(IntEnum):
    """Enumerate stored pixel format codes."""

    Alpha8 = 1
    ARGB4444 = 2
    RGB24 = 3
    RGBA32 = 4
    ARGB32 = 5
    RGB565 = 7
    R16 = 9
    DXT1 = 10
    DXT5 = 12
    RGBA4444 = 13
    BGRA32 = 14
    RHalf = 15
    RGHalf = 16
    RGBAHalf = 17
    RFloat = 18
    RGFloat = 19
    RGBAFloat = 20
    YUY2 = 21
    RGB9e5Float = 22
    BC6H = 24
    BC7 = 25
    BC4 = 26
    BC5 = 27
    DXT1Crunched = 28
    DXT5Crunched = 29
    ETC_RGB4 = 34
    EAC_R = 41
    ETC2_RGB = 45
    ETC2_RGBA8 = 47
    ASTC_RGB_4x4 = 48
    ASTC_RGB_8x8 = 51
    RG16 = 62
    R8 = 63
    ETC_RGB4Crunched = 64
    ETC2_RGBA8Crunched = 65


class FilterMode(IntEnum):
    """Enumerate texture sampling filters."""

    Point = 0
    Bilinear = 1
    Trilinear = 2


class WrapMode(IntEnum):
    """Enumerate texture coordinate wrap modes."""

    Repeat = 0
    Clamp = 1
    Mirror = 2
    MirrorOnce = 3


class ColorSpace(IntEnum):
    """Enumerate texture color spaces."""

    Gamma = 0
    Linear = 1


# Byte-addressable layouts: format -> (bytes per pixel, RGBA source index per
# stored channel). A channel of ``None`` stores nothing for that slot.
BYTE_LAYOUTS: Dict[TextureFormat, Tuple[int, Tuple[int, ...]]] = {
    TextureFormat.Alpha8: (1, (3,)),
    TextureFormat.R8: (1, (0,)),
    TextureFormat.RG16: (2, (0, 1)),
    TextureFormat.RGB24: (3, (0, 1, 2)),
    TextureFormat.RGBA32: (4, (0, 1, 2, 3)),
    TextureFormat.ARGB32: (4, (3, 0, 1, 2)),
    TextureFormat.BGRA32: (4, (2, 1, 0, 3)),
}

# 16-bit packed layouts: format -> bit widths of (R, G, B, A) and the shift of
# each channel inside the little-endian word.
PACKED16_LAYOUTS: Dict[TextureFormat, Tuple[Tuple[int, int, int, int], Tuple[int, int, int, int]]] = {
    TextureFormat.RGB565: ((5, 6, 5, 0), (11, 5, 0, 0)),
    TextureFormat.RGBA4444: ((4, 4, 4, 4), (12, 8, 4, 0)),
    TextureFormat.ARGB4444: ((4, 4, 4, 4), (8, 4, 0, 12)),
}


def bytes_per_pixel(fmt: TextureFormat) -> Optional[int]:
    """Return the storage size of one pixel, or None for block formats."""
    if fmt in BYTE_LAYOUTS:
        return BYTE_LAYOUTS[fmt][0]
    if fmt in PACKED16_LAYOUTS or fmt == TextureFormat.R16:
        return 2
    return None


def parse_enum(enum_cls, value):
    """Coerce ``value`` (member, int, numeric text or name) into ``enum_cls``.

    Names are matched case-insensitively. Raises ``ValueError`` for anything
    that does not name a member.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid {enum_cls.__name__}: {value!r}")
    if isinstance(value, int):
        return enum_cls(value)
    if isinstance(value, str):
        raw = value.strip()
        if raw.lstrip("-").isdigit():
            return enum_cls(int(raw))
        lowered = raw.lower()
        for member in enum_cls:
            if member.name.lower() == lowered:
                return member
    valid = ", ".join(m.name for m in enum_cls)
    raise ValueError(f"invalid {enum_cls.__name__}: {value!r} (expected one of: {valid})")
