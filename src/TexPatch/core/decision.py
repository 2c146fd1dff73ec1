"""Decide whether stored pixels must round-trip through the codec."""

from .overrides import SettingsOverride


def needs_reencode(current_format: int, override: SettingsOverride) -> bool:
    """Return True iff the override targets a different pixel format.

    No other attribute (name, filtering, wrap, color space, ...) requires
    touching pixel data.
    """
    if override.texture_format is None:
        return False
    return int(override.texture_format) != int(current_format)
