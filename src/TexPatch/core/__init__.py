"""Core utilities -- re-exports all public symbols for convenience."""

from .formats import (
    TEXTURE2D_CLASS_ID, TextureFormat, FilterMode, WrapMode, ColorSpace,
    parse_enum,
)
from .records import (
    AssetHandle, TextureRecord, TextureSettings, StreamInfo, RecordFormatError,
)
from .overrides import SettingsOverride
from .results import CodecResult, guarded
from .codec import PixelCodec, DecodedPixelBuffer, TextureFormatError
from .importer import ReplacementImageImporter
from .decision import needs_reencode
from .selection import PluginMode, EDIT_MODE, supports_selection
from .report import (
    OutcomeKind, AssetOutcome, BatchReport, ErrorAggregator,
    DEFAULT_MAX_ERROR_LINES,
)
from .workspace import Workspace, DirectoryWorkspace, AssetRow, WorkspaceError
from .logging import setup_logging

__all__ = [
    "TEXTURE2D_CLASS_ID", "TextureFormat", "FilterMode", "WrapMode", "ColorSpace",
    "parse_enum",
    "AssetHandle", "TextureRecord", "TextureSettings", "StreamInfo", "RecordFormatError",
    "SettingsOverride",
    "CodecResult", "guarded",
    "PixelCodec", "DecodedPixelBuffer", "TextureFormatError",
    "ReplacementImageImporter",
    "needs_reencode",
    "PluginMode", "EDIT_MODE", "supports_selection",
    "OutcomeKind", "AssetOutcome", "BatchReport", "ErrorAggregator",
    "DEFAULT_MAX_ERROR_LINES",
    "Workspace", "DirectoryWorkspace", "AssetRow", "WorkspaceError",
    "setup_logging",
]
