"""Host-facing "Edit Texture2D" plugin option.

The host application discovers the option, asks ``supports_selection`` and
awaits ``execute``. All user interaction goes through the ``HostFunctions``
the host passes in.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, Tuple

from .config import EditorConfig
from .core import (
    EDIT_MODE, AssetHandle, BatchReport, ErrorAggregator, PixelCodec, PluginMode,
    SettingsOverride, Workspace, supports_selection,
)
from .pipeline import TextureEditPipeline

logger = logging.getLogger("texpatch")


@dataclass(frozen=True)
class FileType:
    """One entry of a file-picker type filter."""

    label: str
    patterns: Tuple[str, ...]


ALL_FILES = FileType("All files", ("*",))

IMAGE_FILE_TYPES: Tuple[FileType, ...] = (
    FileType("Image files", ("*.png", "*.bmp", "*.jpg", "*.jpeg", "*.tga")),
    FileType("PNG file", ("*.png",)),
    FileType("BMP file", ("*.bmp",)),
    FileType("JPG file", ("*.jpg", "*.jpeg")),
    FileType("TGA file", ("*.tga",)),
    ALL_FILES,
)


@dataclass(frozen=True)
class OpenFileOptions:
    """Parameters for the host's open-file dialog."""

    title: str = "Open texture"
    allow_multiple: bool = False
    file_types: Tuple[FileType, ...] = IMAGE_FILE_TYPES


def image_file_types(extensions: Sequence[str]) -> Tuple[FileType, ...]:
    """Build picker filters for ``extensions`` plus an all-files fallback."""
    patterns = tuple(f"*{ext}" for ext in extensions)
    singles = tuple(
        FileType(f"{ext.lstrip('.').upper()} file", (f"*{ext}",)) for ext in extensions
    )
    return (FileType("Image files", patterns),) + singles + (ALL_FILES,)


class HostFunctions(Protocol):
    """Interactive functions provided by the host application."""

    async def show_dialog(self, request: "EditTextureRequest") -> Optional[SettingsOverride]:
        """Present the settings dialog. None means the user cancelled."""

    async def show_open_file_dialog(self, options: OpenFileOptions) -> Optional[Sequence[str]]:
        """Present a file picker and return the selected paths."""

    async def show_message_dialog(self, title: str, message: str) -> None:
        """Present a message for acknowledgement."""


class ReplacementPathProvider(Protocol):
    """Strategy the settings dialog uses to obtain a replacement image path."""

    async def choose_path(self) -> Optional[str]:
        ...


class OpenFileDialogPathProvider:
    """Ask the host's open-file dialog for a single image."""

    def __init__(self, funcs: HostFunctions, options: Optional[OpenFileOptions] = None):
        self.funcs = funcs
        self.options = options or OpenFileOptions()

    async def choose_path(self) -> Optional[str]:
        files = await self.funcs.show_open_file_dialog(self.options)
        if not files:
            return None
        return files[0]


@dataclass
class EditTextureRequest:
    """What the settings dialog needs to collect one override for a batch."""

    workspace: Workspace
    selection: List[AssetHandle]
    path_provider: ReplacementPathProvider
    extensions: List[str] = field(default_factory=list)


class EditTextureOption:
    """Plugin option that edits Texture2D settings for a selection."""

    name = "Edit Texture2D"
    description = "Edits Texture2D settings"
    mode = EDIT_MODE

    def __init__(self, config: Optional[EditorConfig] = None,
                 codec: Optional[PixelCodec] = None):
        self.config = config or EditorConfig()
        self.codec = codec
        self.last_report: Optional[BatchReport] = None

    def supports_selection(self, workspace: Workspace, mode: PluginMode,
                           selection: Sequence[AssetHandle]) -> bool:
        return supports_selection(mode, selection, type_id=self.config.texture_class_id)

    async def execute(self, workspace: Workspace, funcs: HostFunctions,
                      mode: PluginMode, selection: Sequence[AssetHandle]) -> bool:
        """Collect one override, edit every selected texture, report errors.

        Returns False only when the settings dialog is cancelled; per-asset
        failures are shown to the user but do not change the result.
        """
        assets = list(selection)
        options = OpenFileOptions(file_types=image_file_types(self.config.image_extensions))
        request = EditTextureRequest(
            workspace=workspace,
            selection=assets,
            path_provider=OpenFileDialogPathProvider(funcs, options),
            extensions=list(self.config.image_extensions),
        )
        override = await funcs.show_dialog(request)
        if override is None:
            logger.info("Texture edit cancelled; no assets modified.")
            return False

        errors = ErrorAggregator(self.config.max_error_lines)
        pipeline = TextureEditPipeline(workspace, config=self.config, codec=self.codec)
        self.last_report = pipeline.run(assets, override, errors)

        summary = errors.summary()
        if summary is not None:
            await funcs.show_message_dialog("Error", summary)
        return True
