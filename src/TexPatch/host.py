"""Non-interactive host functions for running the plugin from a terminal."""

import dataclasses
import logging
from typing import List, Optional, Sequence, Tuple

from .core import SettingsOverride
from .plugin import EditTextureRequest, OpenFileOptions

logger = logging.getLogger("texpatch")


class ConsoleHostFunctions:
    """Answer host dialogs from values supplied up front.

    The settings dialog returns ``override`` (None when it is empty and no
    image is offered, which behaves like a cancel). When ``picked_files`` is
    given, the dialog fetches the replacement image through the request's
    path provider, just like a GUI browse button would.
    """

    def __init__(self, override: Optional[SettingsOverride],
                 picked_files: Sequence[str] = ()):
        self.override = override
        self.picked_files = list(picked_files)
        self.messages: List[Tuple[str, str]] = []

    async def show_dialog(self, request: EditTextureRequest) -> Optional[SettingsOverride]:
        override = self.override or SettingsOverride()
        if self.picked_files:
            path = await request.path_provider.choose_path()
            if path:
                override = dataclasses.replace(override, new_image_path=path)
        if override.is_empty():
            logger.info("No settings to change for %d asset(s).", len(request.selection))
            return None
        return override

    async def show_open_file_dialog(self, options: OpenFileOptions) -> Optional[Sequence[str]]:
        logger.debug("Open-file dialog '%s' answered with %s", options.title, self.picked_files)
        if not self.picked_files:
            return None
        if options.allow_multiple:
            return list(self.picked_files)
        return self.picked_files[:1]

    async def show_message_dialog(self, title: str, message: str) -> None:
        self.messages.append((title, message))
        logger.error("%s:\n%s", title, message)
        print(f"{title}:\n{message}")
