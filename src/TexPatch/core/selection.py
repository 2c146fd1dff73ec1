"""Selection eligibility for the texture edit operation."""

import enum
from typing import Iterable

from .formats import TEXTURE2D_CLASS_ID
from .records import AssetHandle


class PluginMode(enum.Enum):
    """Host operation modes a plugin option can be offered under."""

    IMPORT = "import"
    EXPORT = "export"


# Attribute editing is offered through the host's export-like menu.
EDIT_MODE = PluginMode.EXPORT


def supports_selection(mode: PluginMode, selection: Iterable[AssetHandle],
                       type_id: int = TEXTURE2D_CLASS_ID) -> bool:
    """Return True when ``mode`` is the edit mode and every asset is a texture.

    An empty selection is eligible.
    """
    if mode != EDIT_MODE:
        return False
    return all(asset.type_id == type_id for asset in selection)
