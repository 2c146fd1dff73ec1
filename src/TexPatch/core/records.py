"""Texture record dataclasses and field-tree conversion."""

import base64
import binascii
from dataclasses import dataclass, field
from pathlib import PurePosixPath, PureWindowsPath


class RecordFormatError(ValueError):
    """Raised when a field tree cannot be interpreted as a texture record."""


@dataclass(frozen=True)
class AssetHandle:
    """Transient reference to one asset inside a workspace container."""

    container_path: str
    path_id: int
    type_id: int

    @property
    def display_name(self) -> str:
        """Return the `<container file>/<path id>` identity used in reports."""
        container = PureWindowsPath(PurePosixPath(self.container_path).name).name
        return f"{container}/{self.path_id}"


@dataclass
class TextureSettings:
    """Sampling settings block of a texture record."""

    filter_mode: int = 1
    aniso: int = 1
    mip_bias: float = 0.0
    wrap_u: int = 0
    wrap_v: int = 0


@dataclass
class StreamInfo:
    """Location of pixel bytes stored outside the record."""

    offset: int = 0
    size: int = 0
    path: str = ""

    @property
    def is_external(self) -> bool:
        return bool(self.path) and self.size > 0


@dataclass
class TextureRecord:
    """Structured view of a texture record's metadata and pixel payload."""

    name: str
    width: int
    height: int
    texture_format: int
    mip_count: int = 1
    mip_map: bool = False
    is_readable: bool = False
    lightmap_format: int = 0
    color_space: int = 1
    complete_image_size: int = 0
    settings: TextureSettings = field(default_factory=TextureSettings)
    image_data: bytes = b""
    stream: StreamInfo = field(default_factory=StreamInfo)
    pixels_changed: bool = field(default=False, compare=False)

    @classmethod
    def from_fields(cls, fields: dict) -> "TextureRecord":
        """Interpret a raw field tree. Raises RecordFormatError when malformed."""
        if not isinstance(fields, dict):
            raise RecordFormatError(
                f"texture field tree must be a mapping, got {type(fields).__name__}"
            )
        missing = [k for k in ("m_Name", "m_Width", "m_Height", "m_TextureFormat")
                   if k not in fields]
        if missing:
            raise RecordFormatError(f"missing required fields: {', '.join(missing)}")

        try:
            settings_tree = fields.get("m_TextureSettings") or {}
            stream_tree = fields.get("m_StreamData") or {}
            return cls(
                name=str(fields["m_Name"]),
                width=int(fields["m_Width"]),
                height=int(fields["m_Height"]),
                texture_format=int(fields["m_TextureFormat"]),
                mip_count=int(fields.get("m_MipCount", 1)),
                mip_map=bool(fields.get("m_MipMap", False)),
                is_readable=bool(fields.get("m_IsReadable", False)),
                lightmap_format=int(fields.get("m_LightmapFormat", 0)),
                color_space=int(fields.get("m_ColorSpace", 1)),
                complete_image_size=int(fields.get("m_CompleteImageSize", 0)),
                settings=TextureSettings(
                    filter_mode=int(settings_tree.get("m_FilterMode", 1)),
                    aniso=int(settings_tree.get("m_Aniso", 1)),
                    mip_bias=float(settings_tree.get("m_MipBias", 0.0)),
                    wrap_u=int(settings_tree.get("m_WrapU", 0)),
                    wrap_v=int(settings_tree.get("m_WrapV", 0)),
                ),
                image_data=_decode_bytes(fields.get("image data", "")),
                stream=StreamInfo(
                    offset=int(stream_tree.get("offset", 0)),
                    size=int(stream_tree.get("size", 0)),
                    path=str(stream_tree.get("path", "")),
                ),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise RecordFormatError(f"invalid texture field value: {exc}") from exc

    def write_to(self, fields: dict) -> dict:
        """Serialize the record back into ``fields`` in place and return it.

        Optional fields are only written when the tree already carries them,
        so record versions without e.g. ``m_MipMap`` keep their shape. The
        stored ``image data`` value is only replaced after ``set_encoded``.
        """
        fields["m_Name"] = self.name
        fields["m_Width"] = self.width
        fields["m_Height"] = self.height
        fields["m_TextureFormat"] = self.texture_format
        optional = {
            "m_MipCount": self.mip_count,
            "m_MipMap": self.mip_map,
            "m_IsReadable": self.is_readable,
            "m_LightmapFormat": self.lightmap_format,
            "m_ColorSpace": self.color_space,
            "m_CompleteImageSize": self.complete_image_size,
        }
        for key, value in optional.items():
            if key in fields:
                fields[key] = value

        settings_tree = fields.setdefault("m_TextureSettings", {})
        settings_tree["m_FilterMode"] = self.settings.filter_mode
        settings_tree["m_Aniso"] = self.settings.aniso
        settings_tree["m_MipBias"] = self.settings.mip_bias
        settings_tree["m_WrapU"] = self.settings.wrap_u
        settings_tree["m_WrapV"] = self.settings.wrap_v

        if self.pixels_changed or ("image data" not in fields and self.image_data):
            fields["image data"] = base64.b64encode(self.image_data).decode("ascii")
        if "m_StreamData" in fields or self.stream.path:
            fields["m_StreamData"] = {
                "offset": self.stream.offset,
                "size": self.stream.size,
                "path": self.stream.path,
            }
        return fields

    def set_encoded(self, data: bytes, width: int, height: int) -> None:
        """Replace pixel payload with inline ``data`` of the given size."""
        self.image_data = bytes(data)
        self.width = int(width)
        self.height = int(height)
        self.complete_image_size = len(self.image_data)
        self.stream = StreamInfo()
        self.pixels_changed = True


def _decode_bytes(value) -> bytes:
    if value is None or value == "":
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, list):
        return bytes(value)
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise RecordFormatError(f"'image data' is not valid base64: {exc}") from exc
