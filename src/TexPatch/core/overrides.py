"""Sparse, immutable settings patch applied to every texture in a batch."""

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from .formats import ColorSpace, FilterMode, TextureFormat, WrapMode, parse_enum
from .records import TextureRecord


@dataclass(frozen=True)
class SettingsOverride:
    """User-requested changes. ``None`` means "leave the current value"."""

    name: Optional[str] = None
    texture_format: Optional[TextureFormat] = None
    is_readable: Optional[bool] = None
    filter_mode: Optional[FilterMode] = None
    aniso_level: Optional[int] = None
    mip_bias: Optional[float] = None
    wrap_u: Optional[WrapMode] = None
    wrap_v: Optional[WrapMode] = None
    lightmap_format: Optional[int] = None
    color_space: Optional[ColorSpace] = None
    new_image_path: Optional[str] = None

    def changes(self) -> Mapping[str, Any]:
        """Return a read-only mapping of only the fields that are set."""
        return MappingProxyType({
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        })

    def is_empty(self) -> bool:
        return not self.changes()

    def apply_to(self, record: TextureRecord) -> list:
        """Assign every present attribute override to ``record``.

        ``new_image_path`` is not an attribute and is ignored here. Returns
        the names of the fields that were applied.
        """
        applied = []
        for key, value in self.changes().items():
            target = _ATTRIBUTE_PATHS.get(key)
            if target is None:
                continue
            path, cast = target
            set_dataclass_path(record, path, cast(value))
            applied.append(key)
        return applied

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SettingsOverride":
        """Build an override from loosely typed values (YAML, CLI, dialogs).

        Enum fields accept member names or integer codes. Unknown keys and
        invalid values raise ``ValueError``.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown override field(s): {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for key, raw in data.items():
            if raw is None:
                continue
            coerce = _COERCERS[key]
            try:
                values[key] = coerce(raw)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"invalid value for '{key}': {exc}") from exc
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str) -> "SettingsOverride":
        """Load an override mapping from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Failed to parse overrides '{path}': {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Overrides file '{path}' must contain a YAML mapping, "
                f"got {type(data).__name__}"
            )
        return cls.from_mapping(data)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in {"true", "1", "yes", "on"}:
        return True
    if lowered in {"false", "0", "no", "off"}:
        return False
    raise ValueError(f"invalid boolean: {value!r}")


def _parse_int(value) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid integer: {value!r}")
    if isinstance(value, float) and value != int(value):
        raise ValueError(f"invalid integer: {value!r}")
    return int(value)


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "name": str,
    "texture_format": lambda v: parse_enum(TextureFormat, v),
    "is_readable": _parse_bool,
    "filter_mode": lambda v: parse_enum(FilterMode, v),
    "aniso_level": _parse_int,
    "mip_bias": float,
    "wrap_u": lambda v: parse_enum(WrapMode, v),
    "wrap_v": lambda v: parse_enum(WrapMode, v),
    "lightmap_format": _parse_int,
    "color_space": lambda v: parse_enum(ColorSpace, v),
    "new_image_path": str,
}


# Override field -> (attribute path on TextureRecord, storage cast).
_ATTRIBUTE_PATHS: Dict[str, Tuple[Tuple[str, ...], Callable[[Any], Any]]] = {
    "name": (("name",), str),
    "texture_format": (("texture_format",), int),
    "is_readable": (("is_readable",), bool),
    "filter_mode": (("settings", "filter_mode"), int),
    "aniso_level": (("settings", "aniso"), int),
    "mip_bias": (("settings", "mip_bias"), float),
    "wrap_u": (("settings", "wrap_u"), int),
    "wrap_v": (("settings", "wrap_v"), int),
    "lightmap_format": (("lightmap_format",), int),
    "color_space": (("color_space",), int),
}


def set_dataclass_path(obj: Any, path: Sequence[str], value: Any) -> None:
    """Set nested dataclass attribute by path."""
    target = obj
    for key in path[:-1]:
        target = getattr(target, key)
    setattr(target, path[-1], value)
