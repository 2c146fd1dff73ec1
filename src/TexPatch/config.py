"""Define the typed configuration model for the texture editor.

Use `EditorConfig` to load, validate, and persist runtime settings.
"""

import dataclasses
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import List

import yaml

from .core.formats import TEXTURE2D_CLASS_ID

logger = logging.getLogger("texpatch.config")

_SUPPORTED_CONFIG_VERSION = 1


@dataclass
class EditorConfig:
    """Runtime settings for batch texture editing."""

    config_version: int = 1
    log_level: str = "INFO"
    log_file: str = ""
    max_error_lines: int = 20
    # Fixed quality passed to the encoder on re-encode.
    reencode_quality: int = 3
    image_extensions: List[str] = field(default_factory=lambda: [
        ".png", ".bmp", ".jpg", ".jpeg", ".tga"
    ])
    max_image_pixels: int = 67108864  # 8192x8192
    show_progress: bool = True
    texture_class_id: int = TEXTURE2D_CLASS_ID

    @classmethod
    def from_yaml(cls, path: str) -> "EditorConfig":
        """Load editor configuration from YAML or return defaults."""
        if not os.path.exists(path):
            logger.info("Config file '%s' not found. Using defaults.", path)
            config = cls()
            config.validate()
            return config
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(
                f"Failed to parse YAML config '{path}': {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Config file '{path}' must contain a YAML mapping, "
                f"got {type(data).__name__}"
            )
        yaml_version = data.get("config_version", 1)
        if isinstance(yaml_version, int) and yaml_version > _SUPPORTED_CONFIG_VERSION:
            logger.warning(
                "Config file '%s' has config_version=%d, but this build only "
                "supports up to version %d. Some settings may be ignored.",
                path, yaml_version, _SUPPORTED_CONFIG_VERSION,
            )
        config = cls()
        _merge_dict_to_dataclass(config, data)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
        return config

    def to_yaml(self, path: str):
        """Write editor configuration to a YAML file."""
        data = dataclasses.asdict(self)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        ext = os.path.splitext(path)[1]
        tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}{ext}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def validate(self):
        """Validate configuration values. Raises ValueError on invalid config."""
        errors = []

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if str(self.log_level).upper() not in valid_levels:
            errors.append(
                f"log_level must be one of {sorted(valid_levels)}, got '{self.log_level}'"
            )
        if self.max_error_lines < 1:
            errors.append("max_error_lines must be >= 1")
        if not (0 <= self.reencode_quality <= 5):
            errors.append("reencode_quality must be in [0, 5]")
        if self.max_image_pixels < 0:
            errors.append("max_image_pixels must be >= 0 (0 = unlimited)")
        if self.texture_class_id < 0:
            errors.append("texture_class_id must be >= 0")
        if not self.image_extensions:
            errors.append("image_extensions must not be empty")
        for ext in self.image_extensions:
            if not isinstance(ext, str) or not ext.startswith("."):
                errors.append(f"image_extensions: '{ext}' must start with '.'")

        if errors:
            raise ValueError(
                "Configuration validation failed:\n" +
                "\n".join(f"  - {e}" for e in errors)
            )

        self.image_extensions = [ext.lower() for ext in self.image_extensions]


def _merge_dict_to_dataclass(obj, data: dict, _path: str = ""):
    for key, value in data.items():
        full_key = f"{_path}{key}"
        if not hasattr(obj, key):
            logger.warning("Unknown config key ignored: '%s'", full_key)
            continue
        field_val = getattr(obj, key)
        if dataclasses.is_dataclass(field_val) and isinstance(value, dict):
            _merge_dict_to_dataclass(field_val, value, f"{full_key}.")
            continue
        if value is None and field_val is not None:
            logger.warning(
                "Config key '%s' is null but field default is %s. Using default value.",
                full_key, type(field_val).__name__,
            )
            continue
        expected_type = type(field_val)
        # Allow int->float and exact-integer float->int promotion.
        if (field_val is not None
                and not isinstance(value, expected_type)
                and not (expected_type is float and isinstance(value, int))
                and not (expected_type is int
                         and isinstance(value, float)
                         and value == int(value))):
            logger.warning(
                "Config type mismatch for '%s': expected %s, got %s (%r). "
                "Using default value.",
                full_key, expected_type.__name__, type(value).__name__, value,
            )
            continue
        if expected_type is int and isinstance(value, float):
            value = int(value)
        setattr(obj, key, value)
