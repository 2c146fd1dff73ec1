"""Shared test fixtures."""

import base64
import json
import os
import shutil
import tempfile

import numpy as np
import pytest
from PIL import Image

from TexPatch.config import EditorConfig
from TexPatch.core import TEXTURE2D_CLASS_ID, AssetHandle, TextureFormat


def sample_pixels(width=4, height=4, bpp=4) -> bytes:
    """Deterministic pixel bytes for a width x height image."""
    return bytes((i * 7 + 3) % 256 for i in range(width * height * bpp))


def make_texture_fields(name="brick_diff", width=4, height=4,
                        fmt=TextureFormat.RGBA32, data=None, stream=None) -> dict:
    """Build a Texture2D field tree with three mips and inline pixel data."""
    if data is None:
        data = sample_pixels(width, height, 4) if stream is None else b""
    fields = {
        "m_Name": name,
        "m_ForcedFallbackFormat": 4,
        "m_Width": width,
        "m_Height": height,
        "m_CompleteImageSize": len(data),
        "m_TextureFormat": int(fmt),
        "m_MipCount": 3,
        "m_MipMap": True,
        "m_IsReadable": False,
        "m_TextureSettings": {
            "m_FilterMode": 1,
            "m_Aniso": 1,
            "m_MipBias": 0.0,
            "m_WrapU": 0,
            "m_WrapV": 0,
        },
        "m_LightmapFormat": 0,
        "m_ColorSpace": 1,
        "image data": base64.b64encode(data).decode("ascii"),
    }
    if stream is not None:
        fields["m_StreamData"] = dict(stream)
    return fields


def write_container(root, container_name, entries) -> str:
    """Write ``entries`` (path_id, type_id, fields) as a workspace container."""
    path = os.path.join(root, container_name)
    payload = {
        "assets": [
            {"path_id": path_id, "type_id": type_id, "fields": fields}
            for path_id, type_id, fields in entries
        ]
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    return path


def load_entry(container_path, path_id) -> dict:
    """Return one asset entry as currently stored on disk."""
    with open(container_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    for entry in data["assets"]:
        if entry["path_id"] == path_id:
            return entry
    raise KeyError(path_id)


def stored_pixels(container_path, path_id) -> bytes:
    return base64.b64decode(load_entry(container_path, path_id)["fields"]["image data"])


def save_test_png(path, width=8, height=4):
    """Write an RGBA PNG whose top row is red and the rest blue."""
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[..., 2] = 255
    arr[0, :, :] = (255, 0, 0, 255)
    Image.fromarray(arr, "RGBA").save(path)
    return arr


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def default_config():
    config = EditorConfig()
    config.show_progress = False
    return config


@pytest.fixture
def texture_handle():
    def _handle(container_path, path_id, type_id=TEXTURE2D_CLASS_ID):
        return AssetHandle(container_path=container_path, path_id=path_id, type_id=type_id)
    return _handle
