"""Tests for the sparse settings override."""

import dataclasses
import os

import pytest

from TexPatch.core import (
    ColorSpace, FilterMode, SettingsOverride, TextureFormat, TextureRecord, WrapMode,
)
from conftest import make_texture_fields


def test_changes_contains_only_present_fields() -> None:
    override = SettingsOverride(name="a", is_readable=False, mip_bias=0.0)
    assert dict(override.changes()) == {"name": "a", "is_readable": False, "mip_bias": 0.0}


def test_changes_is_read_only() -> None:
    with pytest.raises(TypeError):
        SettingsOverride(name="a").changes()["name"] = "b"


def test_override_is_frozen() -> None:
    override = SettingsOverride(name="a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        override.name = "b"


def test_empty_override() -> None:
    assert SettingsOverride().is_empty()
    assert not SettingsOverride(new_image_path="x.png").is_empty()


def test_from_mapping_coerces_names_and_codes() -> None:
    override = SettingsOverride.from_mapping({
        "texture_format": "rgb24",
        "filter_mode": 2,
        "wrap_u": "Clamp",
        "wrap_v": "3",
        "color_space": "linear",
        "is_readable": "yes",
        "aniso_level": 4.0,
        "mip_bias": "-1.25",
        "name": None,
    })
    assert override.texture_format is TextureFormat.RGB24
    assert override.filter_mode is FilterMode.Trilinear
    assert override.wrap_u is WrapMode.Clamp
    assert override.wrap_v is WrapMode.MirrorOnce
    assert override.color_space is ColorSpace.Linear
    assert override.is_readable is True
    assert override.aniso_level == 4
    assert override.mip_bias == -1.25
    assert override.name is None


@pytest.mark.parametrize("data", [
    {"texture_format": "bc99"},
    {"filter_mode": 7},
    {"is_readable": "maybe"},
    {"aniso_level": 1.5},
    {"unknown_field": 1},
])
def test_from_mapping_rejects_invalid_values(data) -> None:
    with pytest.raises(ValueError):
        SettingsOverride.from_mapping(data)


def test_apply_to_sets_every_present_attribute() -> None:
    record = TextureRecord.from_fields(make_texture_fields())
    override = SettingsOverride(
        name="new", texture_format=TextureFormat.R8, is_readable=True,
        filter_mode=FilterMode.Point, aniso_level=9, mip_bias=-0.5,
        wrap_u=WrapMode.Mirror, wrap_v=WrapMode.Clamp, lightmap_format=6,
        color_space=ColorSpace.Gamma, new_image_path="ignored.png",
    )
    applied = override.apply_to(record)

    assert "new_image_path" not in applied
    assert len(applied) == 10
    assert record.name == "new"
    assert record.texture_format == int(TextureFormat.R8)
    assert record.is_readable is True
    assert record.settings.filter_mode == 0
    assert record.settings.aniso == 9
    assert record.settings.mip_bias == -0.5
    assert record.settings.wrap_u == 2
    assert record.settings.wrap_v == 1
    assert record.lightmap_format == 6
    assert record.color_space == 0


def test_apply_to_leaves_absent_fields() -> None:
    record = TextureRecord.from_fields(make_texture_fields(name="keep"))
    before = dataclasses.asdict(record)
    SettingsOverride(aniso_level=2).apply_to(record)
    after = dataclasses.asdict(record)
    before["settings"]["aniso"] = 2
    assert after == before


def test_from_yaml(tmp_dir) -> None:
    path = os.path.join(tmp_dir, "overrides.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write("name: hero\ntexture_format: ARGB32\nis_readable: false\n")
    override = SettingsOverride.from_yaml(path)
    assert override == SettingsOverride(
        name="hero", texture_format=TextureFormat.ARGB32, is_readable=False,
    )


def test_from_yaml_rejects_non_mapping(tmp_dir) -> None:
    path = os.path.join(tmp_dir, "overrides.yaml")
    with open(path, "w", encoding="utf-8") as f:
        f.write("- a\n- b\n")
    with pytest.raises(ValueError):
        SettingsOverride.from_yaml(path)
