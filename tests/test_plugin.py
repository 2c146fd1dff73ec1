"""Tests for the Edit Texture2D plugin option and host wiring."""

import asyncio
import os

import pytest

from TexPatch.config import EditorConfig
from TexPatch.core import (
    DirectoryWorkspace, OutcomeKind, PluginMode, SettingsOverride, TextureFormat,
)
from TexPatch.host import ConsoleHostFunctions
from TexPatch.plugin import (
    ALL_FILES, IMAGE_FILE_TYPES, EditTextureOption, OpenFileDialogPathProvider,
    OpenFileOptions, image_file_types,
)
from conftest import load_entry, make_texture_fields, save_test_png, write_container


class FakeHost:
    """Scripted host dialogs."""

    def __init__(self, override=None, files=None):
        self.override = override
        self.files = files
        self.dialog_requests = []
        self.file_dialogs = []
        self.messages = []

    async def show_dialog(self, request):
        self.dialog_requests.append(request)
        return self.override

    async def show_open_file_dialog(self, options):
        self.file_dialogs.append(options)
        return self.files

    async def show_message_dialog(self, title, message):
        self.messages.append((title, message))


@pytest.fixture
def config():
    cfg = EditorConfig()
    cfg.show_progress = False
    return cfg


@pytest.fixture
def mixed_workspace(tmp_dir):
    container = write_container(tmp_dir, "level0.assets.json", [
        (1, 28, None),
        (2, 28, make_texture_fields("name_only")),
        (3, 28, make_texture_fields("convert_me", fmt=TextureFormat.BGRA32)),
    ])
    return container, DirectoryWorkspace(tmp_dir)


def test_descriptor(config) -> None:
    option = EditTextureOption(config)
    assert option.name == "Edit Texture2D"
    assert option.description == "Edits Texture2D settings"
    assert option.mode is PluginMode.EXPORT


def test_supports_selection_delegates(config, mixed_workspace) -> None:
    _, ws = mixed_workspace
    option = EditTextureOption(config)
    assets = ws.assets()
    assert option.supports_selection(ws, PluginMode.EXPORT, assets)
    assert not option.supports_selection(ws, PluginMode.IMPORT, assets)
    assert option.supports_selection(ws, PluginMode.EXPORT, [])


def test_cancel_returns_false_without_mutation(config, mixed_workspace) -> None:
    container, ws = mixed_workspace
    before = [load_entry(container, i) for i in (1, 2, 3)]
    host = FakeHost(override=None)
    option = EditTextureOption(config)

    proceeded = asyncio.run(option.execute(ws, host, PluginMode.EXPORT, ws.assets()))

    assert proceeded is False
    assert [load_entry(container, i) for i in (1, 2, 3)] == before
    assert host.messages == []
    assert option.last_report is None


def test_end_to_end_reports_single_error_line(config, mixed_workspace) -> None:
    container, ws = mixed_workspace
    host = FakeHost(override=SettingsOverride(name="edited", texture_format=TextureFormat.RGBA32))
    option = EditTextureOption(config)

    proceeded = asyncio.run(option.execute(ws, host, PluginMode.EXPORT, ws.assets()))

    assert proceeded is True
    report = option.last_report
    assert report.count(OutcomeKind.READ_FAILURE) == 1
    assert len(report.successes) == 2
    assert host.messages == [("Error", "[level0.assets.json/1]: failed to read")]
    assert load_entry(container, 3)["fields"]["m_TextureFormat"] == int(TextureFormat.RGBA32)
    assert load_entry(container, 3)["fields"]["m_MipCount"] == 1


def test_no_message_when_everything_succeeds(config, tmp_dir) -> None:
    write_container(tmp_dir, "ok.assets.json", [(1, 28, make_texture_fields())])
    ws = DirectoryWorkspace(tmp_dir)
    host = FakeHost(override=SettingsOverride(is_readable=True))

    proceeded = asyncio.run(EditTextureOption(config).execute(ws, host, PluginMode.EXPORT, ws.assets()))

    assert proceeded is True
    assert host.messages == []


def test_request_carries_selection_and_path_provider(config, mixed_workspace) -> None:
    _, ws = mixed_workspace
    host = FakeHost(override=None, files=["/tmp/a.png", "/tmp/b.png"])
    assets = ws.assets()
    asyncio.run(EditTextureOption(config).execute(ws, host, PluginMode.EXPORT, assets))

    request = host.dialog_requests[0]
    assert request.selection == assets
    assert request.workspace is ws
    assert asyncio.run(request.path_provider.choose_path()) == "/tmp/a.png"
    options = host.file_dialogs[0]
    assert options.allow_multiple is False
    assert options.file_types[0].patterns == ("*.png", "*.bmp", "*.jpg", "*.jpeg", "*.tga")
    assert options.file_types[-1] == ALL_FILES


def test_path_provider_returns_none_when_dialog_dismissed() -> None:
    provider = OpenFileDialogPathProvider(FakeHost(files=None))
    assert asyncio.run(provider.choose_path()) is None
    provider = OpenFileDialogPathProvider(FakeHost(files=[]))
    assert asyncio.run(provider.choose_path()) is None


def test_default_image_filters() -> None:
    assert OpenFileOptions().file_types == IMAGE_FILE_TYPES
    labels = [t.label for t in IMAGE_FILE_TYPES]
    assert labels == ["Image files", "PNG file", "BMP file", "JPG file", "TGA file", "All files"]
    built = image_file_types([".png", ".tga"])
    assert [t.label for t in built] == ["Image files", "PNG file", "TGA file", "All files"]


def test_console_host_picks_image_through_provider(config, tmp_dir) -> None:
    container = write_container(tmp_dir, "ok.assets.json", [(1, 28, make_texture_fields())])
    image = os.path.join(tmp_dir, "new.png")
    save_test_png(image, width=2, height=2)
    ws = DirectoryWorkspace(tmp_dir)
    host = ConsoleHostFunctions(SettingsOverride(name="swapped"), picked_files=[image])

    proceeded = asyncio.run(EditTextureOption(config).execute(ws, host, PluginMode.EXPORT, ws.assets()))

    assert proceeded is True
    fields = load_entry(container, 1)["fields"]
    assert fields["m_Name"] == "swapped"
    assert (fields["m_Width"], fields["m_Height"]) == (2, 2)
    assert host.messages == []


def test_console_host_empty_override_cancels(config, tmp_dir) -> None:
    write_container(tmp_dir, "ok.assets.json", [(1, 28, make_texture_fields())])
    ws = DirectoryWorkspace(tmp_dir)
    host = ConsoleHostFunctions(SettingsOverride())

    assert asyncio.run(EditTextureOption(config).execute(ws, host, PluginMode.EXPORT, ws.assets())) is False


def test_console_host_message_dialog(capsys) -> None:
    host = ConsoleHostFunctions(None)
    asyncio.run(host.show_message_dialog("Error", "[a/1]: failed to read"))
    assert host.messages == [("Error", "[a/1]: failed to read")]
    assert "failed to read" in capsys.readouterr().out
