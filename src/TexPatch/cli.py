"""Command-line interface for batch texture editing."""

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys

from .config import EditorConfig
from .core import (
    EDIT_MODE, ColorSpace, DirectoryWorkspace, FilterMode, SettingsOverride,
    TextureFormat, WorkspaceError, WrapMode, setup_logging,
)
from .host import ConsoleHostFunctions
from .plugin import EditTextureOption

logger = logging.getLogger("texpatch")

# CLI flag destination -> SettingsOverride field
_OVERRIDE_FLAGS = {
    "name": "name",
    "format": "texture_format",
    "readable": "is_readable",
    "filter_mode": "filter_mode",
    "aniso": "aniso_level",
    "mip_bias": "mip_bias",
    "wrap_u": "wrap_u",
    "wrap_v": "wrap_v",
    "lightmap_format": "lightmap_format",
    "color_space": "color_space",
}


def _names(enum_cls) -> str:
    return ", ".join(m.name for m in enum_cls)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texpatch",
        description="Batch-edit Texture2D settings in an asset workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  texpatch --workspace ./assets --list
  texpatch -w ./assets --format RGBA32 --filter-mode Point
  texpatch -w ./assets --select level0.assets.json/12 --image new.png
  texpatch -w ./assets --settings overrides.yaml
  texpatch --generate-config --config editor.yaml
        """
    )
    parser.add_argument("--workspace", "-w", help="Workspace directory")
    parser.add_argument("--select", "-s", action="append", default=[],
                        metavar="CONTAINER/PATH_ID",
                        help="Asset to edit (repeatable; default: all assets)")
    parser.add_argument("--list", action="store_true", help="List assets and exit")
    parser.add_argument("--config", "-c", help="Path to editor config YAML")
    parser.add_argument("--generate-config", action="store_true",
                        help="Generate default editor config YAML")
    parser.add_argument("--settings", help="YAML file with override fields")
    parser.add_argument("--report", help="Write the batch report as JSON")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    group = parser.add_argument_group("overrides")
    group.add_argument("--name")
    group.add_argument("--format", help=f"Texture format ({_names(TextureFormat)})")
    group.add_argument("--readable", action=argparse.BooleanOptionalAction, default=None)
    group.add_argument("--filter-mode", help=f"Filter mode ({_names(FilterMode)})")
    group.add_argument("--aniso", type=int, help="Anisotropic filtering level")
    group.add_argument("--mip-bias", type=float)
    group.add_argument("--wrap-u", help=f"Wrap mode U ({_names(WrapMode)})")
    group.add_argument("--wrap-v", help=f"Wrap mode V ({_names(WrapMode)})")
    group.add_argument("--lightmap-format", type=int)
    group.add_argument("--color-space", help=f"Color space ({_names(ColorSpace)})")
    group.add_argument("--image", "-i", help="Replacement image file")
    return parser


def build_override(args) -> SettingsOverride:
    """Merge the --settings file with individual flags (flags win)."""
    base = SettingsOverride.from_yaml(args.settings) if args.settings else SettingsOverride()
    flags = {
        field_name: getattr(args, dest)
        for dest, field_name in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }
    if not flags:
        return base
    return dataclasses.replace(base, **SettingsOverride.from_mapping(flags).changes())


def main():
    """Parse CLI arguments and run one texture edit batch."""
    parser = build_parser()
    args = parser.parse_args()

    if args.generate_config:
        dest = args.config or "texpatch.yaml"
        EditorConfig().to_yaml(dest)
        logger.info("Generated default %s", dest)
        print(f"Generated default {dest}")
        return

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.config:
        if not os.path.exists(args.config):
            logger.error("Config file not found: %s", args.config)
            print(f"Error: Config file not found: {args.config}")
            sys.exit(1)
        try:
            config = EditorConfig.from_yaml(args.config)
        except ValueError as e:
            logger.error("Invalid config file '%s': %s", args.config, e)
            print(f"Error: Invalid config: {e}")
            sys.exit(1)
    else:
        config = EditorConfig()
    if args.log_level:
        config.log_level = args.log_level
    setup_logging(config.log_level, config.log_file or None)

    if not args.workspace or not os.path.isdir(args.workspace):
        logger.error("Workspace directory invalid or not found: %s", args.workspace)
        print(f"Error: Workspace directory not found: {args.workspace}")
        sys.exit(1)
    workspace = DirectoryWorkspace(args.workspace)

    if args.list:
        for handle in workspace.assets():
            row = workspace.rows[(os.path.abspath(handle.container_path), handle.path_id)]
            print(f"{handle.display_name}\ttype={row.type_id}\t{row.name}")
        return

    try:
        selection = [workspace.find(sel) for sel in args.select] or workspace.assets()
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        sys.exit(1)

    try:
        override = build_override(args)
    except (OSError, ValueError) as e:
        logger.error("Invalid overrides: %s", e)
        print(f"Error: Invalid overrides: {e}")
        sys.exit(1)

    option = EditTextureOption(config)
    if not option.supports_selection(workspace, EDIT_MODE, selection):
        print("Error: selection contains non-texture assets")
        logger.error("Selection is not eligible for %s", option.name)
        sys.exit(2)

    funcs = ConsoleHostFunctions(override, picked_files=[args.image] if args.image else ())
    try:
        proceeded = asyncio.run(option.execute(workspace, funcs, EDIT_MODE, selection))
    except WorkspaceError as e:
        logger.error("Workspace error: %s", e)
        sys.exit(1)

    if not proceeded:
        print("Nothing to change.")
        return

    report = option.last_report
    if args.report and report is not None:
        os.makedirs(os.path.dirname(args.report) or ".", exist_ok=True)
        with open(args.report, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)
        logger.info("Report saved: %s", args.report)

    if report is not None and report.failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
