"""Workspace contract and a directory-backed implementation.

A ``DirectoryWorkspace`` holds ``*.assets.json`` container files::

    {"assets": [{"path_id": 1, "type_id": 28, "fields": {...}}, ...]}

Pixel bytes inside ``fields`` are base64 text under ``"image data"``.
External stream files (``.resS``) sit next to their container.
"""

import copy
import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple

from .records import AssetHandle

logger = logging.getLogger("texpatch.workspace")

CONTAINER_SUFFIX = ".assets.json"


class WorkspaceError(RuntimeError):
    """Raised when a container cannot be loaded or persisted."""


class Workspace(Protocol):
    """Storage collaborator used by the edit pipeline."""

    def read_fields(self, asset: AssetHandle) -> Optional[dict]:
        """Return an editable copy of the asset's field tree, or None if unreadable."""

    def update_asset(self, asset: AssetHandle, fields: dict) -> None:
        """Persist ``fields`` for ``asset`` and refresh derived row state."""


@dataclass(frozen=True)
class AssetRow:
    """Derived index entry shown in asset listings."""

    name: str
    type_id: int
    size: int


class DirectoryWorkspace:
    """Workspace stored as JSON container files under one directory."""

    def __init__(self, root: str):
        if not os.path.isdir(root):
            raise WorkspaceError(f"Workspace directory not found: {root}")
        self.root = root
        self._containers: Dict[str, dict] = {}
        self.rows: Dict[Tuple[str, int], AssetRow] = {}
        self._lock = threading.Lock()

    # ------------------------------------------
    # Container I/O
    # ------------------------------------------

    def container_paths(self) -> List[str]:
        """Return container files under the root, sorted by name."""
        return sorted(
            str(p) for p in Path(self.root).iterdir()
            if p.is_file() and p.name.endswith(CONTAINER_SUFFIX)
        )

    def _load(self, container_path: str) -> dict:
        key = os.path.abspath(container_path)
        cached = self._containers.get(key)
        if cached is not None:
            return cached
        try:
            with open(key, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:  # includes JSONDecodeError and UnicodeDecodeError
            raise WorkspaceError(f"Failed to load container '{container_path}': {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
            raise WorkspaceError(
                f"Container '{container_path}' must be a mapping with an 'assets' list"
            )
        self._containers[key] = data
        return data

    def _save(self, container_path: str, data: dict) -> None:
        path = os.path.abspath(container_path)
        tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            raise WorkspaceError(f"Failed to write container '{container_path}': {exc}") from exc
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    @staticmethod
    def _find_entry(data: dict, path_id: int) -> Optional[dict]:
        for entry in data["assets"]:
            if isinstance(entry, dict) and entry.get("path_id") == path_id:
                return entry
        return None

    # ------------------------------------------
    # Listing
    # ------------------------------------------

    def assets(self) -> List[AssetHandle]:
        """List every asset in every readable container, refreshing rows."""
        handles = []
        for container_path in self.container_paths():
            try:
                data = self._load(container_path)
            except WorkspaceError as exc:
                logger.warning("Skipping container: %s", exc)
                continue
            for entry in data["assets"]:
                if not isinstance(entry, dict) or "path_id" not in entry:
                    logger.warning("Skipping malformed entry in %s", container_path)
                    continue
                try:
                    handle = AssetHandle(
                        container_path=container_path,
                        path_id=int(entry["path_id"]),
                        type_id=int(entry.get("type_id", -1)),
                    )
                except (TypeError, ValueError):
                    logger.warning("Skipping entry with non-numeric ids in %s: path_id=%r",
                                   container_path, entry.get("path_id"))
                    continue
                self._refresh_row(handle, entry.get("fields"))
                handles.append(handle)
        logger.debug("Workspace %s lists %d asset(s)", self.root, len(handles))
        return handles

    def find(self, selector: str) -> AssetHandle:
        """Resolve a ``<container file>/<path id>`` selector to a handle."""
        for handle in self.assets():
            if handle.display_name == selector:
                return handle
        raise KeyError(f"No asset matches '{selector}'")

    # ------------------------------------------
    # Workspace contract
    # ------------------------------------------

    def read_fields(self, asset: AssetHandle) -> Optional[dict]:
        with self._lock:
            try:
                data = self._load(asset.container_path)
            except WorkspaceError as exc:
                logger.warning("Cannot read %s: %s", asset.display_name, exc)
                return None
            entry = self._find_entry(data, asset.path_id)
            if entry is None:
                logger.warning("Cannot read %s: no such path id", asset.display_name)
                return None
            fields = entry.get("fields")
            if not isinstance(fields, dict):
                logger.warning("Cannot read %s: field tree missing or not a mapping",
                               asset.display_name)
                return None
            return copy.deepcopy(fields)

    def update_asset(self, asset: AssetHandle, fields: dict) -> None:
        with self._lock:
            data = self._load(asset.container_path)
            entry = self._find_entry(data, asset.path_id)
            if entry is None:
                raise WorkspaceError(f"Asset {asset.display_name} no longer exists")
            previous = entry.get("fields")
            entry["fields"] = copy.deepcopy(fields)
            try:
                self._save(asset.container_path, data)
            except WorkspaceError:
                entry["fields"] = previous
                raise
            self._refresh_row(asset, entry["fields"])
        logger.debug("Persisted %s", asset.display_name)

    def _refresh_row(self, asset: AssetHandle, fields) -> None:
        name = ""
        if isinstance(fields, dict):
            name = str(fields.get("m_Name", ""))
        size = len(json.dumps(fields, sort_keys=True)) if fields is not None else 0
        self.rows[(os.path.abspath(asset.container_path), asset.path_id)] = AssetRow(
            name=name, type_id=asset.type_id, size=size,
        )
