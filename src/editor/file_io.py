import json
import os
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import pygame

from src.core import config
from src.core.map_document import grid_from_document, grid_to_document, load_map_document
from src.mapgrid.errors import InvalidDocument
from src.mapgrid.grid import Grid


def map_filename(name: str) -> str:
    """Download filename for a map: every non-alphanumeric becomes ``_``, lowercased."""
    slug = re.sub(r"[^a-z0-9]", "_", name or config.DEFAULT_SAVE_NAME, flags=re.IGNORECASE).lower()
    return f"{slug}.json"


class FileIOManager:
    """Named saved-map store plus JSON download/upload and PNG export.

    The store is one JSON object on disk mapping a map name to its document
    (``map``, ``theme``, ``tileSize``, ``timestamp``). Saving under an
    existing name replaces the earlier entry.
    """

    def __init__(self, store_path: Optional[str] = None, export_dir: Optional[str] = None):
        self.store_path = store_path or config.SAVED_MAPS_PATH
        self.export_dir = export_dir or config.EXPORT_DIR

    # Saved-map store ------------------------------------------------------
    def _read_store(self) -> Dict[str, Dict[str, Any]]:
        if not os.path.exists(self.store_path):
            return {}
        try:
            with open(self.store_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error reading saved maps {self.store_path}: {e}")
            return {}
        if not isinstance(data, dict):
            print(f"Ignoring saved maps file {self.store_path}: expected an object.")
            return {}
        return data

    def _write_store(self, store: Dict[str, Dict[str, Any]]) -> bool:
        try:
            directory = os.path.dirname(self.store_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.store_path, "w", encoding="utf-8") as f:
                json.dump(store, f, indent=2)
        except OSError as e:
            print(f"Error writing saved maps {self.store_path}: {e}")
            return False
        return True

    def save_map(self, name: str, grid: Grid) -> Optional[str]:
        """Store ``grid`` under ``name``. Returns the stored name on success."""
        name = (name or "").strip()
        if not name:
            return None
        store = self._read_store()
        document = grid_to_document(grid)
        document["timestamp"] = datetime.now().isoformat(timespec="seconds")
        store[name] = document
        if not self._write_store(store):
            return None
        print(f"Saved map '{name}'.")
        return name

    def list_saved_maps(self) -> List[Dict[str, Any]]:
        """Saved maps as ``{"name", "timestamp"}`` entries, newest first."""
        entries = [
            {"name": name, "timestamp": document.get("timestamp", "")}
            for name, document in self._read_store().items()
            if isinstance(document, dict)
        ]
        entries.sort(key=lambda entry: entry["timestamp"] or "", reverse=True)
        return entries

    def load_saved_map(self, name: str) -> Optional[Grid]:
        document = self._read_store().get(name)
        if document is None:
            print(f"No saved map named '{name}'.")
            return None
        try:
            return grid_from_document(document, source=f"saved map '{name}'")
        except InvalidDocument as e:
            print(f"Error loading saved map '{name}': {e}")
            return None

    def delete_saved_map(self, name: str) -> bool:
        store = self._read_store()
        if name not in store:
            return False
        del store[name]
        return self._write_store(store)

    # Files ----------------------------------------------------------------
    def download_map(self, grid: Grid, name: str, directory: Optional[str] = None) -> Optional[str]:
        """Write the map document as ``<slug>.json``. Returns the full path on success."""
        target_dir = directory or self.export_dir
        full_path = os.path.join(target_dir, map_filename(name))
        try:
            os.makedirs(target_dir, exist_ok=True)
            with open(full_path, "w", encoding="utf-8") as f:
                json.dump(grid_to_document(grid), f, indent=2)
        except OSError as e:
            print(f"Error saving map {full_path}: {e}")
            return None
        return full_path

    def read_map_file(self, path: str) -> Grid:
        """Load a map document from disk; raises InvalidDocument when it is malformed."""
        try:
            return load_map_document(path)
        except OSError as e:
            raise InvalidDocument(f"Could not read {path}: {e}") from e

    def export_png(self, surface: pygame.Surface, name: str, directory: Optional[str] = None) -> Optional[str]:
        """Save a rendered map surface as ``<slug>.png``. Returns the full path on success."""
        target_dir = directory or self.export_dir
        filename = map_filename(name)[: -len(".json")] + ".png"
        full_path = os.path.join(target_dir, filename)
        try:
            os.makedirs(target_dir, exist_ok=True)
            pygame.image.save(surface, full_path)
        except (pygame.error, OSError) as e:
            print(f"Error exporting map image {full_path}: {e}")
            return None
        return full_path
