# src/storage/snapshot_store.py

"""Handles saving snapshots to dated JSON files on disk."""

import json
import logging
from datetime import timezone
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.snapshot import Snapshot

logger = logging.getLogger("fuel_monitor.storage")


class SnapshotStore:
    """One pretty-printed JSON file per UTC day; later runs overwrite."""

    def __init__(self, output_dir: Path | None = None) -> None:
        self.output_dir: Path = output_dir or Settings.OUTPUT_DIR
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("SnapshotStore initialised, output_dir=%s", self.output_dir)

    def path_for(self, snapshot: Snapshot) -> Path:
        """``fuel-data-YYYY-MM-DD.json`` for the snapshot's UTC date."""
        day = snapshot.observed_at.astimezone(timezone.utc).date()
        return self.output_dir / f"fuel-data-{day.isoformat()}.json"

    def save(self, snapshot: Snapshot) -> Path:
        """Write *snapshot* to its dated file and return the path."""
        filepath = self.path_for(snapshot)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info(
            "Saved %d stations to %s",
            len(snapshot.records),
            filepath,
        )
        return filepath

    @staticmethod
    def load(filepath: Path) -> Snapshot:
        """Read a previously saved snapshot file."""
        with open(filepath, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
        return Snapshot.from_dict(data)
