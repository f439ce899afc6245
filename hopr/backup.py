"""Pre-migration backups of project sources."""

from __future__ import annotations

import os
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List

from .logging import get_logger

DEFAULT_BACKUP_DIR = ".hopr-backup"

_BACKUP_SUFFIXES = {".ts", ".tsx", ".js", ".jsx", ".json", ".css", ".md"}
_HIDDEN_PREFIXES = (".env", ".config")
_SKIPPED_DIRS = {"node_modules", "dist", ".next"}


class BackupManager:
    """Copies source, config and style files into a timestamped backup folder."""

    def __init__(
        self,
        root: Path,
        directory: str = DEFAULT_BACKUP_DIR,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.root = Path(root)
        self.backup_dir = self.root / directory
        self._clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("backup")

    def create_backup(self) -> Path:
        """Copy eligible files and return the new backup folder."""
        timestamp = self._clock().isoformat().replace(":", "-").replace(".", "-")
        destination = self.backup_dir / timestamp
        destination.mkdir(parents=True, exist_ok=True)

        copied = 0
        for relative in self._iter_files():
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.root / relative, target)
            copied += 1
        self.logger.info("Backup of %d files created at %s", copied, destination)
        return destination

    def _iter_files(self) -> List[Path]:
        files: List[Path] = []
        backup_name = self.backup_dir.name
        for current, dirnames, filenames in os.walk(self.root):
            current_path = Path(current)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _SKIPPED_DIRS and name != backup_name and not name.startswith(".")
            )
            for filename in sorted(filenames):
                if filename.startswith("."):
                    if not filename.startswith(_HIDDEN_PREFIXES):
                        continue
                elif Path(filename).suffix not in _BACKUP_SUFFIXES:
                    continue
                files.append((current_path / filename).relative_to(self.root))
        return files

    def has_backups(self) -> bool:
        return self.backup_dir.is_dir() and any(self.backup_dir.iterdir())

    def list_backups(self) -> List[str]:
        if not self.backup_dir.is_dir():
            return []
        return sorted(entry.name for entry in self.backup_dir.iterdir() if entry.is_dir())

    def rollback_instructions(self) -> List[str]:
        return [
            "To roll back the migration:",
            "1. Delete the migrated project files",
            f"2. Restore from the backup at: {self.backup_dir}",
            "3. Reinstall dependencies with your package manager",
            "",
            "Or revert the changes with git if the project is a repository.",
        ]


__all__ = ["BackupManager", "DEFAULT_BACKUP_DIR"]
