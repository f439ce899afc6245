"""Applies a ``TransformedOutput`` to the project on disk."""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List

from .logging import format_operation, get_logger
from .models import FileMove, TransformedOutput
from .package_json import transform_gitignore, transform_manifest, transform_tsconfig

PACKAGE_JSON = "package.json"
TSCONFIG_JSON = "tsconfig.json"
GITIGNORE = ".gitignore"


@dataclass
class MaterializationSummary:
    """Paths touched by a materialization run and the operations that failed."""

    created: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    moved: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Materializer:
    """Moves, deletes, writes and patches files in a fixed order.

    Deletions run before writes so a new file whose name differs only by case
    from a superseded one is not removed on case-insensitive filesystems. Each
    operation is independent: a failure is logged and recorded, and the run
    continues with the next operation.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.logger = get_logger("materializer")

    def plan(self, output: TransformedOutput) -> List[str]:
        """Describe what ``apply`` would do, one ``format_operation`` line per step."""
        lines: List[str] = []
        for move in (*output.files_to_move, *output.directories_to_move):
            if (self.root / move.source).exists():
                lines.append(format_operation("move", move.source, move.target))
        for path in output.files_to_delete:
            if (self.root / path).exists():
                lines.append(format_operation("delete", path))
        for path in self._written_paths(output):
            operation = "update" if (self.root / path).exists() else "create"
            lines.append(format_operation(operation, path))
        for path in self._patched_paths(output):
            lines.append(format_operation("update", path))
        return lines

    def apply(self, output: TransformedOutput) -> MaterializationSummary:
        summary = MaterializationSummary()
        for move in output.files_to_move:
            self._run(summary, f"move {move.source}", lambda move=move: self._move_file(move, summary))
        for move in output.directories_to_move:
            self._run(summary, f"move {move.source}", lambda move=move: self._move_directory(move, summary))
        for path in output.files_to_delete:
            self._run(summary, f"delete {path}", lambda path=path: self._delete(path, summary))
        for route in output.routes:
            self._run(
                summary,
                f"write {route.target_path}",
                lambda route=route: self._write(route.target_path, route.content, summary),
            )
        for config in output.configs:
            self._run(
                summary,
                f"write {config.path}",
                lambda config=config: self._write(config.path, config.content, summary),
            )
        self._run(summary, f"update {PACKAGE_JSON}", lambda: self._patch_manifest(output, summary))
        if TSCONFIG_JSON not in {config.path for config in output.configs}:
            self._run(
                summary,
                f"update {TSCONFIG_JSON}",
                lambda: self._patch_tsconfig(bool(output.directories_to_move), summary),
            )
        self._run(summary, f"update {GITIGNORE}", lambda: self._patch_gitignore(summary))
        return summary

    def _run(self, summary: MaterializationSummary, label: str, operation: Callable[[], None]) -> None:
        try:
            operation()
        except (OSError, ValueError) as exc:
            message = f"Failed to {label}: {exc}"
            self.logger.error(message)
            summary.failures.append(message)

    def _written_paths(self, output: TransformedOutput) -> List[str]:
        return [route.target_path for route in output.routes] + [config.path for config in output.configs]

    def _patched_paths(self, output: TransformedOutput) -> List[str]:
        generated = {config.path for config in output.configs}
        paths = [PACKAGE_JSON]
        if TSCONFIG_JSON not in generated and (self.root / TSCONFIG_JSON).exists():
            paths.append(TSCONFIG_JSON)
        if (self.root / GITIGNORE).exists():
            paths.append(GITIGNORE)
        return paths

    def _move_file(self, move: FileMove, summary: MaterializationSummary) -> None:
        source = self.root / move.source
        if not source.exists():
            self.logger.debug("Nothing to move at %s", move.source)
            return
        target = self.root / move.target
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))
        summary.moved.append(f"{move.source} → {move.target}")
        self.logger.info(format_operation("move", move.source, move.target))

    def _move_directory(self, move: FileMove, summary: MaterializationSummary) -> None:
        source = self.root / move.source
        if not source.is_dir():
            self.logger.debug("Nothing to move at %s", move.source)
            return
        target = self.root / move.target
        if target.exists():
            shutil.copytree(source, target, dirs_exist_ok=True)
            shutil.rmtree(source)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        summary.moved.append(f"{move.source} → {move.target}")
        self.logger.info(format_operation("move", move.source, move.target))

    def _delete(self, path: str, summary: MaterializationSummary) -> None:
        target = self.root / path
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()
        else:
            return
        summary.deleted.append(path)
        self.logger.info(format_operation("delete", path))
        self._prune_empty(target.parent)

    def _prune_empty(self, directory: Path) -> None:
        while directory != self.root and directory.is_dir() and not any(directory.iterdir()):
            directory.rmdir()
            directory = directory.parent

    def _write(self, path: str, content: str, summary: MaterializationSummary) -> None:
        target = self.root / path
        existed = target.exists()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        (summary.modified if existed else summary.created).append(path)
        self.logger.info(format_operation("update" if existed else "create", path))

    def _read_json(self, path: Path) -> Dict[str, Any]:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} does not contain a JSON object")
        return data

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    def _patch_manifest(self, output: TransformedOutput, summary: MaterializationSummary) -> None:
        path = self.root / PACKAGE_JSON
        manifest = self._read_json(path)
        self._write_json(path, transform_manifest(manifest, output))
        summary.modified.append(PACKAGE_JSON)
        self.logger.info(format_operation("update", PACKAGE_JSON))

    def _patch_tsconfig(self, moved_to_src: bool, summary: MaterializationSummary) -> None:
        path = self.root / TSCONFIG_JSON
        if not path.exists():
            return
        self._write_json(path, transform_tsconfig(self._read_json(path), moved_to_src))
        summary.modified.append(TSCONFIG_JSON)
        self.logger.info(format_operation("update", TSCONFIG_JSON))

    def _patch_gitignore(self, summary: MaterializationSummary) -> None:
        path = self.root / GITIGNORE
        if not path.exists():
            return
        path.write_text(transform_gitignore(path.read_text(encoding="utf-8")), encoding="utf-8")
        summary.modified.append(GITIGNORE)
        self.logger.info(format_operation("update", GITIGNORE))


__all__ = ["MaterializationSummary", "Materializer"]
