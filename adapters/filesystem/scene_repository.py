from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import SceneDocument
from domain.ports.repositories import SceneRepository


class FileSystemSceneRepository(SceneRepository):
    def load(self, path: Path) -> SceneDocument:
        return SceneDocument.model_validate(load_json(path))

    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, SceneDocument]]:
        return [(path, self.load(path)) for path in sorted(self._iter_paths(directory))]

    def save(self, document: SceneDocument, path: Path) -> None:
        payload = document.model_dump(mode="json", by_alias=True, exclude_unset=True)
        self.save_payload(payload, path)

    def save_payload(self, payload: Mapping[str, Any], path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, dict(payload))

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")
