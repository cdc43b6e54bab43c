from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from domain.models import SceneDocument


class SceneRepository(Protocol):
    def load(self, path: Path) -> SceneDocument: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, SceneDocument]]: ...

    def save(self, document: SceneDocument, path: Path) -> None: ...

    def save_payload(self, payload: Mapping[str, Any], path: Path) -> None: ...
