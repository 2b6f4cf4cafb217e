"""Selection between the optimized and original copy of an uploaded model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

MODEL_CONTENT_TYPES = {
    ".glb": "model/gltf-binary",
    ".gltf": "model/gltf+json",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class SelectedFile:
    path: Path
    optimized: bool

    @property
    def content_type(self) -> str:
        return content_type_for(self.path.name)


def content_type_for(file_name: str) -> str:
    return MODEL_CONTENT_TYPES.get(Path(file_name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def is_safe_name(file_name: str) -> bool:
    """A single path segment with no traversal, separators or NUL bytes."""
    if not file_name or file_name in {".", ".."}:
        return False
    if ".." in file_name or "\0" in file_name:
        return False
    return "/" not in file_name and "\\" not in file_name


class VariantResolver:
    def __init__(self, upload_root: Path, optimized_root: Path, model_extensions: Iterable[str]):
        self.upload_root = upload_root
        self.optimized_root = optimized_root
        self.model_extensions = frozenset(ext.lower() for ext in model_extensions)

    def is_model(self, file_name: str) -> bool:
        return Path(file_name).suffix.lower() in self.model_extensions

    def optimized_path(self, file_name: str) -> Path:
        return self.optimized_root / file_name

    def original_path(self, file_name: str) -> Path:
        return self.upload_root / file_name

    def resolve(self, file_name: str) -> Optional[SelectedFile]:
        """Prefer the optimized copy; ``None`` when neither copy exists."""
        if not is_safe_name(file_name):
            return None
        optimized = self.optimized_path(file_name)
        if optimized.is_file():
            return SelectedFile(optimized, optimized=True)
        original = self.original_path(file_name)
        if original.is_file():
            return SelectedFile(original, optimized=False)
        return None
