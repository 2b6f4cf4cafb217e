"""Reads the header and JSON chunk of a binary glTF (GLB) file."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

GLB_MAGIC = b"glTF"
JSON_CHUNK_TYPE = 0x4E4F534A
HEADER = struct.Struct("<4sII")
CHUNK_HEADER = struct.Struct("<II")


class GlbFormatError(ValueError):
    """Raised when a file is not a readable GLB container."""


@dataclass(frozen=True)
class GlbSummary:
    version: int
    total_length: int
    generator: Optional[str]
    nodes: int
    meshes: int
    skins: int
    animations: int
    joints_per_skin: tuple[int, ...]

    @property
    def is_rigged(self) -> bool:
        return self.skins > 0

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "totalLength": self.total_length,
            "generator": self.generator,
            "nodes": self.nodes,
            "meshes": self.meshes,
            "skins": self.skins,
            "animations": self.animations,
            "jointsPerSkin": list(self.joints_per_skin),
            "rigged": self.is_rigged,
        }


def read_glb_document(path: Path) -> tuple[int, int, Dict[str, Any]]:
    with path.open("rb") as stream:
        header = stream.read(HEADER.size)
        if len(header) < HEADER.size:
            raise GlbFormatError(f"{path.name}: file too short for a GLB header")
        magic, version, total_length = HEADER.unpack(header)
        if magic != GLB_MAGIC:
            raise GlbFormatError(f"{path.name}: missing glTF magic")

        chunk_header = stream.read(CHUNK_HEADER.size)
        if len(chunk_header) < CHUNK_HEADER.size:
            raise GlbFormatError(f"{path.name}: missing JSON chunk header")
        chunk_length, chunk_type = CHUNK_HEADER.unpack(chunk_header)
        if chunk_type != JSON_CHUNK_TYPE:
            raise GlbFormatError(f"{path.name}: first chunk is not JSON")

        raw = stream.read(chunk_length)
        if len(raw) < chunk_length:
            raise GlbFormatError(f"{path.name}: truncated JSON chunk")

    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise GlbFormatError(f"{path.name}: invalid JSON chunk") from exc
    if not isinstance(document, dict):
        raise GlbFormatError(f"{path.name}: JSON chunk is not an object")
    return version, total_length, document


def read_glb_summary(path: Path) -> GlbSummary:
    version, total_length, document = read_glb_document(path)
    asset = document.get("asset") or {}
    skins = document.get("skins") or []
    return GlbSummary(
        version=version,
        total_length=total_length,
        generator=asset.get("generator") if isinstance(asset, dict) else None,
        nodes=len(document.get("nodes") or []),
        meshes=len(document.get("meshes") or []),
        skins=len(skins),
        animations=len(document.get("animations") or []),
        joints_per_skin=tuple(len(skin.get("joints") or []) for skin in skins if isinstance(skin, dict)),
    )
