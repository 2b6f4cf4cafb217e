"""Domain models for uploaded assets."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import AssetStoreError

DEFAULT_CHARACTER_NAME = "Vị Tướng"
DEFAULT_CHARACTER_HEIGHT = 170.0
DEFAULT_STAT = 80


@dataclass(frozen=True)
class CharacterStats:
    strength: int = DEFAULT_STAT
    strategy: int = DEFAULT_STAT
    leadership: int = DEFAULT_STAT
    defense: int = DEFAULT_STAT

    @classmethod
    def from_mapping(cls, payload: Any) -> "CharacterStats":
        if not isinstance(payload, dict):
            return cls()
        values = {}
        for name in ("strength", "strategy", "leadership", "defense"):
            value = payload.get(name)
            if isinstance(value, int) and not isinstance(value, bool):
                values[name] = value
        return cls(**values)

    def to_mapping(self) -> Dict[str, int]:
        return {
            "strength": self.strength,
            "strategy": self.strategy,
            "leadership": self.leadership,
            "defense": self.defense,
        }


@dataclass(frozen=True)
class AssetRecord:
    id: str
    model: str
    audio: Optional[str] = None
    ground_image: Optional[str] = None
    env_image: Optional[str] = None
    props: List[str] = field(default_factory=list)
    model_y: float = 0.0
    caption: Optional[str] = None
    character_name: str = DEFAULT_CHARACTER_NAME
    character_era: str = ""
    character_bio: str = ""
    character_height: float = DEFAULT_CHARACTER_HEIGHT
    character_stats: CharacterStats = field(default_factory=CharacterStats)
    animations: List[Any] = field(default_factory=list)
    effects: List[Any] = field(default_factory=list)
    created_at: int = 0

    @property
    def model_file_name(self) -> str:
        return self.model.rsplit("/", 1)[-1]

    @classmethod
    def from_mapping(cls, payload: Dict[str, Any]) -> "AssetRecord":
        try:
            asset_id = str(payload["id"])
            model = str(payload["model"])
        except (KeyError, TypeError, ValueError) as exc:
            raise AssetStoreError("asset entry is missing id/model") from exc

        props = payload.get("props") or []
        animations = payload.get("animations") or []
        effects = payload.get("effects") or []
        created_at = payload.get("createdAt")
        return cls(
            id=asset_id,
            model=model,
            audio=_optional_str(payload.get("audio")),
            ground_image=_optional_str(payload.get("groundImage")),
            env_image=_optional_str(payload.get("envImage")),
            props=[str(item) for item in props] if isinstance(props, list) else [],
            model_y=_number(payload.get("modelY"), 0.0),
            caption=_optional_str(payload.get("caption")),
            character_name=str(payload.get("characterName") or DEFAULT_CHARACTER_NAME),
            character_era=str(payload.get("characterEra") or ""),
            character_bio=str(payload.get("characterBio") or ""),
            character_height=_number(payload.get("characterHeight"), DEFAULT_CHARACTER_HEIGHT),
            character_stats=CharacterStats.from_mapping(payload.get("characterStats")),
            animations=animations if isinstance(animations, list) else [],
            effects=effects if isinstance(effects, list) else [],
            created_at=int(created_at) if isinstance(created_at, (int, float)) else 0,
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "model": self.model,
            "audio": self.audio,
            "groundImage": self.ground_image,
            "envImage": self.env_image,
            "props": list(self.props),
            "modelY": self.model_y,
            "caption": self.caption,
            "characterName": self.character_name,
            "characterEra": self.character_era,
            "characterBio": self.character_bio,
            "characterHeight": self.character_height,
            "characterStats": self.character_stats.to_mapping(),
            "animations": list(self.animations),
            "effects": list(self.effects),
            "createdAt": self.created_at,
        }

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "characterName": self.character_name,
            "characterEra": self.character_era,
            "characterHeight": self.character_height,
            "createdAt": self.created_at,
        }

    @staticmethod
    def now_millis() -> int:
        return int(time.time() * 1000)


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _number(value: Any, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return default
