"""Typed parsing of the scalar fields sent alongside an upload.

Every field has an explicit default. Numeric fields that cannot be parsed
(or are NaN/infinite) fall back to that default instead of failing the upload,
and the JSON-bearing ``animations``/``effects`` fields fall back to an empty
list when they are absent, malformed or not a JSON array.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .models import DEFAULT_CHARACTER_HEIGHT, DEFAULT_CHARACTER_NAME, DEFAULT_STAT, CharacterStats

logger = logging.getLogger(__name__)


class UploadMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, protected_namespaces=())

    model_y: float = Field(default=0.0, alias="modelY")
    caption: Optional[str] = None
    character_name: str = Field(default=DEFAULT_CHARACTER_NAME, alias="characterName")
    character_era: str = Field(default="", alias="characterEra")
    character_bio: str = Field(default="", alias="characterBio")
    character_height: float = Field(default=DEFAULT_CHARACTER_HEIGHT, alias="characterHeight")
    stat_strength: int = Field(default=DEFAULT_STAT, alias="statStrength")
    stat_strategy: int = Field(default=DEFAULT_STAT, alias="statStrategy")
    stat_leadership: int = Field(default=DEFAULT_STAT, alias="statLeadership")
    stat_defense: int = Field(default=DEFAULT_STAT, alias="statDefense")
    animations: List[Any] = Field(default_factory=list)
    effects: List[Any] = Field(default_factory=list)

    @field_validator("model_y", "character_height", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        number = _parse_number(value)
        return default if number is None else number

    @field_validator("stat_strength", "stat_strategy", "stat_leadership", "stat_defense", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any, info: ValidationInfo) -> int:
        default = cls.model_fields[info.field_name].default
        number = _parse_number(value)
        return default if number is None else int(number)

    @field_validator("caption", mode="before")
    @classmethod
    def _coerce_caption(cls, value: Any) -> Optional[str]:
        text = _text(value)
        return text or None

    @field_validator("character_name", "character_era", "character_bio", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any, info: ValidationInfo) -> str:
        return _text(value) or cls.model_fields[info.field_name].default

    @field_validator("animations", "effects", mode="before")
    @classmethod
    def _coerce_json_list(cls, value: Any, info: ValidationInfo) -> List[Any]:
        if isinstance(value, list):
            return value
        text = _text(value)
        if not text:
            return []
        try:
            parsed = json.loads(text)
        except ValueError:
            logger.info("Could not parse %s field: %r", info.field_name, text[:200])
            return []
        if not isinstance(parsed, list):
            logger.info("Ignoring non-array %s field", info.field_name)
            return []
        return parsed

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "UploadMetadata":
        """Build from a submitted form, keeping only plain text values."""
        payload = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            value = form.get(key)
            if isinstance(value, str):
                payload[key] = value
        return cls.model_validate(payload)

    @property
    def character_stats(self) -> CharacterStats:
        return CharacterStats(
            strength=self.stat_strength,
            strategy=self.stat_strategy,
            leadership=self.stat_leadership,
            defense=self.stat_defense,
        )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _text(value)
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number
