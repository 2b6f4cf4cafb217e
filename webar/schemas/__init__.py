"""Pydantic schemas used across the project."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    error: str


class UploadResponse(BaseModel):
    id: str
    url: str


class CharacterStatsResponse(BaseModel):
    strength: int
    strategy: int
    leadership: int
    defense: int


class AssetDetail(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    model: str
    audio: Optional[str] = None
    groundImage: Optional[str] = None
    envImage: Optional[str] = None
    props: list[str] = Field(default_factory=list)
    modelY: float = 0
    caption: Optional[str] = None
    characterName: str
    characterEra: str = ""
    characterBio: str = ""
    characterHeight: float
    characterStats: CharacterStatsResponse
    animations: list[Any] = Field(default_factory=list)
    effects: list[Any] = Field(default_factory=list)
    createdAt: int
    modelSize: Optional[int] = Field(default=None, description="Size in bytes of the file /uploads serves")
    optimized: bool = Field(default=False, description="Whether an optimized variant is served")


class AssetSummary(BaseModel):
    id: str
    characterName: str
    characterEra: str
    characterHeight: float
    createdAt: int


class NearbySite(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    radius: float
    distance: int
    isNear: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
