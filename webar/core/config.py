"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def resolve_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False


class StorageSettings(BaseModel):
    upload_dir: Path = Field(default=Path("public/uploads"))
    # Defaults to <upload_dir>/optimized when unset.
    optimized_dir: Optional[Path] = None
    # Defaults to <upload_dir>/../.optimizer-staging when unset.
    staging_dir: Optional[Path] = None
    data_file: Path = Field(default=Path("data/db.json"))


class UploadSettings(BaseModel):
    max_file_size: int = Field(default=100 * 1024 * 1024, gt=0)
    max_props: int = Field(default=20, ge=0)
    chunk_size: int = Field(default=1024 * 1024, gt=0)

    @property
    def max_request_size(self) -> int:
        # model, audio, groundImage and envImage plus every prop, with room for form fields
        return self.max_file_size * (self.max_props + 4) + 1024 * 1024


class DeliverySettings(BaseModel):
    extensions: list[str] = Field(default_factory=lambda: [".glb", ".gltf", ".fbx"])
    cache_max_age: int = 60 * 60 * 24 * 365
    chunk_size: int = Field(default=1024 * 1024, gt=0)


class OptimizerSettings(BaseModel):
    enabled: bool = True
    # e.g. ["node", "optimize_models.mjs", "{input}", "--out={output}"]
    command: list[str] = Field(default_factory=list)
    timeout: float = Field(default=600.0, gt=0)
    max_concurrency: int = Field(default=1, ge=1)
    extensions: list[str] = Field(default_factory=lambda: [".glb", ".gltf"])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "WebAR Share Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    storage: StorageSettings = StorageSettings()
    upload: UploadSettings = UploadSettings()
    delivery: DeliverySettings = DeliverySettings()
    optimizer: OptimizerSettings = OptimizerSettings()
    logging: LoggingSettings = LoggingSettings()

    static_dir: Path = Path("webar/web/static")
    template_dir: Path = Path("webar/web/templates")

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def upload_root(self) -> Path:
        return resolve_path(self.storage.upload_dir)

    @property
    def optimized_root(self) -> Path:
        if self.storage.optimized_dir is None:
            return self.upload_root / "optimized"
        return resolve_path(self.storage.optimized_dir)

    @property
    def staging_root(self) -> Path:
        if self.storage.staging_dir is None:
            return self.upload_root.parent / ".optimizer-staging"
        return resolve_path(self.storage.staging_dir)

    @property
    def data_file(self) -> Path:
        return resolve_path(self.storage.data_file)

    @property
    def optimizer_enabled(self) -> bool:
        return self.optimizer.enabled and bool(self.optimizer.command)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
