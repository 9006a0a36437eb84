from __future__ import annotations
import os
import functools
import yaml
from pathlib import Path
from typing import Dict, List
from pydantic import BaseModel, Field

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"

class AppConfig(BaseModel):
    name: str = "Tertiary Admin Console"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

class ApiConfig(BaseModel):
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = 15

class StorageConfig(BaseModel):
    url: str = "sqlite:///data/client_storage.db"
    profile: str = "default"

class UIConfig(BaseModel):
    page_sizes: List[int] = Field(default_factory=lambda: [10, 20, 50, 100])
    default_page_size: int = 10

class CourseRulesConfig(BaseModel):
    numbering_bands: Dict[str, Dict[str, int]] = Field(default_factory=dict)

class Settings(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    courses: CourseRulesConfig = Field(default_factory=CourseRulesConfig)

def _apply_env_overrides(data: dict) -> dict:
    base = os.environ.get("ADMIN_CONSOLE_API_BASE")
    if base:
        data.setdefault("api", {})["base_url"] = base
    storage_url = os.environ.get("ADMIN_CONSOLE_STORAGE_URL")
    if storage_url:
        data.setdefault("storage", {})["url"] = storage_url
    return data

def load_settings(path: str | Path = DEFAULT_SETTINGS_PATH) -> Settings:
    data: dict = {}
    path = Path(path)
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    data = _apply_env_overrides(data)
    settings = Settings(
        app=AppConfig(**(data.get("app") or {})),
        api=ApiConfig(**(data.get("api") or {})),
        storage=StorageConfig(**(data.get("storage") or {})),
        ui=UIConfig(**(data.get("ui") or {})),
        courses=CourseRulesConfig(**(data.get("courses") or {})),
    )
    # Trailing slash would double up with the /api/... paths
    settings.api.base_url = settings.api.base_url.rstrip("/")
    return settings

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
