from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class StoreSettings(BaseModel):
    backend: Literal["postgres", "sqlite"] = "postgres"
    dsn: str = "postgresql://quassel@localhost/quassel"
    sqlite_path: Optional[Path] = None
    pool_size: int = Field(default=4, ge=1)
    query_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("sqlite_path", mode="before")
    @classmethod
    def _expand_sqlite_path(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None:
            return None
        return Path(value).expanduser().resolve()

    @model_validator(mode="after")
    def _require_sqlite_path(self) -> "StoreSettings":
        if self.backend == "sqlite" and self.sqlite_path is None:
            raise ValueError("store.sqlite_path is required when store.backend is 'sqlite'")
        return self


class CorrelationSettings(BaseModel):
    depth: int = Field(default=3, ge=1)
    subnet: bool = False
    follow_idents: bool = False
    max_concurrent_queries: int = Field(default=8, ge=1)


class Settings(BaseModel):
    store: StoreSettings = StoreSettings()
    correlation: CorrelationSettings = CorrelationSettings()

    @classmethod
    def load(cls, path: Optional[Path]) -> "Settings":
        if path is None:
            return cls()
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "ircsleuth.yaml", cwd / "ircsleuth.yml", cwd / "config.yaml"):
        if candidate.exists():
            return candidate
    return None
