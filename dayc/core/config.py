from functools import lru_cache
from pathlib import Path

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="DAYC-2 Scoring API")
    environment: Literal["dev", "test", "staging", "prod"] = Field(default="dev")

    tables_dir: Path = Field(
        default=Path("data/json"),
        description="Directory holding the generated A1, B13-B29, C1 and D1 table JSON files",
    )
    context_preload_enabled: bool = Field(
        default=False,
        description="Load every conversion table at startup instead of on the first request",
    )
    reverse_lookup_strategy: Literal["exact_min_raw", "closest_at_or_below"] = Field(
        default="exact_min_raw",
        description="Raw-score selection policy used by goal planning",
    )

    debug_instrumentation_enabled: bool = Field(default=True)

    @field_validator("tables_dir", mode="before")
    @classmethod
    def _normalize_tables_dir(cls, value: object) -> Path:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError("TABLES_DIR cannot be blank")
            return Path(stripped)
        if isinstance(value, Path):
            return value
        raise TypeError("TABLES_DIR must be a filesystem path")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
