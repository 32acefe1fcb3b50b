from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SAFEPATH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "SafePath"
    api_host: str = "127.0.0.1"
    api_port: int = 8080
    log_level: str = "INFO"

    files_root: Path = Field(default=Path("/srv/files"))
    serve_files: bool = True

    @field_validator("files_root", mode="before")
    @classmethod
    def _require_served_root(cls, value: str | Path) -> Path:
        raw = str(value).strip()
        # Taken literally, no shell-style expansion.
        if raw.startswith("~") or "$" in raw:
            raise ValueError("files_root must be a literal path without ~ or $ expansion")
        root = Path(raw)
        if not root.is_absolute():
            raise ValueError("files_root must be absolute")
        return root

    @model_validator(mode="after")
    def _validate_runtime_constraints(self) -> "Settings":
        self.files_root = self.files_root.resolve(strict=False)
        if self.files_root == Path(self.files_root.anchor):
            raise ValueError("files_root must not be the filesystem root")

        normalized_level = self.log_level.upper().strip()
        if normalized_level not in SUPPORTED_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(SUPPORTED_LOG_LEVELS)}")
        self.log_level = normalized_level

        if not 0 < self.api_port < 65536:
            raise ValueError("api_port must be between 1 and 65535")

        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
