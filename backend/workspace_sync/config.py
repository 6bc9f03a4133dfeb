"""Workspace sync configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "WorkspaceSync"
    debug: bool = True
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Auth: tokens are issued by the identity provider and validated here
    secret_key: str = "change-me-in-prod"
    token_algorithm: str = "HS256"
    token_expire_minutes: int = 1440  # 24 hours

    # Storage paths (relative resolved from backend/ at runtime)
    data_dir: str = "./data"
    workspace_dir: str = "./data/workspace-files"
    database_path: str = "./data/workspace_sync.db"

    # Mode: dev = uploads logged only, prod = real OSS uploads
    mode: str = "dev"

    # Object storage (browser-style POST policy upload)
    oss_access_key_id: str = ""
    oss_access_key_secret: str = ""
    oss_bucket_dev: str = "workspace-dev"
    oss_bucket_test: str = "workspace-test"
    oss_bucket_prod: str = "workspace-prod"
    oss_endpoint: str = "oss-accelerate.aliyuncs.com"
    oss_policy_ttl_seconds: int = 3600
    oss_max_content_length: int = 1048576000  # 1000 MB

    # Sync orchestration
    upload_timeout_seconds: float = 60.0
    sync_max_parallel: int = 4
    sync_deadline_seconds: float | None = None

    @property
    def is_dev_mode(self) -> bool:
        return self.mode == "dev"

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="WSYNC_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:5173"]

    @field_validator("sync_max_parallel")
    @classmethod
    def _at_least_one_worker(cls, value: int) -> int:
        if value < 1:
            raise ValueError("sync_max_parallel must be >= 1")
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure data directories are absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        for field in ("data_dir", "workspace_dir", "database_path"):
            val = getattr(self, field)
            if not Path(val).is_absolute():
                setattr(self, field, str(base / val))
        return self

    def bucket_for(self, env: str) -> str:
        """Bucket name backing a target environment."""
        return {
            "dev": self.oss_bucket_dev,
            "test": self.oss_bucket_test,
            "prod": self.oss_bucket_prod,
        }[env]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
