from __future__ import annotations

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="S3TREE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # AWS / S3
    AWS_REGION: str = "us-east-1"
    AWS_PROFILE: Optional[str] = None
    ENDPOINT_URL: Optional[str] = None  # MinIO, LocalStack and friends

    # Output
    COLOR: Literal["auto", "always", "never"] = "never"


def load_settings() -> Settings:
    return Settings()
