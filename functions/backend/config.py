"""
Configuration and settings for the cloud functions.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared import constants


class Settings(BaseSettings):
    """Environment-backed settings for the callable functions."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GCLOUD_PROJECT", "GOOGLE_CLOUD_PROJECT"),
    )
    dev_project_suffix: str = Field(default="-dev")

    # Firebase Storage; None selects the app's default bucket.
    storage_bucket: Optional[str] = Field(default=None)
    image_max_size_mb: float = Field(default=constants.IMAGE_MAX_SIZE_MB)

    # S3-compatible storage (Tencent COS), used instead of Firebase Storage
    # when fully configured.
    cos_endpoint: Optional[str] = Field(default=None)
    cos_region: Optional[str] = Field(default=None)
    cos_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Backups
    backup_token: Optional[str] = Field(default=None)
    backups_bucket: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "USE_IN_MEMORY_BACKENDS", "DOCS_USE_IN_MEMORY_BACKENDS"
        ),
    )

    @property
    def is_dev_project(self) -> bool:
        return bool(self.project_id) and self.project_id.endswith(
            self.dev_project_suffix
        )

    @property
    def cos_configured(self) -> bool:
        return all(
            (
                self.cos_bucket,
                self.cos_region,
                self.cos_endpoint,
                self.aws_access_key_id,
                self.aws_secret_access_key,
            )
        )

    def resolved_backups_bucket(self) -> str:
        if self.backups_bucket:
            return self.backups_bucket
        if not self.project_id:
            raise RuntimeError("Project id is not configured. Set GCLOUD_PROJECT.")
        return f"{self.project_id}-backups"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
