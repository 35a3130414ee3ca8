"""Runtime configuration for tidydata-client.

Values come from keyword arguments, ``TIDYDATA_*`` environment variables
or a ``.env`` file, in that order of precedence.
"""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseSettings):
    """Validated client configuration."""

    model_config = SettingsConfigDict(env_prefix="TIDYDATA_", env_file=".env", extra="ignore")

    address: str = Field(
        default="tidydata.json", description="Catalog endpoint: path to a catalog document."
    )
    identity: str | None = Field(
        default=None, description="Principal used for access checks."
    )
    data_bucket: str = Field(
        default="tidydata", description="Bucket new versions are stored under."
    )
    release_notes_url: str = Field(
        default="https://tidydata.example.com/release-notes/{dataset}/{version}",
        description="Release notes URL template with {dataset} and {version}.",
    )
    log_level: str = Field(default="WARNING", description="Minimum log level.")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'.")
        return level

    def default_data_location(self, version: str) -> str:
        return f"s3://{self.data_bucket}/{version}"


__all__ = ["ClientConfig"]
