"""Server settings shared by the API and the scripts.

Values come from ``SSHLINK_*`` environment variables or a local ``.env``.
"""
from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SSHLINK_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    server_address: str = Field(default="127.0.0.1", min_length=1)
    ports: list[Annotated[int, Field(ge=0, le=65535)]] = Field(default_factory=lambda: [22], min_length=1)
    location: str = Field(default="XX", min_length=1)
    prefix: str = Field(
        default="user",
        min_length=1,
        description="Username prefix for auto-allocated accounts.",
    )
    default_days: int = Field(default=30, ge=1)
    database_url: str = Field(default="sqlite:///./sshlink.db")


@lru_cache
def get_settings() -> Settings:
    return Settings()
