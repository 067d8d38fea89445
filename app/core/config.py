from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "production", "staging", "test"]

MIN_ROWS = 1
MAX_ROWS = 200


def _resolve_env_files() -> tuple[str, ...]:
    env = os.getenv("ADSCREEN_ENVIRONMENT", "development").lower()
    if env in {"prod", "production"}:
        return (".env", ".env.prod")
    if env in {"dev", "development"}:
        return (".env", ".env.dev")
    if env in {"test", "testing"}:
        return (".env", ".env.test")
    return (".env",)


def clamp_rows(max_ads: int) -> int:
    return min(max(max_ads, MIN_ROWS), MAX_ROWS)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ADSCREEN_",
        env_file=_resolve_env_files(),
        env_nested_delimiter="__",
        env_delimiter=",",
        extra="ignore",
    )

    environment: Environment = "development"
    project_name: str = "Dealer Ad Screen"
    api_prefix: str = "/api"
    log_level: str = "INFO"
    log_json: bool = False
    rate_limit: str = "120/minute"
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = []
    enable_docs: bool = False
    allow_framing: bool = True
    static_dir: str | None = None

    finn_api_key: str | None = None
    finn_org_id: str | None = None
    access_token: str = ""
    finn_base_url: str = "https://cache.api.finn.no"
    request_timeout_seconds: float = 10.0
    max_response_bytes: int = 5_000_000

    cache_seconds: int = 120
    max_ads: int = 30
    thousands_separator: str = " "

    serve_stale_on_error: bool = False
    single_flight: bool = False
    passthrough_upstream_status: bool = False

    @property
    def listing_cap(self) -> int:
        return clamp_rows(self.max_ads)


@lru_cache
def get_settings() -> Settings:
    return Settings()
