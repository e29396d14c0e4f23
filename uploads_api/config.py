from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8')

    app_name: str = 'Uploads API'
    app_host: str = '0.0.0.0'
    app_port: int = 3000
    uploads_dir: str = 'uploads'
    static_url_prefix: str = '/uploads'
    log_level: str = 'info'
    cors_origins: str = '*'
    max_body_bytes: int = Field(default=1024 * 1024, ge=1)
    max_upload_bytes: int = Field(default=100 * 1024 * 1024, ge=1)
    rate_limit_max_requests: int = Field(default=100, ge=1)
    rate_limit_window_sec: int = Field(default=15 * 60, ge=1)
    # 'synthetic' reports a fixed capacity; 'host' queries the filesystem holding uploads_dir.
    disk_usage_mode: Literal['synthetic', 'host'] = 'synthetic'
    disk_total_bytes: int = Field(default=1_000_000_000_000, ge=0)
    disk_used_fraction: float = Field(default=0.3, ge=0.0, le=1.0)


settings = Settings()
