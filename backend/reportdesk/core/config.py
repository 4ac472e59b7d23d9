"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass
import os

from reportdesk import __version__


@dataclass(frozen=True)
class Settings:
    app_name: str = "Report Desk"
    version: str = __version__
    cors_allow_origins: str = os.getenv("REPORTDESK_CORS_ORIGINS", "*")
    api_prefix: str = os.getenv("REPORTDESK_API_PREFIX", "/api")
    sqlite_path: str = os.getenv("REPORTDESK_SQLITE_PATH", "reports.db")
    log_level: str = os.getenv("REPORTDESK_LOG_LEVEL", "INFO")
    password_iterations: int = int(os.getenv("REPORTDESK_PASSWORD_ITERATIONS", "120000"))

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()
