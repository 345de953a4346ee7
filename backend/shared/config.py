"""
Centralized configuration for the RFD Index backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced (e.g., SESSION_*, GOOGLE_*, SUPABASE_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: str) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty entries."""
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RFD Index API"
    app_version: str = "0.1.0"
    environment: Literal["development", "production"] = "production"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage
    storage_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # Direct Postgres URL, used by run_migrations.py

    # Access control: comma-separated email domains, empty means everyone
    authorized_domains: str = ""

    # Sessions
    session_cookie_name: str = "auth_session"
    session_ttl_days: int = 30
    session_renewal_days: int = 15

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    origin: str = "http://localhost:8000"
    oauth_state_ttl_seconds: int = 600
    http_timeout_seconds: float = 10.0

    # Google Drive (document storage)
    google_service_account_key: str = ""  # Service account JSON
    google_drive_folder_id: str = ""
    google_drive_impersonate: str = ""  # Delegated subject for shared drives
    google_rfd_team_emails: str = ""

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def authorized_domain_list(self) -> list[str]:
        """Authorized email domains, lower-cased."""
        return [domain.lower() for domain in split_csv(self.authorized_domains)]

    @property
    def team_email_list(self) -> list[str]:
        return split_csv(self.google_rfd_team_emails)

    @property
    def oauth_redirect_uri(self) -> str:
        return f"{self.origin.rstrip('/')}/auth/google/callback"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
