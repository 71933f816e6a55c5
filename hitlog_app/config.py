from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below

    Settings are frozen: one instance is built at startup and handed
    to create_app(), which passes it on to every component.
    """
    
    # Environment
    environment: str = "development"
    debug: bool = False
    
    # Application
    app_name: str = "Hit Logger"
    app_version: str = "1.0.0"
    
    
    # Tracking
    allowed_hosts: str = "localhost"  # Comma-separated list of Host header values
    redirect_url: str = "https://www.youtube.com/"
    
    # Storage
    database_url: str = "sqlite:///./hitlog.db"
    storage_backend: str = "sql"  # Options: "sql", "memory"
    
    # Admin panel (HTTP Basic Auth)
    admin_user: str = "admin"
    admin_password: str = "changeme"
    
    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # Options: "console", "json"
    
    # Stats "today" boundary
    stats_timezone: str = "UTC"
    
    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("admin_user", "admin_password")
    @classmethod
    def ascii_credentials(cls, value: str) -> str:
        # HTTP Basic credentials are decoded as ASCII by fastapi.security.HTTPBasic
        if not value.isascii():
            raise ValueError("admin credentials must be ASCII")
        return value

    @property
    def hostnames(self) -> List[str]:
        """Allow-list parsed from the comma-separated setting"""
        return [h.strip() for h in self.allowed_hosts.split(",") if h.strip()]

    @property
    def masked_database_url(self) -> str:
        """Database URL with the password replaced, safe for logs"""
        try:
            return make_url(self.database_url).render_as_string(hide_password=True)
        except Exception:
            return "<unparseable database url>"
