"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./potting.db"

    # Hardware controller (ESP32 on the machine)
    controller_base_url: str = "http://10.126.124.91"
    controller_timeout_seconds: float = 2.0
    hardware_enabled: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    # Environment
    environment: str = "development"

    @property
    def cors_origin_list(self) -> list[str]:
        """Split the comma separated CORS origins."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
