"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services (unset = packaged catalog / in-memory borrowers)
    catalog_api_base: Optional[str] = None
    borrower_api_base: Optional[str] = None

    # Service
    service_name: str = "financing-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Ranking (0 = evaluate lenders sequentially)
    ranking_max_workers: int = 0


settings = Settings()
