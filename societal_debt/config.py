"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./societal_debt.db"

    # External Services
    classifier_api_base: str = "http://localhost:8001"
    transaction_feed_base: str = "http://localhost:8002"

    # Service
    service_name: str = "societal-debt-service"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 30.0  # Classification calls are slow
    classifier_max_retries: int = 3
    classifier_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Credit ledger
    credit_max_cas_retries: int = 5


settings = Settings()
