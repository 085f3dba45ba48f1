from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Golden Store API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Credit ledger, order and price list management for a small shop"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Export bundle
    APP_NAME: str = "Golden Store"
    EXPORT_VERSION: str = "2.0"

    # Storage
    STORAGE_BACKEND: Literal["file", "remote", "mirrored"] = "file"
    DATA_FILE: str = "data/golden_store.json"

    # Remote table store
    REMOTE_URL: str = ""
    REMOTE_API_KEY: str = ""
    REMOTE_TIMEOUT_SECONDS: float = 15.0

    # Business rules
    DEFAULT_VAT_PERCENTAGE: float = 15.0
    RETURNABLE_OVERDUE_DAYS: int = 21

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
