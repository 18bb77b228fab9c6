"""
Application Configuration — Pydantic Settings

Centralized configuration management using environment variables.
Loads from .env file automatically with sensible defaults.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Priority: Environment variables > .env file > defaults
    """
    
    # === API Configuration ===
    PROJECT_NAME: str = "WindSight"
    
    # === CORS Configuration ===
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8080",
    ]
    
    # === Remote Scoring Service ===
    # Empty string disables the remote attempt (local scoring only)
    REMOTE_SCORING_URL: str = "http://localhost:5000"
    REMOTE_TIMEOUT_S: float = 10.0
    EXPLAIN_TIMEOUT_S: float = 15.0
    HEALTH_TIMEOUT_S: float = 5.0
    FALLBACK_DELAY_S: float = 1.5
    
    # === Real-Time Sampling ===
    SAMPLING_INTERVAL_S: float = 3.0
    HISTORY_CAPACITY: int = 50
    RANDOM_SEED: Optional[int] = None
    
    # === Environment ===
    ENVIRONMENT: str = "local"  # local, development, staging, production
    
    # === Settings Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Singleton instance
settings = Settings()
