"""
Application configuration using Pydantic Settings
"""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Convert-IA Recruiting"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = Field(default="change-this-in-production-min-32-characters-required", min_length=32)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Database
    DATABASE_URL: str = "sqlite:///./convertia.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_TTL: int = 3600
    DASHBOARD_CACHE_TTL: int = 60
    CACHE_ENABLED: bool = True

    # OpenAI
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_SECONDS: Optional[float] = None  # None keeps the SDK default
    AI_TEMPERATURE: float = 0.7
    TRAINING_CHAT_MAX_TOKENS: int = 300
    TRAINING_EVALUATION_MAX_TOKENS: int = 800
    RESUME_ANALYSIS_MAX_TOKENS: int = 2500

    # Training simulations
    TRAINING_COMPANY_NAME: str = "CONVERT-IA"
    TRAINING_CODE_LENGTH: int = 6
    # Confusable characters (I, O, 0, 1) are left out
    TRAINING_CODE_ALPHABET: str = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    TRAINING_CODE_DEFAULT_DAYS: int = 7

    # Async Tasks
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"
    CELERY_TASK_ALWAYS_EAGER: bool = False
    CELERY_TASK_SOFT_TIME_LIMIT: int = 120

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8080"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # RRHH
    RRHH_EXPECTED_DAILY_HOURS: float = 8.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
