from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import os

class Settings(BaseSettings):
    # LLM provider: openai | azure | gemini
    provider: Optional[str] = None

    # OpenAI / OpenAI-compatible (AIMLAPI etc. via OPENAI_BASE_URL)
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = None
    azure_openai_deployment: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_api_version: str = "2024-06-01"

    # Gemini
    google_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"

    # Test Mode - canned AI responses, no provider calls
    test_mode: bool = False

    # Database - DATABASE_URL from the environment, fallback to SQLite for local
    database_url: Optional[str] = None

    # Auth tokens
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7

    # App Settings
    app_name: str = "CareerMate"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True

    # LLM call limits, per provider
    llm_timeout_seconds: float = 90.0
    llm_max_retries: int = 2
    llm_max_concurrent: int = 10
    llm_circuit_threshold: int = 5
    llm_circuit_recovery_seconds: float = 30.0
    allowed_origins: str = "http://localhost:3000,https://careermate-frontend.onrender.com"

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "5000"))

    class Config:
        env_file = ".env"
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.provider is None:
            self.provider = "azure" if self.azure_openai_endpoint else "openai"
        self.provider = self.provider.lower()

        if self.database_url is None:
            self.database_url = "sqlite+aiosqlite:///./careermate.db"
        # Hosted Postgres URLs use postgres:// or postgresql://, async SQLAlchemy needs postgresql+asyncpg://
        elif self.database_url.startswith("postgres://"):
            self.database_url = self.database_url.replace("postgres://", "postgresql+asyncpg://", 1)
        elif self.database_url.startswith("postgresql://"):
            self.database_url = self.database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @property
    def chat_model(self) -> str:
        """Model (or Azure deployment) used for chat completions"""
        if self.provider == "gemini":
            return self.gemini_model
        if self.provider == "azure" and self.azure_openai_deployment:
            return self.azure_openai_deployment
        return self.openai_model

@lru_cache()
def get_settings() -> Settings:
    return Settings()
