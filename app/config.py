"""
Configuration management using pydantic-settings and python-dotenv
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///ideas.db",
        description="Async database connection URL",
        alias="DATABASE_URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False,
        description="Echo SQL queries for debugging",
        alias="DATABASE_ECHO"
    )

    # xAI (OpenAI-compatible API)
    XAI_API_KEY: Optional[str] = Field(
        default=None,
        description="xAI API key for Grok",
        alias="XAI_API_KEY"
    )
    XAI_BASE_URL: str = Field(
        default="https://api.x.ai/v1",
        description="Base URL of the OpenAI-compatible endpoint"
    )
    XAI_MODEL: str = Field(
        default="grok-2-latest",
        description="Chat model used for generation and validation"
    )

    # Market data providers
    DATAFORSEO_LOGIN: Optional[str] = Field(
        default=None,
        description="DataForSEO API login",
        alias="DATAFORSEO_LOGIN"
    )
    DATAFORSEO_PASSWORD: Optional[str] = Field(
        default=None,
        description="DataForSEO API password",
        alias="DATAFORSEO_PASSWORD"
    )
    TAVILY_API_KEY: Optional[str] = Field(
        default=None,
        description="Tavily search API key",
        alias="TAVILY_API_KEY"
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Application environment"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    # HTTP
    MAX_RETRIES: int = Field(
        default=3,
        description="Maximum retry attempts for HTTP requests"
    )
    REQUEST_TIMEOUT: int = Field(
        default=30,
        description="HTTP request timeout in seconds"
    )

    # Pipeline
    MAX_IDEAS_PER_RUN: int = Field(
        default=15,
        description="Number of ranked ideas kept from each pipeline run"
    )
    MAX_CONCURRENT_VALIDATIONS: int = Field(
        default=5,
        description="Maximum ideas validated concurrently"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "allow"  # Allow extra fields from environment variables


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
