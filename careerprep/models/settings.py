"""
Runtime settings for the CareerPrep API, read once from the environment
"""
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

from careerprep.utils.exceptions import ConfigurationError

load_dotenv()

DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"


class LLMSettings(BaseModel):
    """Chat-completion backend configuration"""
    base_url: str = Field(
        default=DEFAULT_LLM_BASE_URL,
        description="OpenAI-compatible chat completion base URL"
    )
    api_key: Optional[str] = Field(default=None, description="Bearer token for the provider")
    model: str = Field(default="gemini-2.0-flash", description="Primary model")
    fallback_model: Optional[str] = Field(default="gemini-2.0-flash-lite", description="Cheaper model tried once on failure")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Default generation temperature")
    max_tokens: int = Field(default=2000, ge=1, le=32000, description="Default completion budget")
    timeout: int = Field(default=30, ge=1, le=300, description="Request timeout in seconds")

    @validator('base_url')
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @validator('fallback_model')
    def empty_fallback_is_none(cls, v):
        return v or None


class DatabaseSettings(BaseModel):
    """MongoDB connection configuration"""
    mongo_details: str = Field(default="mongodb://localhost:27017", description="MongoDB connection string")
    db_name: str = Field(default="careerprep_db", description="Database name")


class PipelineSettings(BaseModel):
    """Input limits and interview defaults"""
    min_resume_length: int = Field(default=100, ge=0)
    min_job_description_length: int = Field(default=50, ge=0)
    max_job_descriptions: int = Field(default=10, ge=1, le=50)
    stored_resume_chars: int = Field(default=15000, ge=1000)
    default_interview_duration: int = Field(default=1800, ge=60, description="Seconds assumed when startedAt is missing")


class Settings(BaseModel):
    """Complete service configuration"""
    environment: str = "development"
    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    slow_request_threshold: float = Field(default=2.0, ge=0.0)


def _env(key: str, default=None):
    value = os.getenv(key)
    return default if value in (None, "") else value


def load_settings() -> Settings:
    """Build settings from environment variables"""
    try:
        llm = LLMSettings(
            base_url=_env("LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
            api_key=_env("LLM_API_KEY") or _env("GEMINI_API_KEY"),
            model=_env("LLM_MODEL", "gemini-2.0-flash"),
            fallback_model=_env("LLM_FALLBACK_MODEL", "gemini-2.0-flash-lite"),
            temperature=float(_env("LLM_TEMPERATURE", 0.3)),
            max_tokens=int(_env("LLM_MAX_TOKENS", 2000)),
            timeout=int(_env("LLM_TIMEOUT", 30)),
        )
        database = DatabaseSettings(
            mongo_details=_env("MONGO_DETAILS", "mongodb://localhost:27017"),
            db_name=_env("DB_NAME", "careerprep_db"),
        )
        return Settings(
            environment=_env("ENVIRONMENT", "development").lower(),
            llm=llm,
            database=database,
            slow_request_threshold=float(_env("SLOW_REQUEST_THRESHOLD", 2.0)),
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
