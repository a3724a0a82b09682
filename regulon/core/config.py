"""Configuration management for the Regulon compliance backend."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # LLM gateway configuration
    LLM_GATEWAY_API_KEY: str = Field(..., description="Bearer key for the LLM gateway")
    LLM_GATEWAY_URL: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        description="OpenAI-compatible chat completions endpoint",
    )
    LLM_MODEL: str = Field(
        default="google/gemini-3-flash-preview", description="Model id sent to the gateway"
    )
    LLM_TIMEOUT_SECONDS: float = Field(
        default=120.0, description="Client-side timeout for every gateway call"
    )

    # Environment
    REGULON_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Edge endpoint security
    ENFORCE_FUNCTION_AUTH: bool = Field(
        default=False, description="Require a bearer token on drafting and chat endpoints"
    )
    ALLOWED_ORIGINS: str = Field(
        default="", description="Comma-separated CORS allow-list (empty allows all)"
    )

    # Identity resolution
    IDENTITY_TIMEOUT_SECONDS: float = Field(
        default=3.0, description="Deadline for role/persona resolution"
    )

    # Drafting gates
    STRICT_NOTICE_MIN_CHARS: int = Field(
        default=200, description="Minimum notice text length under strict validation"
    )
    ENFORCE_CRITICAL_FIELDS_GATE: bool = Field(
        default=True,
        description="Reject strict advanced drafts when extraction reports missing fields",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed origin allow-list; empty means every origin is allowed."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
