"""Application configuration via environment variables."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    environment: str = "development"
    debug: bool = False
    service_name: str = "bookmark-enrichment"

    # AWS (Secrets Manager lookup for the Gemini key)
    aws_region: str = "us-east-1"

    # CORS
    cors_origins: list[str] = ["*"]

    # Gemini generative text endpoint
    gemini_api_key: str = Field(
        "",
        validation_alias=AliasChoices("ENRICHMENT_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    gemini_api_key_secret_arn: str = ""  # Used when no plain key is set
    gemini_model: str = Field(
        "",
        validation_alias=AliasChoices("ENRICHMENT_GEMINI_MODEL", "GEMINI_MODEL"),
    )
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 25.0

    # Supabase (bookmark persistence)
    supabase_url: str = Field(
        "",
        validation_alias=AliasChoices("ENRICHMENT_SUPABASE_URL", "SUPABASE_URL"),
    )
    supabase_key: str = Field(
        "",
        validation_alias=AliasChoices("ENRICHMENT_SUPABASE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
    )
    bookmarks_table: str = "bookmarks"

    class Config:
        env_prefix = "ENRICHMENT_"
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"


settings = Settings()
