"""
Configuration Management for Info Cards

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The Gemini key is OPTIONAL on purpose: a missing or malformed key is not a
startup failure, the tag agent answers with a heuristic result instead.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini generative model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (Google form: AIza...)"
    )
    model: Optional[str] = Field(
        default=None,
        description="Preferred model, tried before the fallback models"
    )
    fallback_models: list[str] = Field(
        default_factory=lambda: ["gemini-1.5-flash", "gemini-2.0-flash"],
        description="Models tried in order after the preferred model"
    )
    rest_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Base URL of the Gemini REST API"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for raw REST calls"
    )
    max_output_tokens: int = Field(
        default=512,
        ge=64,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )

    @property
    def candidate_models(self) -> list[str]:
        """Preferred model first, then the fallbacks, empties and duplicates dropped."""
        seen: list[str] = []
        for name in [self.model, *self.fallback_models]:
            if name and name not in seen:
                seen.append(name)
        return seen


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    items_sheet_name: str = Field(
        default="Items",
        description="Name of the sheet for info cards"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Tag bounds
    min_tags: int = Field(
        default=6,
        ge=1,
        le=12,
        description="Minimum tags produced by enrichment"
    )
    max_tags: int = Field(
        default=10,
        ge=1,
        le=12,
        description="Maximum tags produced by enrichment"
    )

    # Input limits
    min_content_length: int = Field(
        default=3,
        ge=1,
        description="Minimum trimmed title+note length"
    )
    max_title_length: int = Field(
        default=2000,
        description="Maximum trimmed title length"
    )
    max_note_length: int = Field(
        default=8000,
        description="Maximum trimmed note length"
    )
    summary_preview_length: int = Field(
        default=80,
        ge=1,
        description="Note characters used as heuristic summary"
    )

    # HTTP boundary
    tag_endpoint_path: str = Field(
        default="/api/ai-tag",
        description="Path of the remote tagging endpoint"
    )

    @field_validator('max_tags')
    @classmethod
    def validate_tag_bounds(cls, v: int, info) -> int:
        """max_tags may not be lower than min_tags."""
        min_tags = info.data.get("min_tags")
        if min_tags is not None and v < min_tags:
            raise ValueError("max_tags cannot be lower than min_tags")
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks and the health endpoint.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        gemini = settings.gemini
        results["gemini"] = bool(gemini.api_key)
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
