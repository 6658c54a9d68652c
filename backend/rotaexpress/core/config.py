from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    debug: bool = Field(False, alias="ROTAEXPRESS_DEBUG")

    zones_path: Path = Field(_DATA_DIR / "zones.json", alias="ROTAEXPRESS_ZONES_PATH")
    clients_path: Path = Field(
        _DATA_DIR / "clients.json", alias="ROTAEXPRESS_CLIENTS_PATH"
    )

    geocoder_user_agent: str = Field(
        "rotaexpress-geocoder", alias="ROTAEXPRESS_GEOCODER_USER_AGENT"
    )
    geocoder_domain: str | None = Field(None, alias="ROTAEXPRESS_GEOCODER_DOMAIN")
    geocoder_timeout: float = Field(10.0, alias="ROTAEXPRESS_GEOCODER_TIMEOUT")
    geocoder_country_codes: str = Field(
        "br", alias="ROTAEXPRESS_GEOCODER_COUNTRY_CODES"
    )

    postal_lookup_url: str = Field(
        "https://viacep.com.br/ws/{cep}/json/", alias="ROTAEXPRESS_POSTAL_LOOKUP_URL"
    )
    postal_lookup_timeout: float = Field(
        5.0, alias="ROTAEXPRESS_POSTAL_LOOKUP_TIMEOUT"
    )
    postal_country_label: str = Field(
        "Brasil", alias="ROTAEXPRESS_POSTAL_COUNTRY_LABEL"
    )

    suggestion_domain: str = Field(
        "photon.komoot.io", alias="ROTAEXPRESS_SUGGESTION_DOMAIN"
    )
    suggestion_timeout: float = Field(5.0, alias="ROTAEXPRESS_SUGGESTION_TIMEOUT")
    suggestion_limit: int = Field(5, alias="ROTAEXPRESS_SUGGESTION_LIMIT")
    suggestion_language: str = Field("pt", alias="ROTAEXPRESS_SUGGESTION_LANGUAGE")
    local_suggestion_limit: int = Field(3, alias="ROTAEXPRESS_LOCAL_SUGGESTION_LIMIT")

    primary_driver_name: str = Field(
        "Mototurbo", alias="ROTAEXPRESS_PRIMARY_DRIVER_NAME"
    )
    fallback_driver_name: str = Field(
        "José Roberto", alias="ROTAEXPRESS_FALLBACK_DRIVER_NAME"
    )

    # LLM Configuration
    llm_provider: Literal["openai", "anthropic", "google", "xai", "local"] = Field(
        "google", alias="ROTAEXPRESS_LLM_PROVIDER"
    )
    openai_api_key: str | None = Field(None, alias="ROTAEXPRESS_OPENAI_API_KEY")
    anthropic_api_key: str | None = Field(None, alias="ROTAEXPRESS_ANTHROPIC_API_KEY")
    google_api_key: str | None = Field(None, alias="ROTAEXPRESS_GOOGLE_API_KEY")
    xai_api_key: str | None = Field(None, alias="ROTAEXPRESS_XAI_API_KEY")

    llm_base_url: str | None = Field(None, alias="ROTAEXPRESS_LLM_BASE_URL")
    llm_model: str = Field("gemini-2.5-flash", alias="ROTAEXPRESS_LLM_MODEL")
    llm_timeout: float = Field(8.0, alias="ROTAEXPRESS_LLM_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("zones_path", "clients_path", mode="before")
    def _expand_path(cls, value: Path | str) -> Path:
        return Path(value).expanduser()

    @field_validator("geocoder_country_codes", mode="before")
    def _normalize_country_codes(cls, value: str) -> str:
        if isinstance(value, str):
            return value.replace(" ", "").lower()
        return value

    @field_validator("llm_provider", mode="before")
    def _normalize_provider(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]
