"""Configuration management for the PDF to Word pipeline."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PDFWORD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Extraction models, in priority order (LangChain provider:model syntax)
    primary_model: str = "google_genai:gemini-2.0-flash"
    secondary_model: str = "google_genai:gemini-1.5-flash"
    llm_provider: str = "gemini"  # key store provider used for credentials
    llm_timeout_seconds: float = 120.0
    llm_temperature: float = 0.0

    # Credential store
    key_store_url: str = "sqlite:///data/api-keys.db"

    # Non-AI fallback converter
    soffice_binary: str = "soffice"
    fallback_timeout_seconds: float = 180.0

    # Rendering
    default_font_size_pt: float = 11.0

    # Logging
    log_level: str = "INFO"

    @property
    def extraction_models(self) -> list[str]:
        """Configured models in the order they are attempted."""
        return [m for m in (self.primary_model, self.secondary_model) if m]


settings = Settings()
