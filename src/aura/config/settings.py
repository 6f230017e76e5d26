"""
Aura Application Settings

Production-grade configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="aura_db", description="Database name")
    user: str = Field(default="aura_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def sync_url(self) -> str:
        """Generate sync database URL for Alembic migrations."""
        password = self.password.get_secret_value()
        return f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class OpenAISettings(BaseSettings):
    """OpenAI API configuration (text generation and Whisper transcription)."""

    model_config = SettingsConfigDict(env_prefix="AURA_OPENAI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    model: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    transcription_model: str = Field(default="whisper-1", description="Transcription model")
    transcription_language: str = Field(default="en", description="Spoken language hint")
    max_tokens: int = Field(default=600, ge=100, le=4096)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class GeminiSettings(BaseSettings):
    """Google Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_GEMINI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Gemini API key")
    model: str = Field(default="gemini-1.5-flash", description="Model identifier")
    max_tokens: int = Field(default=600, ge=100, le=4096)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class ElevenLabsSettings(BaseSettings):
    """ElevenLabs text-to-speech configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_ELEVENLABS_")

    api_key: SecretStr = Field(default=SecretStr(""), description="ElevenLabs API key")
    base_url: str = Field(default="https://api.elevenlabs.io/v1")
    model_id: str = Field(default="eleven_monolingual_v1")
    timeout_seconds: float = Field(default=30.0, gt=0)


class TavusSettings(BaseSettings):
    """Tavus video generation configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_TAVUS_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Tavus API key")
    base_url: str = Field(default="https://tavusapi.com/v2")
    persona_id: str = Field(default="r6ca16dbe104", description="Default replica/persona id")
    timeout_seconds: float = Field(default=30.0, gt=0)


class OrchestratorSettings(BaseSettings):
    """Response generation policy."""

    model_config = SettingsConfigDict(env_prefix="AURA_ORCHESTRATOR_")

    ai_attempt_percentage: int = Field(default=70, ge=0, le=100)
    confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)


class CrisisSettings(BaseSettings):
    """
    Crisis gate policy.

    CLINICAL_REVIEW_REQUIRED: These constants are heuristics,
    not clinically validated thresholds.
    """

    model_config = SettingsConfigDict(env_prefix="AURA_CRISIS_")

    severity_multiplier: int = Field(default=2, ge=2, le=10)
    resources_threshold: int = Field(default=2, ge=1, le=10)
    interstitial_threshold: int = Field(default=5, ge=1, le=10)
    halt_threshold: int = Field(default=8, ge=1, le=10)
    flag_threshold: int = Field(default=3, ge=0, le=10)


class VideoSettings(BaseSettings):
    """Video polling configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_VIDEO_")

    enabled: bool = Field(default=True)
    inline_interval_seconds: float = Field(default=4.0, gt=0)
    inline_max_attempts: int = Field(default=15, ge=1)
    detached_interval_seconds: float = Field(default=30.0, gt=0)
    detached_max_attempts: int = Field(default=20, ge=1)
    default_mode: Literal["inline", "detached"] = Field(default="detached")


class AnalyticsSettings(BaseSettings):
    """Dashboard analytics configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_ANALYTICS_")

    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    timezone: str = Field(default="UTC", description="Timezone for calendar-day bucketing")
    recent_entries_limit: int = Field(default=5, ge=0, le=50)


class CaptureSettings(BaseSettings):
    """Recording capture limits."""

    model_config = SettingsConfigDict(env_prefix="AURA_CAPTURE_")

    max_recording_bytes: int = Field(default=25 * 1024 * 1024, ge=1)
    default_mime_type: str = Field(default="audio/webm")
    session_ttl_seconds: float = Field(
        default=1800.0,
        gt=0,
        description="Sessions untouched for this long are discarded",
    )


class StorageSettings(BaseSettings):
    """Audio storage configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_STORAGE_")

    audio_dir: str = Field(default="./var/audio", description="Root directory for audio files")
    entry_backend: Literal["memory", "database"] = Field(default="memory")


class SentrySettings(BaseSettings):
    """Sentry error tracking configuration."""

    model_config = SettingsConfigDict(env_prefix="AURA_SENTRY_")

    dsn: SecretStr = Field(default=SecretStr(""), description="Sentry DSN")
    traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with AURA_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        db_url = settings.database.async_url
    """

    model_config = SettingsConfigDict(
        env_prefix="AURA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins"
    )

    # LLM Provider selection
    llm_primary_provider: Literal["gemini", "openai"] = Field(
        default="gemini",
        description="Generative text provider (gemini, openai)"
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    elevenlabs: ElevenLabsSettings = Field(default_factory=ElevenLabsSettings)
    tavus: TavusSettings = Field(default_factory=TavusSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    crisis: CrisisSettings = Field(default_factory=CrisisSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and inject it.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
