"""
Application configuration using Pydantic settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from typing import List, Optional


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "FinBot"
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/finbot.sqlite"

    # AI Provider
    ai_provider: str = "openai"  # openai, openrouter, ollama, anthropic
    ai_model: str = "gpt-4o-mini"
    ai_vision_model: str = "gpt-4o"
    ai_transcription_model: str = "whisper-1"
    ai_base_url: Optional[str] = None  # For Ollama: http://localhost:11434
    ai_timeout_seconds: float = 60.0
    ai_low_confidence_threshold: float = 0.6

    # API Keys (optional based on provider)
    openrouter_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # Telegram
    telegram_enabled: bool = True
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[int] = None
    voice_max_duration_seconds: int = 60

    # Pending confirmations
    pending_ttl_seconds: int = 3600
    pending_bill_ttl_seconds: int = 7 * 24 * 3600
    pending_max_entries: int = 1000

    # Bill reminders
    reminder_hours: List[int] = [9, 18]
    reminder_check_interval_seconds: int = 3600
    bill_remind_on_due_day: bool = True
    bill_default_category: str = "Contas"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    frontend_url: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False
    )


# Global settings instance
settings = Settings()
