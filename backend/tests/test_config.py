"""Tests for settings loading."""

from finbot.config import Settings


class TestSettings:
    """Test .env handling."""

    def test_empty_values_fall_back_to_defaults(self, tmp_path, monkeypatch):
        """Blank keys copied from the example file do not break startup."""
        monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)
        monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text(
            "TELEGRAM_BOT_TOKEN=\n"
            "TELEGRAM_CHAT_ID=\n"
            "OPENAI_API_KEY=\n"
            "AI_MODEL=gpt-4o-mini\n"
        )

        settings = Settings(_env_file=env_file)

        assert settings.telegram_chat_id is None
        assert settings.telegram_bot_token is None
        assert settings.ai_model == "gpt-4o-mini"

    def test_chat_id_is_parsed(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)
        monkeypatch.delenv("REMINDER_HOURS", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("TELEGRAM_CHAT_ID=12345\nREMINDER_HOURS=[8, 20]\n")

        settings = Settings(_env_file=env_file)

        assert settings.telegram_chat_id == 12345
        assert settings.reminder_hours == [8, 20]
