"""Tests for AI reply validation and the litellm-backed parser."""

import pytest
from datetime import date

from finbot.ai.client import strip_code_fences
from finbot.exceptions import ParseError
from finbot.services.ai_service import (
    AITransactionParser,
    looks_like_transaction,
    normalize_amount,
    parse_model_reply,
    validate_guess,
)

TODAY = date(2024, 3, 10)


class FakeAIClient:
    """Stands in for AIClient; replays canned replies and records prompts."""

    def __init__(self, reply="", transcription="", error=None):
        self.reply = reply
        self.transcription = transcription
        self.error = error
        self.prompts = []

    async def complete(self, system_prompt, user_prompt, temperature=0.1, max_tokens=200):
        self.prompts.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.reply

    async def complete_vision(self, system_prompt, user_prompt, image_bytes, max_tokens=500):
        self.prompts.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.reply

    async def transcribe(self, audio_bytes, filename="voice.ogg", language="pt"):
        if self.error:
            raise self.error
        return self.transcription


class TestNormalizeAmount:
    """Test amount coercion."""

    @pytest.mark.parametrize("raw,expected", [
        (150, 150.0),
        (89.9, 89.9),
        ("89,90", 89.9),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("R$ 150", 150.0),
    ])
    def test_accepted(self, raw, expected):
        assert normalize_amount(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, True, "abc", ""])
    def test_rejected(self, raw):
        assert normalize_amount(raw) is None


class TestValidateGuess:
    """Test validation of decoded model replies."""

    def test_valid(self):
        guess = validate_guess({
            "type": "expense",
            "amount": 150,
            "category": "Alimentacao",
            "description": "Mercado",
            "date": "2024-03-09",
            "confidence": 0.9,
        }, TODAY)
        assert guess.type == "expense"
        assert guess.amount == 150.0
        assert guess.date == date(2024, 3, 9)
        assert guess.confidence == 0.9

    def test_defaults(self):
        """Missing date and description fall back to today and the category."""
        guess = validate_guess({"type": "INCOME", "amount": "5000", "category": "Salario"}, TODAY)
        assert guess.type == "income"
        assert guess.date == TODAY
        assert guess.description == "Salario"
        assert guess.confidence == 0.0

    @pytest.mark.parametrize("raw_date", ["15/03/2024", "2024-02-30", 20240301])
    def test_bad_date_becomes_today(self, raw_date):
        guess = validate_guess({"type": "expense", "amount": 10, "category": "Outros", "date": raw_date}, TODAY)
        assert guess.date == TODAY

    def test_confidence_clamped(self):
        guess = validate_guess({"type": "expense", "amount": 10, "category": "Outros", "confidence": 7}, TODAY)
        assert guess.confidence == 1.0

    def test_amount_rounded(self):
        guess = validate_guess({"type": "expense", "amount": "10,4567", "category": "Outros"}, TODAY)
        assert guess.amount == 10.46

    @pytest.mark.parametrize("payload", [
        {"error": "Nao foi possivel identificar uma transacao nesta imagem"},
        {"type": "transfer", "amount": 10, "category": "Outros"},
        {"type": "expense", "amount": 0, "category": "Outros"},
        {"type": "expense", "amount": -5, "category": "Outros"},
        {"type": "expense", "amount": "muito", "category": "Outros"},
        {"type": "expense", "amount": 10},
        ["not", "an", "object"],
    ])
    def test_rejected(self, payload):
        with pytest.raises(ParseError):
            validate_guess(payload, TODAY)


class TestParseModelReply:
    """Test raw reply decoding."""

    def test_code_fences(self):
        content = '```json\n{"type": "expense", "amount": 25, "category": "Transporte"}\n```'
        assert parse_model_reply(content, TODAY).category == "Transporte"

    def test_strip_plain_fences(self):
        assert strip_code_fences("```\n{}\n```") == "{}"

    @pytest.mark.parametrize("content", ["", "   ", "nao sei", '{"type": "expense",'])
    def test_invalid(self, content):
        with pytest.raises(ParseError):
            parse_model_reply(content, TODAY)


class TestLooksLikeTransaction:
    """Test the cheap pre-filter."""

    def test_positive(self):
        assert looks_like_transaction("gastei 50 no almoco")

    def test_needs_number(self):
        assert not looks_like_transaction("gastei no almoco")

    def test_needs_keyword(self):
        assert not looks_like_transaction("tenho 3 gatos")


class TestAITransactionParser:
    """Test the parser against a fake client."""

    @pytest.mark.asyncio
    async def test_parse_text_lists_categories(self, session_factory):
        """The system prompt carries the category names."""
        client = FakeAIClient(reply='{"type": "expense", "amount": 150, "category": "Alimentacao", "confidence": 0.9}')
        parser = AITransactionParser(session_factory, client=client)

        guess = await parser.parse_text("gastei 150 no mercado")
        assert guess.amount == 150.0
        system_prompt, user_prompt = client.prompts[0]
        assert "Alimentacao" in system_prompt
        assert "Salario" in system_prompt
        assert user_prompt == "gastei 150 no mercado"

    @pytest.mark.asyncio
    async def test_client_failure_is_parse_error(self, session_factory):
        """Network and provider errors surface as ParseError."""
        parser = AITransactionParser(session_factory, client=FakeAIClient(error=TimeoutError("slow")))
        with pytest.raises(ParseError):
            await parser.parse_text("gastei 150 no mercado")

    @pytest.mark.asyncio
    async def test_image_not_identified(self, session_factory):
        client = FakeAIClient(reply='{"error": "Nao foi possivel identificar uma transacao nesta imagem"}')
        parser = AITransactionParser(session_factory, client=client)
        with pytest.raises(ParseError):
            await parser.parse_image(b"\xff\xd8")

    @pytest.mark.asyncio
    async def test_transcribe(self, session_factory):
        parser = AITransactionParser(session_factory, client=FakeAIClient(transcription="  gastei 50 reais  "))
        assert await parser.transcribe(b"ogg") == "gastei 50 reais"

    @pytest.mark.asyncio
    async def test_empty_transcription(self, session_factory):
        parser = AITransactionParser(session_factory, client=FakeAIClient(transcription=""))
        with pytest.raises(ParseError):
            await parser.transcribe(b"ogg")
