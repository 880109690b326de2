"""
AI parsing of free text, receipt photos and voice notes into transaction
guesses.

The model is treated as an unreliable oracle: every reply goes through
``validate_guess`` and anything unusable raises ``ParseError``.
"""

import json
import logging
import re
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from finbot.ai.client import get_ai_client, strip_code_fences
from finbot.ai.prompts import RECEIPT_PARSING_SYSTEM, RECEIPT_PARSING_USER, TRANSACTION_PARSING_SYSTEM
from finbot.exceptions import ParseError
from finbot.models.category import CategoryType
from finbot.services.category_service import get_categories
from finbot.services.pending_store import TransactionGuess

logger = logging.getLogger(__name__)

TRANSACTION_KEYWORDS = [
    "gastei", "gasto", "paguei", "comprei", "compra", "despesa",
    "recebi", "ganhei", "salario", "vendi", "venda", "receita",
    "uber", "ifood", "mercado", "almoco", "jantar", "cafe",
    "conta", "boleto", "fatura", "luz", "agua", "internet",
    "reais", "r$", "brl",
]

VALID_TYPES = ("income", "expense")
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def looks_like_transaction(text: str) -> bool:
    """Cheap gate before calling the model: a number and a money keyword."""
    if not text:
        return False
    lowered = text.lower()
    has_number = any(ch.isdigit() for ch in text)
    return has_number and any(keyword in lowered for keyword in TRANSACTION_KEYWORDS)


def normalize_amount(value: Any) -> Optional[float]:
    """
    Coerce the model's amount into a float.

    Accepts numbers and pt-BR strings such as ``"89,90"``, ``"1.234,56"`` or
    ``"R$ 150"``. Returns None when nothing numeric can be read.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).replace("R$", "").replace(" ", "").strip()
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")

    try:
        return float(Decimal(text))
    except (InvalidOperation, ValueError):
        return None


def validate_guess(payload: Any, today: Optional[date] = None) -> TransactionGuess:
    """Check and normalise a decoded model reply."""
    today = today or date.today()
    if not isinstance(payload, dict):
        raise ParseError("Resposta da IA nao e um objeto JSON")
    if payload.get("error"):
        raise ParseError(str(payload["error"]))

    txn_type = str(payload.get("type") or "").strip().lower()
    if txn_type not in VALID_TYPES:
        raise ParseError(f"Tipo invalido: {payload.get('type')!r}")

    amount = normalize_amount(payload.get("amount"))
    if amount is None or amount <= 0:
        raise ParseError(f"Valor invalido: {payload.get('amount')!r}")

    category = str(payload.get("category") or "").strip()
    if not category:
        raise ParseError("Categoria ausente")

    raw_date = payload.get("date")
    txn_date = today
    if isinstance(raw_date, str) and ISO_DATE.match(raw_date):
        try:
            txn_date = date.fromisoformat(raw_date)
        except ValueError:
            txn_date = today

    description = str(payload.get("description") or "").strip() or category

    try:
        confidence = float(payload.get("confidence") or 0)
    except (TypeError, ValueError):
        confidence = 0.0
    confidence = min(max(confidence, 0.0), 1.0)

    return TransactionGuess(
        type=txn_type,
        amount=round(amount, 2),
        category=category,
        description=description,
        date=txn_date,
        confidence=confidence,
    )


def parse_model_reply(content: str, today: Optional[date] = None) -> TransactionGuess:
    """Strip fences, decode JSON and validate."""
    if not content or not content.strip():
        raise ParseError("Resposta vazia da IA")
    cleaned = strip_code_fences(content)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"JSON invalido: {cleaned[:200]}") from e
    return validate_guess(payload, today)


class TransactionParser:
    """Oracle interface used by the bot; implementations raise ParseError on failure."""

    async def parse_text(self, text: str) -> TransactionGuess:
        raise NotImplementedError

    async def parse_image(self, image_bytes: bytes) -> TransactionGuess:
        raise NotImplementedError

    async def transcribe(self, audio_bytes: bytes) -> str:
        raise NotImplementedError


class AITransactionParser(TransactionParser):
    """TransactionParser backed by the configured litellm provider."""

    def __init__(self, session_factory: Callable[[], Session], client=None):
        self.session_factory = session_factory
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_ai_client()
        return self._client

    def _category_names(self) -> Tuple[str, str]:
        with self.session_factory() as db:
            expense = _names(get_categories(db, CategoryType.expense))
            income = _names(get_categories(db, CategoryType.income))
        return expense, income

    async def parse_text(self, text: str) -> TransactionGuess:
        today = date.today()
        expense, income = self._category_names()
        system_prompt = TRANSACTION_PARSING_SYSTEM.format(
            today=today.isoformat(),
            yesterday=(today - timedelta(days=1)).isoformat(),
            expense_categories=expense,
            income_categories=income,
        )

        try:
            content = await self.client.complete(
                system_prompt=system_prompt,
                user_prompt=text,
                temperature=0.1,
                max_tokens=200
            )
        except Exception as e:
            logger.warning("Text parsing call failed: %s", e)
            raise ParseError("Falha ao consultar a IA") from e

        guess = parse_model_reply(content, today)
        logger.info("Parsed text into %s %.2f (%s)", guess.type, guess.amount, guess.category)
        return guess

    async def parse_image(self, image_bytes: bytes) -> TransactionGuess:
        today = date.today()
        expense, income = self._category_names()
        system_prompt = RECEIPT_PARSING_SYSTEM.format(
            today=today.isoformat(),
            expense_categories=expense,
            income_categories=income,
        )

        try:
            content = await self.client.complete_vision(
                system_prompt=system_prompt,
                user_prompt=RECEIPT_PARSING_USER,
                image_bytes=image_bytes,
                max_tokens=500
            )
        except Exception as e:
            logger.warning("Receipt parsing call failed: %s", e)
            raise ParseError("Falha ao consultar a IA") from e

        return parse_model_reply(content, today)

    async def transcribe(self, audio_bytes: bytes) -> str:
        try:
            text = await self.client.transcribe(audio_bytes, filename="voice.ogg", language="pt")
        except Exception as e:
            logger.warning("Transcription call failed: %s", e)
            raise ParseError("Falha ao transcrever o audio") from e

        text = (text or "").strip()
        if not text:
            raise ParseError("Transcricao vazia")
        return text


def _names(categories: List) -> str:
    return ", ".join(c.name for c in categories)
