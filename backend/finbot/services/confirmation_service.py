"""
Pending-transaction confirmation flow.

A parsed guess is held per chat until the user presses confirm, edit or
cancel. Nothing here talks to Telegram; the bot handlers render the texts
returned by these methods.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from finbot.config import settings
from finbot.exceptions import NotFoundError
from finbot.models.category import CategoryType
from finbot.models.transaction import Transaction, TransactionSource, TransactionType
from finbot.services.category_service import find_best_match
from finbot.services.pending_store import PendingStore, PendingTransaction, TransactionGuess
from finbot.services.transaction_service import create_transaction
from finbot.utils.formatters import format_currency, format_date

logger = logging.getLogger(__name__)

NOTHING_PENDING_MESSAGE = "Nenhum lancamento pendente para confirmar."
EXPIRED_MESSAGE = "⌛ Este lancamento expirou. Envie a mensagem novamente."
CANCELLED_MESSAGE = "❌ Transacao cancelada."
EDIT_MESSAGE = "✏️ Lancamento cancelado.\n\nEnvie a mensagem novamente com os dados corretos."
CATEGORY_NOT_FOUND_MESSAGE = "❌ Categoria nao encontrada. Tente novamente."
LOW_CONFIDENCE_WARNING = "⚠️ _Nao tenho certeza desta leitura, confira os dados antes de confirmar._"


@dataclass
class ConfirmationResult:
    """Outcome of a confirm press."""

    saved: bool
    message: str
    transaction: Optional[Transaction] = None


class ConfirmationService:
    """Holds at most one pending transaction per chat."""

    def __init__(self, store: Optional[PendingStore] = None, low_confidence_threshold: Optional[float] = None):
        self.store: PendingStore[int, PendingTransaction] = store or PendingStore(
            ttl_seconds=settings.pending_ttl_seconds,
            max_entries=settings.pending_max_entries,
        )
        if low_confidence_threshold is None:
            low_confidence_threshold = settings.ai_low_confidence_threshold
        self.low_confidence_threshold = low_confidence_threshold

    def propose(
        self,
        db: Session,
        chat_id: int,
        guess: TransactionGuess,
        source: TransactionSource = TransactionSource.telegram,
        source_message_id: Optional[int] = None
    ) -> PendingTransaction:
        """
        Resolve the guess's category and hold it for confirmation.

        A newer proposal replaces the chat's previous one.
        """
        category_type = CategoryType.income if guess.type == TransactionType.income.value else CategoryType.expense
        category = find_best_match(db, guess.category, category_type)
        if category is None:
            raise NotFoundError(CATEGORY_NOT_FOUND_MESSAGE)

        pending = PendingTransaction(
            guess=guess,
            category_id=category.id,
            category_name=category.name,
            source=source.value,
            source_message_id=source_message_id,
        )
        self.store.put(chat_id, pending)
        return pending

    def attach_prompt(self, chat_id: int, prompt_message_id: int) -> None:
        """Remember which bot message carries the confirm keyboard."""
        pending = self.store.get(chat_id)
        if pending is not None:
            pending.prompt_message_id = prompt_message_id

    def get(self, chat_id: int) -> Optional[PendingTransaction]:
        return self.store.get(chat_id)

    def prompt_text(self, pending: PendingTransaction, header: Optional[str] = None) -> str:
        guess = pending.guess
        is_income = guess.type == TransactionType.income.value
        type_label = "Receita" if is_income else "Despesa"
        type_icon = "📈" if is_income else "📉"

        lines = [header, ""] if header else []
        lines += [
            "✅ Entendi! Confirma o lancamento?",
            "",
            f"{type_icon} *{type_label}:* {format_currency(guess.amount)}",
            f"📁 *Categoria:* {pending.category_name}",
            f"📝 *{guess.description}*",
            f"📅 *Data:* {format_date(guess.date)}",
        ]
        if guess.confidence < self.low_confidence_threshold:
            lines.extend(["", LOW_CONFIDENCE_WARNING])
        return "\n".join(lines)

    def confirm(self, db: Session, chat_id: int, prompt_message_id: Optional[int] = None) -> ConfirmationResult:
        """
        Persist the chat's pending transaction.

        When ``prompt_message_id`` is given and the pending entry belongs to a
        newer prompt, the press is treated as expired and nothing is saved.
        """
        pending = self.store.get(chat_id)
        if pending is None:
            return ConfirmationResult(saved=False, message=NOTHING_PENDING_MESSAGE)

        if _is_stale(pending, prompt_message_id):
            return ConfirmationResult(saved=False, message=EXPIRED_MESSAGE)

        guess = pending.guess
        transaction = create_transaction(
            db,
            transaction_type=TransactionType(guess.type),
            amount=guess.amount,
            category_id=pending.category_id,
            txn_date=guess.date or date.today(),
            description=guess.description,
            source=TransactionSource(pending.source),
            telegram_message_id=pending.source_message_id,
        )
        self.store.pop(chat_id)
        logger.info("Chat %s confirmed transaction %s", chat_id, transaction.id)

        return ConfirmationResult(
            saved=True,
            message=(
                "✅ *Transacao registrada com sucesso!*\n\n"
                f"💰 {format_currency(guess.amount)}\n📝 {guess.description}"
            ),
            transaction=transaction,
        )

    def cancel(self, chat_id: int, prompt_message_id: Optional[int] = None) -> str:
        """Drop the pending entry; a press on an older prompt leaves it alone."""
        if _is_stale(self.store.get(chat_id), prompt_message_id):
            return EXPIRED_MESSAGE
        self.store.pop(chat_id)
        return CANCELLED_MESSAGE

    def edit(self, chat_id: int, prompt_message_id: Optional[int] = None) -> str:
        if _is_stale(self.store.get(chat_id), prompt_message_id):
            return EXPIRED_MESSAGE
        self.store.pop(chat_id)
        return EDIT_MESSAGE


def _is_stale(pending: Optional[PendingTransaction], prompt_message_id: Optional[int]) -> bool:
    """Whether the pressed prompt was superseded by a newer one for the same chat."""
    return (
        pending is not None
        and prompt_message_id is not None
        and pending.prompt_message_id is not None
        and pending.prompt_message_id != prompt_message_id
    )
