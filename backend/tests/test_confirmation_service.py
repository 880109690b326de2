"""Tests for the pending store and the transaction confirmation flow."""

import pytest
from dataclasses import replace
from decimal import Decimal

from finbot.exceptions import NotFoundError
from finbot.models.category import Category
from finbot.models.transaction import Transaction, TransactionSource, TransactionType
from finbot.services.confirmation_service import (
    CANCELLED_MESSAGE,
    EXPIRED_MESSAGE,
    LOW_CONFIDENCE_WARNING,
    NOTHING_PENDING_MESSAGE,
    ConfirmationService,
)
from finbot.services.pending_store import PendingStore

CHAT_ID = 4242


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestPendingStore:
    """Test TTL and capacity bounds."""

    def test_put_get_pop(self):
        """Values round-trip until popped."""
        store = PendingStore(ttl_seconds=60, max_entries=10)
        store.put("a", 1)
        assert store.get("a") == 1
        assert "a" in store
        assert store.pop("a") == 1
        assert store.get("a") is None

    def test_expiry(self):
        """Entries older than the TTL are gone."""
        clock = FakeClock()
        store = PendingStore(ttl_seconds=60, max_entries=10, clock=clock)
        store.put("a", 1)
        clock.now += 59
        assert store.get("a") == 1
        clock.now += 1
        assert store.get("a") is None
        assert len(store) == 0

    def test_capacity_evicts_oldest(self):
        """A full store drops its oldest entry first."""
        store = PendingStore(ttl_seconds=60, max_entries=2)
        store.put("a", 1)
        store.put("b", 2)
        store.put("c", 3)
        assert "a" not in store
        assert store.get("b") == 2
        assert store.get("c") == 3
        assert len(store) == 2

    def test_replace_refreshes_position(self):
        """Re-putting a key makes it the newest entry."""
        store = PendingStore(ttl_seconds=60, max_entries=2)
        store.put("a", 1)
        store.put("b", 2)
        store.put("a", 10)
        store.put("c", 3)
        assert "b" not in store
        assert store.get("a") == 10


@pytest.fixture
def confirmations():
    return ConfirmationService(
        store=PendingStore(ttl_seconds=3600, max_entries=100),
        low_confidence_threshold=0.6,
    )


class TestConfirmationFlow:
    """Test propose, confirm, cancel and edit."""

    def test_confirm_persists_once(self, db_session, confirmations, market_guess, food_category):
        """Confirming saves exactly one transaction and clears the pending entry."""
        pending = confirmations.propose(db_session, CHAT_ID, market_guess, source_message_id=7)
        assert pending.category_name == "Alimentacao"
        confirmations.attach_prompt(CHAT_ID, 8)

        result = confirmations.confirm(db_session, CHAT_ID, prompt_message_id=8)
        assert result.saved is True
        assert "Transacao registrada com sucesso" in result.message

        txn = db_session.query(Transaction).one()
        assert txn.type == TransactionType.expense
        assert txn.amount == Decimal("150.00")
        assert txn.category_id == food_category.id
        assert txn.description == "Mercado"
        assert txn.source == TransactionSource.telegram
        assert txn.telegram_message_id == 7

        second = confirmations.confirm(db_session, CHAT_ID, prompt_message_id=8)
        assert second.saved is False
        assert second.message == NOTHING_PENDING_MESSAGE
        assert db_session.query(Transaction).count() == 1

    def test_confirm_without_pending(self, db_session, confirmations):
        """Confirming with nothing pending reports it gracefully."""
        result = confirmations.confirm(db_session, CHAT_ID)
        assert result.saved is False
        assert result.message == NOTHING_PENDING_MESSAGE

    def test_stale_prompt_is_expired(self, db_session, confirmations, market_guess):
        """A button from an older prompt does not confirm the newer guess."""
        confirmations.propose(db_session, CHAT_ID, market_guess)
        confirmations.attach_prompt(CHAT_ID, 10)
        newer = replace(market_guess, amount=80.0, description="Farmacia")
        confirmations.propose(db_session, CHAT_ID, newer)
        confirmations.attach_prompt(CHAT_ID, 11)

        result = confirmations.confirm(db_session, CHAT_ID, prompt_message_id=10)
        assert result.saved is False
        assert result.message == EXPIRED_MESSAGE
        assert db_session.query(Transaction).count() == 0

        result = confirmations.confirm(db_session, CHAT_ID, prompt_message_id=11)
        assert result.saved is True
        assert db_session.query(Transaction).one().description == "Farmacia"

    @pytest.mark.parametrize("action", ["cancel", "edit"])
    def test_stale_cancel_or_edit_keeps_newer_guess(self, db_session, confirmations, market_guess, action):
        """Cancel or edit from an older prompt leaves the newer guess pending."""
        confirmations.propose(db_session, CHAT_ID, market_guess)
        confirmations.attach_prompt(CHAT_ID, 100)
        confirmations.propose(db_session, CHAT_ID, replace(market_guess, description="Farmacia"))
        confirmations.attach_prompt(CHAT_ID, 101)

        assert getattr(confirmations, action)(CHAT_ID, prompt_message_id=100) == EXPIRED_MESSAGE
        assert confirmations.get(CHAT_ID).guess.description == "Farmacia"

        result = confirmations.confirm(db_session, CHAT_ID, prompt_message_id=101)
        assert result.saved is True

    def test_expired_entry(self, db_session, market_guess):
        """After the TTL the guess can no longer be confirmed."""
        clock = FakeClock()
        service = ConfirmationService(store=PendingStore(ttl_seconds=60, max_entries=10, clock=clock))
        service.propose(db_session, CHAT_ID, market_guess)
        clock.now += 61
        result = service.confirm(db_session, CHAT_ID)
        assert result.saved is False
        assert db_session.query(Transaction).count() == 0

    def test_cancel(self, db_session, confirmations, market_guess):
        """Cancel discards the guess without writing."""
        confirmations.propose(db_session, CHAT_ID, market_guess)
        assert confirmations.cancel(CHAT_ID) == CANCELLED_MESSAGE
        assert confirmations.get(CHAT_ID) is None
        assert db_session.query(Transaction).count() == 0

    def test_edit(self, db_session, confirmations, market_guess):
        """Edit discards the guess and asks for a new message."""
        confirmations.propose(db_session, CHAT_ID, market_guess)
        assert "Envie a mensagem novamente" in confirmations.edit(CHAT_ID)
        assert confirmations.get(CHAT_ID) is None

    def test_chats_are_independent(self, db_session, confirmations, market_guess):
        """Each chat holds its own pending transaction."""
        confirmations.propose(db_session, 1, market_guess)
        confirmations.propose(db_session, 2, replace(market_guess, amount=10.0))
        confirmations.cancel(1)
        assert confirmations.get(2).guess.amount == 10.0

    def test_unknown_category_uses_fallback(self, db_session, confirmations, market_guess):
        """An unrecognised category resolves to Outros."""
        pending = confirmations.propose(db_session, CHAT_ID, replace(market_guess, category="Astrologia"))
        assert pending.category_name == "Outros"

    def test_no_category_of_type(self, db_session, confirmations, market_guess):
        """With no active category for the type, nothing is held."""
        db_session.query(Category).update({Category.is_active: False})
        db_session.commit()
        with pytest.raises(NotFoundError):
            confirmations.propose(db_session, CHAT_ID, market_guess)
        assert confirmations.get(CHAT_ID) is None


class TestPromptText:
    """Test the confirmation prompt."""

    def test_lists_fields(self, db_session, confirmations, market_guess):
        """The prompt shows type, amount, category, description and date."""
        pending = confirmations.propose(db_session, CHAT_ID, market_guess)
        text = confirmations.prompt_text(pending)
        assert "Despesa" in text
        assert "R$ 150,00" in text
        assert "Alimentacao" in text
        assert "Mercado" in text
        assert "15/01/2024" in text
        assert LOW_CONFIDENCE_WARNING not in text

    def test_low_confidence_warning(self, db_session, confirmations, market_guess):
        """Uncertain readings carry a warning."""
        pending = confirmations.propose(db_session, CHAT_ID, replace(market_guess, confidence=0.3))
        assert LOW_CONFIDENCE_WARNING in confirmations.prompt_text(pending)

    def test_header(self, db_session, confirmations, market_guess):
        """A header is shown first when given."""
        pending = confirmations.propose(db_session, CHAT_ID, market_guess)
        assert confirmations.prompt_text(pending, header="🎤 *Transacao por audio*").startswith("🎤")
