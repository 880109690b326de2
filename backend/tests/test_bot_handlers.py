"""Tests for the Telegram handlers, driven with mocked updates."""

import threading

import pytest
from unittest.mock import AsyncMock, MagicMock

from finbot.bot import handlers, replies
from finbot.bot.keyboards import CANCEL, CONFIRM, MENU_BALANCE
from finbot.models.transaction import Transaction, TransactionSource
from finbot.services.bill_reminder_service import BillReminderService
from finbot.services.confirmation_service import EXPIRED_MESSAGE, NOTHING_PENDING_MESSAGE, ConfirmationService
from finbot.services.pending_store import PendingStore

CHAT_ID = 4242
PROMPT_ID = 77


def make_update(text=None, message_id=5):
    update = MagicMock()
    update.effective_chat.id = CHAT_ID
    message = update.message
    message.text = text
    message.message_id = message_id
    message.reply_text = AsyncMock(return_value=MagicMock(message_id=PROMPT_ID))
    update.effective_message = message
    return update


def make_callback_update(data, message_id=PROMPT_ID):
    update = MagicMock()
    update.effective_chat.id = CHAT_ID
    query = update.callback_query
    query.data = data
    query.message.message_id = message_id
    query.answer = AsyncMock()
    query.edit_message_text = AsyncMock()
    return update


@pytest.fixture
def context(session_factory, fake_parser, sender):
    context = MagicMock()
    context.bot.send_chat_action = AsyncMock()
    context.bot.send_message = AsyncMock()
    context.bot_data = {
        "session_factory": session_factory,
        "parser": fake_parser,
        "confirmations": ConfirmationService(store=PendingStore(ttl_seconds=3600, max_entries=10)),
        "reminders": BillReminderService(sender, chat_id=CHAT_ID),
    }
    return context


def sent_text(mock):
    return mock.await_args.args[0]


class TestTextMessages:
    """Test free-text routing."""

    @pytest.mark.asyncio
    async def test_transaction_then_confirm(self, db_session, context):
        """gastei 150 no mercado -> prompt -> confirm saves one expense."""
        update = make_update("gastei 150 no mercado")
        await handlers.handle_text(update, context)

        prompt = sent_text(update.message.reply_text)
        assert "Confirma o lancamento" in prompt
        assert "R$ 150,00" in prompt
        assert "reply_markup" in update.message.reply_text.await_args.kwargs
        assert context.bot_data["confirmations"].get(CHAT_ID).prompt_message_id == PROMPT_ID

        press = make_callback_update(CONFIRM)
        await handlers.handle_callback(press, context)
        assert "Transacao registrada" in sent_text(press.callback_query.edit_message_text)

        txn = db_session.query(Transaction).one()
        assert txn.source == TransactionSource.telegram
        assert txn.telegram_message_id == 5

        again = make_callback_update(CONFIRM)
        await handlers.handle_callback(again, context)
        assert sent_text(again.callback_query.edit_message_text) == NOTHING_PENDING_MESSAGE
        assert db_session.query(Transaction).count() == 1

    @pytest.mark.asyncio
    async def test_cancel(self, db_session, context):
        await handlers.handle_text(make_update("gastei 150 no mercado"), context)
        press = make_callback_update(CANCEL)
        await handlers.handle_callback(press, context)
        assert "cancelada" in sent_text(press.callback_query.edit_message_text)
        assert db_session.query(Transaction).count() == 0

    @pytest.mark.asyncio
    async def test_cancel_on_older_prompt(self, db_session, context):
        """A cancel press on a superseded prompt keeps the current guess."""
        await handlers.handle_text(make_update("gastei 150 no mercado"), context)
        press = make_callback_update(CANCEL, message_id=PROMPT_ID - 1)
        await handlers.handle_callback(press, context)
        assert sent_text(press.callback_query.edit_message_text) == EXPIRED_MESSAGE
        assert context.bot_data["confirmations"].get(CHAT_ID) is not None

    @pytest.mark.asyncio
    async def test_parse_failure(self, db_session, context):
        """An oracle failure leaves nothing pending and asks to retry."""
        update = make_update("gastei 99 em algo estranho")
        await handlers.handle_text(update, context)
        assert sent_text(update.message.reply_text) == handlers.TEXT_PARSE_FAILED
        assert context.bot_data["confirmations"].get(CHAT_ID) is None

    @pytest.mark.asyncio
    async def test_unrecognised(self, context):
        update = make_update("bom dia")
        await handlers.handle_text(update, context)
        assert sent_text(update.message.reply_text) == replies.UNRECOGNIZED
        assert context.bot_data["parser"].calls == []

    @pytest.mark.asyncio
    async def test_savings_box_phrase(self, context):
        update = make_update("criar caixinha VIAGEM")
        await handlers.handle_text(update, context)
        assert "Caixinha *VIAGEM* criada" in sent_text(update.message.reply_text)


class TestMedia:
    """Test voice and photo messages."""

    @pytest.mark.asyncio
    async def test_voice_too_long(self, context):
        update = make_update()
        update.message.voice.duration = 600
        await handlers.handle_voice(update, context)
        assert "Audio muito longo" in sent_text(update.message.reply_text)
        assert context.bot_data["parser"].calls == []

    @pytest.mark.asyncio
    async def test_voice_transcribed_and_proposed(self, context, make_parser, market_guess):
        context.bot_data["parser"] = make_parser(
            guesses={"gastei 150 no mercado": market_guess},
            transcription="gastei 150 no mercado",
        )
        update = make_update()
        update.message.voice.duration = 5
        voice_file = MagicMock()
        voice_file.download_as_bytearray = AsyncMock(return_value=bytearray(b"ogg"))
        update.message.voice.get_file = AsyncMock(return_value=voice_file)

        await handlers.handle_voice(update, context)

        texts = [call.args[0] for call in update.message.reply_text.await_args_list]
        assert any(t.startswith("📝 Entendi: \"gastei 150 no mercado\"") for t in texts)
        assert texts[-1].startswith("🎤 *Transacao por audio*")
        assert context.bot_data["confirmations"].get(CHAT_ID).source == TransactionSource.telegram_voice.value

    @pytest.mark.asyncio
    async def test_photo_not_identified(self, context):
        update = make_update()
        photo = MagicMock()
        photo_file = MagicMock()
        photo_file.download_as_bytearray = AsyncMock(return_value=bytearray(b"jpg"))
        photo.get_file = AsyncMock(return_value=photo_file)
        update.message.photo = [MagicMock(), photo]

        await handlers.handle_photo(update, context)

        photo.get_file.assert_awaited_once()
        assert sent_text(update.message.reply_text) == handlers.PHOTO_PARSE_FAILED


class TestButtons:
    """Test menu and bill reminder buttons."""

    @pytest.mark.asyncio
    async def test_menu_balance(self, context):
        press = make_callback_update(MENU_BALANCE)
        await handlers.handle_callback(press, context)
        assert "Saldo de" in context.bot.send_message.await_args.kwargs["text"]

    @pytest.mark.asyncio
    async def test_bill_paid(self, db_session, context, sample_bill):
        press = make_callback_update(f"bill_paid:{sample_bill.id}")
        await handlers.handle_callback(press, context)
        assert "Conta paga" in sent_text(press.callback_query.edit_message_text)
        assert db_session.query(Transaction).count() == 1

    @pytest.mark.asyncio
    async def test_bill_unknown(self, context):
        press = make_callback_update("bill_snooze:missing")
        await handlers.handle_callback(press, context)
        press.callback_query.answer.assert_awaited_once_with(text="Conta nao encontrada", show_alert=True)
        press.callback_query.edit_message_text.assert_not_awaited()


class TestSessions:
    """Test how handlers reach the database."""

    @pytest.mark.asyncio
    async def test_database_work_runs_in_worker_thread(self, context):
        """Queries run off the event loop thread with a session from the factory."""
        seen = {}

        def work(db):
            seen["thread"] = threading.get_ident()
            seen["db"] = db
            return "ok"

        assert await handlers._in_session(context, work) == "ok"
        assert seen["thread"] != threading.get_ident()
        assert seen["db"] is not None
