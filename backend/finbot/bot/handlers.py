"""
python-telegram-bot handlers.

Shared services are read from ``context.bot_data``:
``confirmations`` (ConfirmationService), ``parser`` (TransactionParser),
``reminders`` (BillReminderService) and ``session_factory``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from telegram import Update
from telegram.constants import ChatAction, ParseMode
from telegram.ext import ContextTypes

from finbot.bot import replies
from finbot.bot.intents import BillIntent, SavingsBoxIntent, TransactionIntent, classify_message
from finbot.bot.keyboards import (
    CANCEL,
    CONFIRM,
    EDIT,
    MENU_BALANCE,
    MENU_BILLS,
    MENU_CATEGORIES,
    MENU_RECENT,
    MENU_SAVINGS_BOXES,
    MENU_SUMMARY,
    confirm_transaction_keyboard,
    main_menu_keyboard,
)
from finbot.config import settings
from finbot.exceptions import NotFoundError, ParseError
from finbot.models.transaction import TransactionSource
from finbot.services.bill_reminder_service import PAID_CALLBACK, SNOOZE_CALLBACK
from finbot.services.pending_store import TransactionGuess

logger = logging.getLogger(__name__)

TEXT_PARSE_FAILED = (
    "❌ Nao consegui interpretar sua mensagem.\n\nTente ser mais especifico, por exemplo:\n"
    "• \"gastei 150 no mercado\"\n• \"recebi 5000 de salario\""
)
PHOTO_PARSE_FAILED = (
    "❌ Nao consegui identificar uma transacao nesta imagem.\n\nEnvie uma foto clara de:\n"
    "• Comprovante PIX\n• Nota fiscal\n• Recibo de pagamento\n• Fatura"
)
GENERIC_ERROR = "❌ Erro ao processar. Tente novamente."

MENU_REPLIES = {
    MENU_BALANCE: replies.balance_text,
    MENU_SUMMARY: replies.summary_text,
    MENU_RECENT: replies.recent_transactions_text,
    MENU_CATEGORIES: replies.categories_text,
    MENU_SAVINGS_BOXES: replies.savings_boxes_text,
    MENU_BILLS: replies.bills_text,
}


async def _reply(update: Update, text: str, **kwargs) -> None:
    await update.effective_message.reply_text(text, parse_mode=ParseMode.MARKDOWN, **kwargs)


async def _in_session(context: ContextTypes.DEFAULT_TYPE, work: Callable) -> Any:
    """Run ``work(db)`` with its own session in a worker thread, off the event loop."""
    def run():
        with context.bot_data["session_factory"]() as db:
            return work(db)

    return await asyncio.to_thread(run)


async def _reply_with(update: Update, context: ContextTypes.DEFAULT_TYPE, build: Callable) -> None:
    text = await _in_session(context, build)
    await _reply(update, text)


# Commands

async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(update, replies.WELCOME, reply_markup=main_menu_keyboard())


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(update, replies.HELP)


async def balance_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.balance_text)


async def summary_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.summary_text)


async def recent_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.recent_transactions_text)


async def categories_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.categories_text)


async def savings_boxes_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.savings_boxes_text)


async def bills_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply_with(update, context, replies.bills_text)


# Messages

async def _propose(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    guess: TransactionGuess,
    source: TransactionSource,
    header: Optional[str] = None
) -> None:
    """Hold the guess as the chat's pending transaction and show the confirm keyboard."""
    confirmations = context.bot_data["confirmations"]
    chat_id = update.effective_chat.id

    source_message_id = update.effective_message.message_id
    try:
        pending = await _in_session(context, lambda db: confirmations.propose(
            db, chat_id, guess, source=source, source_message_id=source_message_id
        ))
    except NotFoundError as e:
        await _reply(update, e.message)
        return

    prompt = await update.effective_message.reply_text(
        confirmations.prompt_text(pending, header=header),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=confirm_transaction_keyboard(),
    )
    confirmations.attach_prompt(chat_id, prompt.message_id)


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    text = update.message.text or ""
    intent = classify_message(text)

    if isinstance(intent, SavingsBoxIntent):
        await _reply_with(update, context, lambda db: replies.savings_box_reply(db, intent))
        return
    if isinstance(intent, BillIntent):
        await _reply_with(update, context, lambda db: replies.bill_reply(db, intent))
        return
    if not isinstance(intent, TransactionIntent):
        await _reply(update, replies.UNRECOGNIZED)
        return

    await context.bot.send_chat_action(chat_id=update.effective_chat.id, action=ChatAction.TYPING)
    try:
        guess = await context.bot_data["parser"].parse_text(intent.text)
    except ParseError as e:
        logger.info("Could not parse message %r: %s", text, e)
        await _reply(update, TEXT_PARSE_FAILED)
        return

    await _propose(update, context, guess, TransactionSource.telegram)


async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    voice = update.message.voice
    if voice is None:
        return
    if voice.duration > settings.voice_max_duration_seconds:
        await _reply(update, f"⚠️ Audio muito longo. Envie audios de ate {settings.voice_max_duration_seconds} segundos.")
        return

    await _reply(update, "🎤 Transcrevendo audio...")
    await context.bot.send_chat_action(chat_id=update.effective_chat.id, action=ChatAction.TYPING)

    parser = context.bot_data["parser"]
    file = await voice.get_file()
    audio_bytes = bytes(await file.download_as_bytearray())

    try:
        transcription = await parser.transcribe(audio_bytes)
    except ParseError as e:
        logger.info("Transcription failed: %s", e)
        await _reply(update, "❌ Nao consegui transcrever o audio. Tente novamente ou envie por texto.")
        return

    await update.message.reply_text(f"📝 Entendi: \"{transcription}\"\n\nProcessando...")

    try:
        guess = await parser.parse_text(transcription)
    except ParseError as e:
        logger.info("Could not parse transcription %r: %s", transcription, e)
        await update.message.reply_text(
            f"❌ Nao consegui identificar uma transacao no audio.\n\nVoce disse: \"{transcription}\"\n\n"
            "Tente dizer algo como: \"gastei 50 reais no mercado\""
        )
        return

    await _propose(update, context, guess, TransactionSource.telegram_voice, header="🎤 *Transacao por audio*")


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    photos = update.message.photo
    if not photos:
        return

    await _reply(update, "🔍 Analisando comprovante...")
    await context.bot.send_chat_action(chat_id=update.effective_chat.id, action=ChatAction.TYPING)

    # Largest resolution comes last
    file = await photos[-1].get_file()
    image_bytes = bytes(await file.download_as_bytearray())

    try:
        guess = await context.bot_data["parser"].parse_image(image_bytes)
    except ParseError as e:
        logger.info("Could not read receipt: %s", e)
        await _reply(update, PHOTO_PARSE_FAILED)
        return

    await _propose(update, context, guess, TransactionSource.telegram_photo, header="📸 *Transacao do comprovante*")


# Buttons

async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    data = query.data or ""
    chat_id = update.effective_chat.id

    if data.startswith(f"{PAID_CALLBACK}:") or data.startswith(f"{SNOOZE_CALLBACK}:"):
        await _handle_bill_callback(update, context, data)
        return

    await query.answer()
    confirmations = context.bot_data["confirmations"]

    if data == CONFIRM:
        prompt_message_id = query.message.message_id
        result = await _in_session(
            context, lambda db: confirmations.confirm(db, chat_id, prompt_message_id=prompt_message_id)
        )
        await query.edit_message_text(result.message, parse_mode=ParseMode.MARKDOWN)
    elif data == CANCEL:
        await query.edit_message_text(confirmations.cancel(chat_id, prompt_message_id=query.message.message_id))
    elif data == EDIT:
        await query.edit_message_text(confirmations.edit(chat_id, prompt_message_id=query.message.message_id))
    elif data in MENU_REPLIES:
        text = await _in_session(context, MENU_REPLIES[data])
        await context.bot.send_message(chat_id=chat_id, text=text, parse_mode=ParseMode.MARKDOWN)
    else:
        logger.warning("Unknown callback data: %s", data)


async def _handle_bill_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, data: str) -> None:
    query = update.callback_query
    reminders = context.bot_data["reminders"]

    try:
        text = await _in_session(context, lambda db: reminders.handle_callback(db, data))
    except NotFoundError as e:
        await query.answer(text=e.message, show_alert=True)
        return

    await query.answer()
    await query.edit_message_text(text, parse_mode=ParseMode.MARKDOWN)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error("Error while handling update", exc_info=context.error)
    if isinstance(update, Update) and update.effective_chat:
        await context.bot.send_message(chat_id=update.effective_chat.id, text=GENERIC_ERROR)


HandlerFunc = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]

COMMANDS: Dict[str, HandlerFunc] = {
    "start": start_command,
    "ajuda": help_command,
    "help": help_command,
    "saldo": balance_command,
    "resumo": summary_command,
    "ultimas": recent_command,
    "categorias": categories_command,
    "caixinhas": savings_boxes_command,
    "contas": bills_command,
}
