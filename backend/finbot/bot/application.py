"""
Telegram application wiring and its start/stop hooks for the API lifespan.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session
from telegram import Bot
from telegram.constants import ParseMode
from telegram.ext import Application, ApplicationBuilder, CallbackQueryHandler, CommandHandler, MessageHandler, filters

from finbot.bot import handlers
from finbot.bot.keyboards import bill_reminder_keyboard
from finbot.config import settings
from finbot.database import SessionLocal
from finbot.services.ai_service import AITransactionParser, TransactionParser
from finbot.services.bill_reminder_service import BillReminderService, ReminderSender
from finbot.services.confirmation_service import ConfirmationService

logger = logging.getLogger(__name__)


def make_reminder_sender(bot: Bot) -> ReminderSender:
    """Deliver a reminder with the paid/snooze buttons and return the message id."""

    async def send(chat_id: int, text: str, bill_id: str) -> int:
        message = await bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=bill_reminder_keyboard(bill_id),
        )
        return message.message_id

    return send


def build_application(
    token: str,
    parser: Optional[TransactionParser] = None,
    confirmations: Optional[ConfirmationService] = None,
    session_factory: Callable[[], Session] = SessionLocal
) -> Application:
    application = ApplicationBuilder().token(token).build()

    application.bot_data["session_factory"] = session_factory
    application.bot_data["parser"] = parser or AITransactionParser(session_factory)
    application.bot_data["confirmations"] = confirmations or ConfirmationService()
    application.bot_data["reminders"] = BillReminderService(send=make_reminder_sender(application.bot))

    for command, callback in handlers.COMMANDS.items():
        application.add_handler(CommandHandler(command, callback))
    application.add_handler(CallbackQueryHandler(handlers.handle_callback))
    application.add_handler(MessageHandler(filters.VOICE, handlers.handle_voice))
    application.add_handler(MessageHandler(filters.PHOTO, handlers.handle_photo))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handlers.handle_text))
    application.add_error_handler(handlers.error_handler)
    return application


async def start_bot() -> Optional[Application]:
    """Start polling in the running event loop. Returns None when the bot is disabled."""
    if not settings.telegram_enabled:
        logger.info("Telegram bot disabled by configuration")
        return None
    if not settings.telegram_bot_token:
        logger.warning("TELEGRAM_BOT_TOKEN not configured, Telegram bot will not start")
        return None

    application = build_application(settings.telegram_bot_token)
    await application.initialize()
    await application.start()
    await application.updater.start_polling(drop_pending_updates=True)
    logger.info("Telegram bot started")
    return application


async def stop_bot(application: Optional[Application]) -> None:
    if application is None:
        return
    await application.updater.stop()
    await application.stop()
    await application.shutdown()
    logger.info("Telegram bot stopped")
