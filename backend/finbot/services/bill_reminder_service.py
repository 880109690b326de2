"""
Bill reminders: the periodic scan, the reminder texts and the paid/snooze
callbacks.

Delivery goes through an injected async ``send`` callable so the pass can be
driven without Telegram.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from finbot.config import settings
from finbot.exceptions import NotFoundError
from finbot.models.bill import Bill
from finbot.services import bill_service
from finbot.services.pending_store import PendingBillConfirmation, PendingStore
from finbot.utils.formatters import format_currency

logger = logging.getLogger(__name__)

# (chat_id, text, bill_id) -> id of the sent message
ReminderSender = Callable[[int, str, str], Awaitable[int]]

PAID_CALLBACK = "bill_paid"
SNOOZE_CALLBACK = "bill_snooze"


def reminder_text(bill: Bill, days_until_due: int) -> str:
    if days_until_due == 0:
        lines = ["🔔 *CONTA VENCE HOJE!*"]
    elif days_until_due == 1:
        lines = ["⚠️ *Lembrete: Conta vence amanha!*"]
    else:
        lines = ["📅 *Lembrete de conta a pagar*"]

    lines.append("")
    lines.append(f"📝 *{bill.name}*")
    lines.append(f"💰 Valor: *{format_currency(bill.amount)}*")
    lines.append(f"📅 Vencimento: dia *{bill.due_day}*")
    if bill.category_name:
        lines.append(f"🏷️ Categoria: {bill.category_name}")
    if bill.description:
        lines.append(f"📋 {bill.description}")
    return "\n".join(lines)


def _due_reminders(db: Session, today: date) -> List[Tuple[str, str, str]]:
    """(bill id, name, reminder text) for every bill eligible today."""
    return [
        (bill.id, bill.name, reminder_text(bill, bill_service.days_until_due(bill.due_day, today)))
        for bill in bill_service.get_bills(db)
        if bill_service.is_due_for_reminder(bill, today)
    ]


class BillReminderService:
    """Sends reminders and reacts to the buttons attached to them."""

    def __init__(self, send: ReminderSender, chat_id: Optional[int] = None, store: Optional[PendingStore] = None):
        self.send = send
        self.chat_id = chat_id if chat_id is not None else settings.telegram_chat_id
        self.pending: PendingStore[str, PendingBillConfirmation] = store or PendingStore(
            ttl_seconds=settings.pending_bill_ttl_seconds,
            max_entries=settings.pending_max_entries,
        )

    async def run_pass(self, db: Session, today: Optional[date] = None) -> List[str]:
        """
        Remind about every eligible bill once.

        A failed delivery is logged and the pass moves on to the next bill.
        Returns the ids of the bills reminded.
        """
        if not self.chat_id:
            logger.warning("TELEGRAM_CHAT_ID not configured, skipping bill reminders")
            return []

        today = today or date.today()
        reminded = []
        due = await asyncio.to_thread(_due_reminders, db, today)
        for bill_id, name, text in due:
            try:
                message_id = await self.send(self.chat_id, text, bill_id)
            except Exception:
                logger.exception("Failed to send reminder for bill %s", name)
                continue

            self.pending.put(bill_id, PendingBillConfirmation(message_id=message_id, chat_id=self.chat_id))
            await asyncio.to_thread(bill_service.update_last_reminder_date, db, bill_id, today)
            reminded.append(bill_id)

        if reminded:
            logger.info("Sent %d bill reminder(s)", len(reminded))
        return reminded

    def handle_paid(self, db: Session, bill_id: str, today: Optional[date] = None) -> str:
        """Mark the bill paid, register the expense and return the new message text."""
        bill = bill_service.mark_paid(db, bill_id, paid_date=today, register_expense=True)
        self.pending.pop(bill_id)
        return (
            "✅ *Conta paga!*\n\n"
            f"📝 {bill.name}\n"
            f"💰 {format_currency(bill.amount)}\n\n"
            "_Lancado como despesa automaticamente._"
        )

    def handle_snooze(self, db: Session, bill_id: str, today: Optional[date] = None) -> str:
        bill = bill_service.snooze(db, bill_id, today)
        return (
            "⏰ *Lembrete adiado*\n\n"
            f"📝 {bill.name}\n"
            f"💰 {format_currency(bill.amount)}\n"
            f"📅 Vence dia {bill.due_day}\n\n"
            "_Vou lembrar novamente amanha._"
        )

    def handle_callback(self, db: Session, data: str, today: Optional[date] = None) -> str:
        """Dispatch ``bill_paid:<id>`` / ``bill_snooze:<id>``; unknown bills raise NotFoundError."""
        action, _, bill_id = data.partition(":")
        if not bill_id:
            raise NotFoundError("Conta nao encontrada")
        if action == PAID_CALLBACK:
            return self.handle_paid(db, bill_id, today)
        if action == SNOOZE_CALLBACK:
            return self.handle_snooze(db, bill_id, today)
        raise NotFoundError("Conta nao encontrada")


class BillReminderScheduler:
    """Runs a reminder pass every interval, during the configured hours only."""

    def __init__(
        self,
        service: BillReminderService,
        session_factory: Callable[[], Session],
        hours: Optional[Iterable[int]] = None,
        interval_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.service = service
        self.session_factory = session_factory
        self.hours = set(hours if hours is not None else settings.reminder_hours)
        self.interval_seconds = interval_seconds or settings.reminder_check_interval_seconds
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    def should_run(self, now: Optional[datetime] = None) -> bool:
        return (now or self.clock()).hour in self.hours

    async def tick(self) -> List[str]:
        """One wake-up: run a pass if the hour allows it."""
        now = self.clock()
        if not self.should_run(now):
            return []

        with self.session_factory() as db:
            try:
                return await self.service.run_pass(db, now.date())
            except Exception:
                logger.exception("Bill reminder pass failed")
                return []

    def next_delay(self, elapsed: float) -> float:
        """Seconds to sleep after a pass that took ``elapsed`` seconds; wake-ups stay on a fixed cadence."""
        return max(0.0, self.interval_seconds - elapsed)

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            await self.tick()
            await asyncio.sleep(self.next_delay(loop.time() - started))

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Bill reminder scheduler started (hours %s)", sorted(self.hours))

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Bill reminder scheduler stopped")
