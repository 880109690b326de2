"""
Inline keyboards and their callback tokens.
"""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from finbot.services.bill_reminder_service import PAID_CALLBACK, SNOOZE_CALLBACK

CONFIRM = "confirm"
EDIT = "edit"
CANCEL = "cancel"

MENU_BALANCE = "menu_saldo"
MENU_SUMMARY = "menu_resumo"
MENU_RECENT = "menu_ultimas"
MENU_CATEGORIES = "menu_categorias"
MENU_SAVINGS_BOXES = "menu_caixinhas"
MENU_BILLS = "menu_contas"


def confirm_transaction_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("✓ Confirmar", callback_data=CONFIRM),
            InlineKeyboardButton("✏️ Editar", callback_data=EDIT),
            InlineKeyboardButton("❌ Cancelar", callback_data=CANCEL),
        ]
    ])


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("💰 Saldo", callback_data=MENU_BALANCE),
            InlineKeyboardButton("📊 Resumo", callback_data=MENU_SUMMARY),
        ],
        [
            InlineKeyboardButton("📝 Ultimas", callback_data=MENU_RECENT),
            InlineKeyboardButton("📁 Categorias", callback_data=MENU_CATEGORIES),
        ],
        [
            InlineKeyboardButton("🐷 Caixinhas", callback_data=MENU_SAVINGS_BOXES),
            InlineKeyboardButton("🔔 Contas", callback_data=MENU_BILLS),
        ],
    ])


def bill_reminder_keyboard(bill_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("✅ Ja paguei", callback_data=f"{PAID_CALLBACK}:{bill_id}"),
            InlineKeyboardButton("⏰ Lembrar depois", callback_data=f"{SNOOZE_CALLBACK}:{bill_id}"),
        ]
    ])
