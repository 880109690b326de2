"""
Reply texts for commands and the savings box / bill phrases.

Each function takes a session and returns Markdown, so handlers only have to
send it.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from finbot.bot.intents import BillIntent, SavingsBoxIntent
from finbot.config import settings
from finbot.exceptions import FinBotError, InsufficientFundsError
from finbot.models.category import CategoryType
from finbot.models.transaction import TransactionType
from finbot.services import bill_service, category_service, savings_box_service, transaction_service
from finbot.utils.dates import days_remaining_in_month, month_name
from finbot.utils.formatters import format_currency, format_date, progress_percent

logger = logging.getLogger(__name__)

SEPARATOR = "━━━━━━━━━━━━━━━━━━"

WELCOME = """🤖 *Bem-vindo ao FinBot!*

Seu assistente financeiro pessoal.

*Como usar:*
Envie mensagens naturais sobre suas transacoes:
• "gastei 150 no mercado"
• "recebi 5000 de salario"
• "paguei 89,90 de luz"
• "uber 25 reais"

*Comandos disponiveis:*
/saldo - Ver saldo atual
/resumo - Resumo do mes
/ultimas - Ultimas transacoes
/categorias - Ver categorias
/ajuda - Ajuda detalhada

Ou use o menu abaixo:"""

HELP = """📚 *Ajuda do FinBot*

*Lancando transacoes:*
Basta enviar mensagens naturais:

_Despesas:_
• "gastei 150 no mercado"
• "paguei 89,90 de luz"
• "almocei 45 reais"
• "uber 25 reais"

_Receitas:_
• "recebi 5000 de salario"
• "ganhei 200 de freelance"

_Com data:_
• "gastei 100 ontem no mercado"
• "paguei 150 dia 15"

🎤 *Audio:*
Envie uma mensagem de voz dizendo a transacao!
Ex: "gastei cinquenta reais no mercado"

📸 *Comprovantes:*
Envie foto de comprovantes PIX, notas fiscais ou recibos!

*Caixinhas (guardar dinheiro):*
• "criar caixinha VIAGEM"
• "criar caixinha CARRO meta 50000"
• "guardar 500 na VIAGEM"
• "retirar 200 da CARRO"

*Contas a Pagar (lembretes):*
• "criar conta INTERNET 99 vence dia 10"
• "nova conta LUZ 150 dia 20"
• "excluir conta INTERNET"

*Comandos:*
/saldo - Saldo do mes
/resumo - Resumo completo
/ultimas - Ultimas transacoes
/categorias - Listar categorias
/caixinhas - Ver caixinhas
/contas - Ver contas a pagar
/ajuda - Esta mensagem"""

UNRECOGNIZED = (
    "🤔 Nao entendi sua mensagem.\n\nEnvie algo como:\n"
    "• \"gastei 50 no almoco\"\n• \"recebi 1000 de freelance\"\n\n"
    "Ou use /ajuda para ver os comandos."
)

SAVINGS_BOX_HELP = (
    "🐷 *Comandos de Caixinha:*\n\n"
    "• /caixinhas - Ver todas as caixinhas\n"
    "• \"criar caixinha NOME\" - Criar nova\n"
    "• \"criar caixinha NOME meta 1000\" - Criar com meta\n"
    "• \"guardar 100 na NOME\" - Depositar\n"
    "• \"retirar 50 da NOME\" - Retirar\n"
    "• \"saldo caixinha NOME\" - Ver saldo"
)

BILL_HELP = (
    "📋 *Comandos de Contas a Pagar:*\n\n"
    "• /contas - Ver todas as contas\n"
    "• \"criar conta INTERNET 99 vence dia 10\"\n"
    "• \"nova conta LUZ 150 dia 20\"\n"
    "• \"excluir conta INTERNET\"\n\n"
    "_O bot lembrara 1 dia antes e no dia do vencimento!_"
)


# Commands

def balance_text(db: Session, today: Optional[date] = None) -> str:
    today = today or date.today()
    summary = transaction_service.get_month_summary(db, today.year, today.month)
    status = "✅ Voce esta no positivo!" if summary["balance"] >= 0 else "⚠️ Atencao: saldo negativo!"
    return (
        f"💰 *Saldo de {month_name(today.month)}/{today.year}*\n\n"
        f"📈 Receitas: {format_currency(summary['income'])}\n"
        f"📉 Despesas: {format_currency(summary['expense'])}\n"
        f"{SEPARATOR}\n"
        f"💵 *Saldo: {format_currency(summary['balance'])}*\n\n"
        f"{status}"
    )


def summary_text(db: Session, today: Optional[date] = None) -> str:
    """Month totals plus how much can still be spent per day."""
    today = today or date.today()
    summary = transaction_service.get_month_summary(db, today.year, today.month)
    days_left = days_remaining_in_month(today)

    if summary["balance"] >= 0:
        advice = f"✅ Voce pode gastar {format_currency(summary['balance'] / (days_left or 1))}/dia"
    else:
        advice = "⚠️ Cuidado com os gastos!"

    return (
        f"📊 *Resumo de {month_name(today.month)}/{today.year}*\n\n"
        f"📈 *Receitas:* {format_currency(summary['income'])}\n"
        f"📉 *Despesas:* {format_currency(summary['expense'])}\n"
        f"{SEPARATOR}\n"
        f"💵 *Saldo:* {format_currency(summary['balance'])}\n\n"
        f"📅 Faltam {days_left} dias para o fim do mes.\n"
        f"{advice}"
    )


def recent_transactions_text(db: Session, limit: int = 10) -> str:
    transactions = transaction_service.get_recent_transactions(db, limit=limit)
    if not transactions:
        return "📝 Nenhuma transacao encontrada ainda."

    lines = ["📝 *Ultimas Transacoes:*", ""]
    for txn in transactions:
        is_income = txn.type == TransactionType.income
        icon = "📈" if is_income else "📉"
        sign = "+" if is_income else "-"
        lines.append(f"{icon} {format_date(txn.date)}")
        lines.append(f"{sign}{format_currency(txn.amount)} - {txn.description or txn.category_name}")
        lines.append(f"📁 {txn.category_name}")
        lines.append("")
    return "\n".join(lines).rstrip()


def categories_text(db: Session) -> str:
    lines = ["📁 *Categorias Disponiveis:*", "", "*Despesas:*"]
    lines.extend(f"• {c.name}" for c in category_service.get_categories(db, CategoryType.expense))
    lines.extend(["", "*Receitas:*"])
    lines.extend(f"• {c.name}" for c in category_service.get_categories(db, CategoryType.income))
    return "\n".join(lines)


def savings_boxes_text(db: Session) -> str:
    boxes = savings_box_service.get_savings_boxes(db)
    if not boxes:
        return (
            "🐷 *Caixinhas*\n\nVoce ainda nao tem nenhuma caixinha.\n\n"
            "Crie uma com:\n\"criar caixinha NOME\"\n\nExemplo: \"criar caixinha CARRO\""
        )

    lines = ["🐷 *Suas Caixinhas:*", ""]
    for box in boxes:
        progress = f" ({progress_percent(box.current_amount, box.goal_amount)}%)" if box.goal_amount > 0 else ""
        lines.append(f"📦 *{box.name}*")
        lines.append(f"   💰 {format_currency(box.current_amount)}{progress}")
        if box.goal_amount > 0:
            lines.append(f"   🎯 Meta: {format_currency(box.goal_amount)}")
        lines.append("")

    lines.append(SEPARATOR)
    lines.append(f"💵 *Total guardado: {format_currency(savings_box_service.get_total_saved(db))}*")
    return "\n".join(lines)


def bills_text(db: Session, today: Optional[date] = None) -> str:
    bills = bill_service.get_bills(db)
    if not bills:
        return (
            "📋 *Contas a Pagar*\n\nVoce ainda nao tem nenhuma conta cadastrada.\n\n"
            "Cadastre com:\n\"criar conta NOME VALOR vence dia X\"\n\n"
            "Exemplo: \"criar conta INTERNET 99 vence dia 10\""
        )

    lines = ["📋 *Suas Contas a Pagar:*", ""]
    upcoming = bill_service.get_upcoming_bills(db, 7, today)
    if upcoming:
        lines.append("⚠️ *Proximas a vencer:*")
        lines.extend(f"• {b.name} - {format_currency(b.amount)} (dia {b.due_day})" for b in upcoming)
        lines.append("")

    lines.append("*Todas as contas:*")
    for bill in bills:
        recurring = "🔄 " if bill.is_recurring else ""
        lines.append(f"{recurring}*{bill.name}*")
        lines.append(f"   💰 {format_currency(bill.amount)} - vence dia {bill.due_day}")

    lines.append("")
    lines.append(SEPARATOR)
    lines.append(f"💵 *Total mensal: {format_currency(bill_service.get_monthly_total(db))}*")
    return "\n".join(lines)


# Savings box phrases

def savings_box_reply(db: Session, intent: SavingsBoxIntent) -> str:
    """Run a savings box action; domain errors come back as the reply text."""
    try:
        if intent.action == "create":
            return _create_box(db, intent)
        if intent.action == "deposit":
            return _deposit(db, intent)
        if intent.action == "withdraw":
            return _withdraw(db, intent)
        if intent.action == "balance":
            return _box_balance(db, intent)
    except FinBotError as e:
        logger.info("Savings box command rejected: %s", e.message)
        return f"❌ {e.message}"
    return SAVINGS_BOX_HELP


def _create_box(db: Session, intent: SavingsBoxIntent) -> str:
    if savings_box_service.get_savings_box_by_name(db, intent.name):
        return f"❌ Ja existe uma caixinha chamada \"{intent.name}\"."

    goal = intent.amount or 0
    savings_box_service.create_savings_box(db, name=intent.name, goal_amount=goal)
    message = f"✅ Caixinha *{intent.name}* criada com sucesso!"
    if goal > 0:
        message += f"\n🎯 Meta: {format_currency(goal)}"
    return message


def _deposit(db: Session, intent: SavingsBoxIntent) -> str:
    box = savings_box_service.get_savings_box_by_name(db, intent.name)
    if not box:
        return f"❌ Caixinha \"{intent.name}\" nao encontrada.\n\nCrie com: \"criar caixinha {intent.name}\""

    box = savings_box_service.deposit(db, box.id, intent.amount)
    lines = [
        "✅ *Deposito realizado!*",
        "",
        f"📦 Caixinha: *{box.name}*",
        f"💰 Depositado: {format_currency(intent.amount)}",
        f"💵 Novo saldo: {format_currency(box.current_amount)}",
    ]
    if box.goal_amount > 0:
        lines.append(f"🎯 Progresso: {progress_percent(box.current_amount, box.goal_amount)}%")
        if box.current_amount >= box.goal_amount:
            lines.extend(["", "🎉 *Parabens! Voce atingiu a meta!*"])
    return "\n".join(lines)


def _withdraw(db: Session, intent: SavingsBoxIntent) -> str:
    box = savings_box_service.get_savings_box_by_name(db, intent.name)
    if not box:
        return f"❌ Caixinha \"{intent.name}\" nao encontrada."

    balance_before = box.current_amount
    try:
        box = savings_box_service.withdraw(db, box.id, intent.amount)
    except InsufficientFundsError:
        return (
            f"❌ Saldo insuficiente na caixinha \"{intent.name}\".\n"
            f"💰 Saldo atual: {format_currency(balance_before)}"
        )

    return (
        "✅ *Retirada realizada!*\n\n"
        f"📦 Caixinha: *{box.name}*\n"
        f"💸 Retirado: {format_currency(intent.amount)}\n"
        f"💵 Novo saldo: {format_currency(box.current_amount)}"
    )


def _box_balance(db: Session, intent: SavingsBoxIntent) -> str:
    box = savings_box_service.get_savings_box_by_name(db, intent.name)
    if not box:
        return f"❌ Caixinha \"{intent.name}\" nao encontrada."

    lines = [f"📦 *Caixinha {box.name}*", "", f"💰 Saldo: {format_currency(box.current_amount)}"]
    if box.goal_amount > 0:
        remaining = box.goal_amount - box.current_amount
        lines.append(f"🎯 Meta: {format_currency(box.goal_amount)}")
        lines.append(f"📊 Progresso: {progress_percent(box.current_amount, box.goal_amount)}%")
        if remaining > 0:
            lines.append(f"📉 Faltam: {format_currency(remaining)}")
        else:
            lines.extend(["", "🎉 *Meta atingida!*"])
    return "\n".join(lines)


# Bill phrases

def bill_reply(db: Session, intent: BillIntent) -> str:
    try:
        if intent.action == "create":
            return _create_bill(db, intent)
        if intent.action == "delete":
            return _delete_bill(db, intent)
    except FinBotError as e:
        logger.info("Bill command rejected: %s", e.message)
        return f"❌ {e.message}"
    return BILL_HELP


def _create_bill(db: Session, intent: BillIntent) -> str:
    if not 1 <= intent.due_day <= 31:
        return "❌ Dia de vencimento deve ser entre 1 e 31."

    category = category_service.get_category_by_name(db, settings.bill_default_category, CategoryType.expense)
    bill_service.create_bill(
        db,
        name=intent.name,
        amount=intent.amount,
        due_day=intent.due_day,
        category_id=category.id if category else None,
        is_recurring=True,
        reminder_days_before=1,
    )
    return (
        "✅ *Conta cadastrada!*\n\n"
        f"📝 *{intent.name}*\n"
        f"💰 Valor: {format_currency(intent.amount)}\n"
        f"📅 Vencimento: dia {intent.due_day}\n"
        "🔔 Lembrete: 1 dia antes e no dia\n\n"
        "_Voce sera lembrado automaticamente!_"
    )


def _delete_bill(db: Session, intent: BillIntent) -> str:
    bill = bill_service.find_bill_by_name(db, intent.name)
    if not bill:
        return f"❌ Conta \"{intent.name}\" nao encontrada."

    bill_service.delete_bill(db, bill.id)
    return f"✅ Conta \"{bill.name}\" excluida com sucesso."
