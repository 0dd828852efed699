# backend/splitbill/services/share_message.py
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Sequence

from splitbill.domain.models import (
    OWED_ITEM_ADDITIONAL,
    AdditionalExpense,
    Expense,
    Participant,
    PaymentMethodSnapshot,
    SplitBillSummary,
)
from splitbill.domain.money import format_currency

DEFAULT_ACTIVITY_NAME = "Untitled activity"
UNKNOWN_NAME = "Unknown"


def _names(participants: Sequence[Participant]) -> Dict[str, str]:
    return {p.id: p.name for p in participants}


def _expense_lines(expenses: Sequence[Expense], names: Dict[str, str], symbol: str) -> List[str]:
    lines = []
    for expense in expenses:
        sharers = ", ".join(names.get(pid, UNKNOWN_NAME) for pid in expense.participants)
        lines.append(
            f"- {expense.description} ({format_currency(expense.amount, symbol=symbol)})"
            f" | Split with: {sharers or '-'}"
            f" | Paid by: {names.get(expense.paid_by, UNKNOWN_NAME)}"
        )
    return lines


def _additional_lines(
    additional_expenses: Sequence[AdditionalExpense],
    summary: SplitBillSummary,
    names: Dict[str, str],
    symbol: str,
) -> List[str]:
    lines = []
    for additional in additional_expenses:
        lines.append(
            f"- {additional.description} ({format_currency(additional.amount, symbol=symbol)})"
            f" paid by: {names.get(additional.paid_by, UNKNOWN_NAME)}"
        )
        for person in summary.involved_participants():
            share = next(
                (
                    item
                    for item in person.owed_items
                    if item.id == additional.id and item.type == OWED_ITEM_ADDITIONAL
                ),
                None,
            )
            # discounts and zero shares are left out of the breakdown
            if share is None or share.amount_cents <= 0:
                continue
            lines.append(
                f"  - {names.get(person.participant_id, UNKNOWN_NAME)}:"
                f" {format_currency(share.amount, symbol=symbol)}"
            )
    return lines


def build_share_message(
    *,
    activity_name: str,
    participants: Sequence[Participant],
    expenses: Sequence[Expense],
    additional_expenses: Sequence[AdditionalExpense],
    summary: SplitBillSummary,
    payment_methods: Sequence[PaymentMethodSnapshot] = (),
    symbol: str = "Rp",
    today: Optional[date] = None,
) -> str:
    """
    Render a plain-text bill summary suitable for pasting into a chat.

    Sections: header, item list, additional items (only when present) with
    each participant's share, the payment summary and where to pay.
    """
    names = _names(participants)
    day = (today or date.today()).strftime("%d/%m/%Y")

    item_lines = _expense_lines(expenses, names, symbol) or ["- No main expenses"]
    payment_lines = [
        f"- {names.get(s.from_id, UNKNOWN_NAME)} -> {names.get(s.to_id, UNKNOWN_NAME)}:"
        f" {format_currency(s.amount, symbol=symbol)}"
        for s in summary.settlements
    ] or ["- Everyone is settled up"]
    method_lines = [
        f"- {m.provider} - {m.owner_name} ({m.destination})" for m in payment_methods
    ] or ["- None"]

    parts = [
        "Split Bill - Summary",
        "",
        f"Bill for {activity_name.strip() or DEFAULT_ACTIVITY_NAME}",
        f"Date: {day}",
        "",
        "Items:",
        *item_lines,
    ]

    additional_lines = _additional_lines(additional_expenses, summary, names, symbol)
    if additional_lines:
        parts += ["", "Additional items:", *additional_lines]

    parts += ["", "Payment summary:", *payment_lines]
    parts += ["", "Payment methods:", *method_lines]
    return "\n".join(parts)
