from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List, Type
from uuid import UUID

from splitbill.domain.models import (
    PAYMENT_BANK_TRANSFER,
    PAYMENT_EWALLET,
    AdditionalExpense,
    Expense,
    Participant,
    PaymentMethodSnapshot,
)
from splitbill.services.share_message import DEFAULT_ACTIVITY_NAME


class ApiValidationError(ValueError):
    """Raised when request payload validation fails."""


def is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, TypeError):
        return False
    return True


def _non_empty_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_participant_name(raw_name: object) -> str:
    if not _non_empty_str(raw_name):
        raise ApiValidationError("'name' must be a non-empty string.")
    return raw_name.strip()


def parse_participants(raw_participants: object) -> List[Participant]:
    if not isinstance(raw_participants, list):
        raise ApiValidationError("'participants' must be a list.")

    participants: List[Participant] = []
    seen_ids: set[str] = set()
    for idx, raw in enumerate(raw_participants):
        if not isinstance(raw, dict):
            raise ApiValidationError(f"Participant at index {idx} must be an object.")
        pid = raw.get("id")
        name = raw.get("name")
        if not _non_empty_str(pid):
            raise ApiValidationError(f"Participant at index {idx} must include a non-empty 'id'.")
        if not _non_empty_str(name):
            raise ApiValidationError(f"Participant at index {idx} must include a non-empty 'name'.")
        if pid in seen_ids:
            raise ApiValidationError("Participant ids must be unique.")
        seen_ids.add(pid)
        participants.append(Participant(id=pid, name=name.strip()))

    return participants


def parse_expenses(
    raw_expenses: object,
    *,
    field_name: str = "expenses",
    expense_cls: Type[Expense] = Expense,
) -> List[Expense]:
    """
    Shape-check expenses. Participant ids are not checked against the
    participant list; the calculation ignores unknown ones.
    """
    if raw_expenses is None:
        return []
    if not isinstance(raw_expenses, list):
        raise ApiValidationError(f"'{field_name}' must be a list.")

    expenses: List[Expense] = []
    for idx, raw in enumerate(raw_expenses):
        label = f"Entry {idx} of '{field_name}'"
        if not isinstance(raw, dict):
            raise ApiValidationError(f"{label} must be an object.")

        expense_id = raw.get("id")
        description = raw.get("description")
        amount = raw.get("amount")
        paid_by = raw.get("paid_by")
        sharers = raw.get("participants")
        created_at = raw.get("created_at")

        if not _non_empty_str(expense_id):
            raise ApiValidationError(f"{label} must include a non-empty 'id'.")
        if not _non_empty_str(description):
            raise ApiValidationError(f"{label} must include a non-empty 'description'.")
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount):
            raise ApiValidationError(f"{label} must include 'amount' as a finite number.")
        if not isinstance(paid_by, str):
            raise ApiValidationError(f"{label} must include 'paid_by' as a participant id.")
        if not isinstance(sharers, list) or not all(isinstance(pid, str) for pid in sharers):
            raise ApiValidationError(f"{label} must include 'participants' as a list of ids.")
        if created_at is not None and (isinstance(created_at, bool) or not isinstance(created_at, int)):
            raise ApiValidationError(f"{label} has an invalid 'created_at'.")

        expenses.append(
            expense_cls(
                id=expense_id,
                description=description.strip(),
                amount=amount,
                paid_by=paid_by,
                participants=tuple(sharers),
                created_at=created_at,
            )
        )

    return expenses


def parse_additional_expenses(raw_expenses: object) -> List[Expense]:
    return parse_expenses(
        raw_expenses,
        field_name="additional_expenses",
        expense_cls=AdditionalExpense,
    )


def parse_activity_name(raw_name: object) -> str:
    if raw_name is None:
        return DEFAULT_ACTIVITY_NAME
    if not isinstance(raw_name, str):
        raise ApiValidationError("'activity_name' must be a string.")
    return raw_name.strip() or DEFAULT_ACTIVITY_NAME


def parse_occurred_at(raw_value: object) -> datetime:
    if raw_value is None:
        return datetime.now(timezone.utc)
    if not isinstance(raw_value, str):
        raise ApiValidationError("'occurred_at' must be an ISO 8601 string.")
    try:
        parsed = datetime.fromisoformat(raw_value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ApiValidationError("'occurred_at' must be an ISO 8601 string.") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed



def parse_payment_methods(raw_methods: object) -> List[PaymentMethodSnapshot]:
    """
    Optional list of payment method snapshots:
      {id, category: "bank_transfer"|"ewallet", provider, owner_name,
       account_number (bank_transfer) | phone_number (ewallet)}
    """
    if raw_methods is None:
        return []
    if not isinstance(raw_methods, list):
        raise ApiValidationError("'payment_methods' must be a list.")

    methods: List[PaymentMethodSnapshot] = []
    seen_ids: set[str] = set()
    for idx, raw in enumerate(raw_methods):
        label = f"Payment method at index {idx}"
        if not isinstance(raw, dict):
            raise ApiValidationError(f"{label} must be an object.")

        method_id = raw.get("id")
        category = raw.get("category")
        if not _non_empty_str(method_id):
            raise ApiValidationError(f"{label} must include a non-empty 'id'.")
        if method_id in seen_ids:
            raise ApiValidationError("Payment method ids must be unique.")
        seen_ids.add(method_id)
        if category not in (PAYMENT_BANK_TRANSFER, PAYMENT_EWALLET):
            raise ApiValidationError(f"{label} must have 'category' bank_transfer or ewallet.")

        for key in ("provider", "owner_name"):
            if not _non_empty_str(raw.get(key)):
                raise ApiValidationError(f"{label} must include a non-empty '{key}'.")

        destination_key = "account_number" if category == PAYMENT_BANK_TRANSFER else "phone_number"
        if not _non_empty_str(raw.get(destination_key)):
            raise ApiValidationError(f"{label} must include a non-empty '{destination_key}'.")

        methods.append(
            PaymentMethodSnapshot(
                id=method_id,
                category=category,
                provider=raw["provider"].strip(),
                owner_name=raw["owner_name"].strip(),
                account_number=raw[destination_key].strip() if category == PAYMENT_BANK_TRANSFER else None,
                phone_number=raw[destination_key].strip() if category == PAYMENT_EWALLET else None,
            )
        )

    return methods
