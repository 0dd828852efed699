# backend/splitbill/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from splitbill.domain.money import Amount, cents_to_amount

OWED_ITEM_BASE = "base"
OWED_ITEM_ADDITIONAL = "additional"


class ModelValidationError(ValueError):
    """Raised when request/response models fail basic validation."""


@dataclass(frozen=True)
class Participant:
    """
    A person taking part in the split.
    IDs are opaque strings assigned by whoever manages participants;
    blank names and ids are rejected at the API boundary, not here.
    """
    id: str
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise ModelValidationError("Participant.id must be a string")
        if not isinstance(self.name, str):
            raise ModelValidationError("Participant.name must be a string")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Expense:
    """
    A cost paid by one participant and split equally among `participants`.

    amount is in currency units and may be negative (a discount). The
    calculation ignores ids that are not in the participant set, so only
    types are checked here.
    """
    id: str
    description: str
    amount: Amount
    paid_by: str
    participants: Tuple[str, ...]
    created_at: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise ModelValidationError(f"{type(self).__name__}.id must be a string")
        if not isinstance(self.description, str):
            raise ModelValidationError(f"{type(self).__name__}.description must be a string")
        if isinstance(self.amount, bool) or not isinstance(self.amount, (int, float, Decimal)):
            raise ModelValidationError(f"{type(self).__name__}.amount must be a number")
        if not isinstance(self.paid_by, str):
            raise ModelValidationError(f"{type(self).__name__}.paid_by must be a string")
        if not isinstance(self.participants, (list, tuple)):
            raise ModelValidationError(f"{type(self).__name__}.participants must be a sequence")
        if not all(isinstance(pid, str) for pid in self.participants):
            raise ModelValidationError(f"{type(self).__name__}.participants must contain strings")
        # frozen: normalize lists to tuples so instances stay hashable
        object.__setattr__(self, "participants", tuple(self.participants))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": float(self.amount),
            "paid_by": self.paid_by,
            "participants": list(self.participants),
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class AdditionalExpense(Expense):
    """
    Tax, service fee or discount. Same shape as Expense, but split in
    proportion to what each sharer owes from direct expenses.
    """


@dataclass(frozen=True)
class OwedItem:
    id: str
    description: str
    amount_cents: int
    type: str

    @property
    def amount(self) -> float:
        return cents_to_amount(self.amount_cents)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "type": self.type,
        }


@dataclass
class ParticipantSummary:
    """
    Running paid/owed figures for one participant.

    balance_cents = paid_cents - owed_cents once the calculation finishes;
    positive means the participant should receive money.
    """
    participant_id: str
    paid_cents: int = 0
    owed_cents: int = 0
    balance_cents: int = 0
    owed_items: List[OwedItem] = field(default_factory=list)

    @property
    def paid(self) -> float:
        return cents_to_amount(self.paid_cents)

    @property
    def owed(self) -> float:
        return cents_to_amount(self.owed_cents)

    @property
    def balance(self) -> float:
        return cents_to_amount(self.balance_cents)

    @property
    def is_involved(self) -> bool:
        return bool(self.paid_cents or self.owed_cents or self.balance_cents)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant_id": self.participant_id,
            "paid": self.paid,
            "owed": self.owed,
            "balance": self.balance,
            "owed_items": [item.to_dict() for item in self.owed_items],
        }


@dataclass(frozen=True)
class Settlement:
    """A transfer of amount_cents from a debtor (from_id) to a creditor (to_id)."""
    from_id: str
    to_id: str
    amount_cents: int

    @property
    def amount(self) -> float:
        return cents_to_amount(self.amount_cents)

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.from_id, "to": self.to_id, "amount": self.amount}


@dataclass(frozen=True)
class SplitBillSummary:
    """
    Output of calculate().

    total_cents is the sum of every expense that had at least one known
    sharer, direct and additional.
    """
    total_cents: int
    per_participant: List[ParticipantSummary]
    settlements: List[Settlement]

    @property
    def total(self) -> float:
        return cents_to_amount(self.total_cents)

    def get(self, participant_id: str) -> Optional[ParticipantSummary]:
        for summary in self.per_participant:
            if summary.participant_id == participant_id:
                return summary
        return None

    def involved_participants(self) -> List[ParticipantSummary]:
        return [s for s in self.per_participant if s.is_involved]

    def payments_from(self, participant_id: str) -> List[Settlement]:
        return [s for s in self.settlements if s.from_id == participant_id]

    def payments_to(self, participant_id: str) -> List[Settlement]:
        return [s for s in self.settlements if s.to_id == participant_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "per_participant": [s.to_dict() for s in self.per_participant],
            "settlements": [s.to_dict() for s in self.settlements],
        }


@dataclass(frozen=True)
class ExpenseDiagnostic:
    """
    Reported through calculate(on_diagnostic=...) when an expense references
    ids outside the participant set.

    kind is one of:
      "no_valid_participants" - expense dropped entirely
      "unknown_participants"  - some sharers ignored
      "unknown_payer"         - nobody credited as payer
    """
    expense_id: str
    expense_type: str
    kind: str
    unknown_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expense_id": self.expense_id,
            "expense_type": self.expense_type,
            "kind": self.kind,
            "unknown_ids": list(self.unknown_ids),
        }


PAYMENT_BANK_TRANSFER = "bank_transfer"
PAYMENT_EWALLET = "ewallet"


@dataclass(frozen=True)
class PaymentMethodSnapshot:
    """
    Where to send money, copied into a saved bill so it still renders after
    the owner edits or removes the method.

    bank_transfer methods carry account_number, ewallet methods phone_number.
    """
    id: str
    category: str
    provider: str
    owner_name: str
    account_number: Optional[str] = None
    phone_number: Optional[str] = None

    def __post_init__(self) -> None:
        if self.category not in (PAYMENT_BANK_TRANSFER, PAYMENT_EWALLET):
            raise ModelValidationError(f"unknown payment method category: {self.category}")

    @property
    def destination(self) -> str:
        if self.category == PAYMENT_BANK_TRANSFER:
            return self.account_number or ""
        return self.phone_number or ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "provider": self.provider,
            "owner_name": self.owner_name,
            "account_number": self.account_number,
            "phone_number": self.phone_number,
        }
