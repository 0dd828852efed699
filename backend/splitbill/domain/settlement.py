# backend/splitbill/domain/settlement.py
"""
Settlement engine.

calculate() folds direct expenses (split equally), then additional expenses
(split in proportion to each sharer's direct-expense load), then turns the
resulting balances into a list of transfers. Everything runs on integer
cents; decimal units only appear in the input amounts and in to_dict().
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from splitbill.domain.models import (
    OWED_ITEM_ADDITIONAL,
    OWED_ITEM_BASE,
    AdditionalExpense,
    Expense,
    ExpenseDiagnostic,
    OwedItem,
    Participant,
    ParticipantSummary,
    Settlement,
    SplitBillSummary,
)
from splitbill.domain.split_logic import (
    amount_to_cents,
    distribute_equally,
    distribute_proportionally,
)

# Balances closer to zero than this are treated as settled (0.01).
SETTLEMENT_TOLERANCE_CENTS = 1

DiagnosticCallback = Callable[[ExpenseDiagnostic], None]


def build_participant_map(participants: Iterable[Participant]) -> Dict[str, ParticipantSummary]:
    summaries: Dict[str, ParticipantSummary] = {}
    for person in participants:
        if person.id not in summaries:
            summaries[person.id] = ParticipantSummary(participant_id=person.id)
    return summaries


def _known_sharers(
    expense: Expense,
    expense_type: str,
    participant_map: Dict[str, ParticipantSummary],
    on_diagnostic: Optional[DiagnosticCallback],
) -> List[str]:
    valid = [pid for pid in expense.participants if pid in participant_map]
    unknown = tuple(pid for pid in expense.participants if pid not in participant_map)

    if on_diagnostic is not None:
        if not valid:
            on_diagnostic(ExpenseDiagnostic(expense.id, expense_type, "no_valid_participants", unknown))
        else:
            if unknown:
                on_diagnostic(ExpenseDiagnostic(expense.id, expense_type, "unknown_participants", unknown))
            if expense.paid_by not in participant_map:
                on_diagnostic(ExpenseDiagnostic(expense.id, expense_type, "unknown_payer", (expense.paid_by,)))

    return valid


def _credit_payer(expense: Expense, participant_map: Dict[str, ParticipantSummary]) -> None:
    payer = participant_map.get(expense.paid_by)
    if payer is not None:
        payer.paid_cents += amount_to_cents(expense.amount)


def _add_shares(
    expense: Expense,
    sharers: Sequence[str],
    shares_cents: Sequence[int],
    item_type: str,
    participant_map: Dict[str, ParticipantSummary],
) -> None:
    for pid, cents in zip(sharers, shares_cents, strict=True):
        summary = participant_map[pid]
        summary.owed_cents += cents
        summary.owed_items.append(
            OwedItem(id=expense.id, description=expense.description, amount_cents=cents, type=item_type)
        )


def apply_expenses(
    expenses: Iterable[Expense],
    participant_map: Dict[str, ParticipantSummary],
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> Tuple[int, Dict[str, int]]:
    """
    Fold direct expenses into participant_map.

    Returns (total_cents, base_owed_snapshot) where the snapshot maps each
    participant id to what they owe from direct expenses alone.
    """
    total_cents = 0

    for expense in expenses:
        sharers = _known_sharers(expense, OWED_ITEM_BASE, participant_map, on_diagnostic)
        if not sharers:
            # payer credit and the total are skipped along with the shares
            continue

        shares = distribute_equally(expense.amount, len(sharers))
        _add_shares(expense, sharers, shares, OWED_ITEM_BASE, participant_map)
        _credit_payer(expense, participant_map)
        total_cents += amount_to_cents(expense.amount)

    snapshot = {pid: summary.owed_cents for pid, summary in participant_map.items()}
    return total_cents, snapshot


def apply_additional_expenses(
    additional_expenses: Iterable[Expense],
    participant_map: Dict[str, ParticipantSummary],
    base_owed_snapshot: Dict[str, int],
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> int:
    """
    Fold additional expenses into participant_map, weighting every one of
    them by the same base_owed_snapshot. Returns their total in cents.
    """
    total_cents = 0

    for expense in additional_expenses:
        sharers = _known_sharers(expense, OWED_ITEM_ADDITIONAL, participant_map, on_diagnostic)
        if not sharers:
            continue

        _credit_payer(expense, participant_map)
        weights = [base_owed_snapshot.get(pid, 0) for pid in sharers]
        shares = distribute_proportionally(expense.amount, weights)
        _add_shares(expense, sharers, shares, OWED_ITEM_ADDITIONAL, participant_map)
        total_cents += amount_to_cents(expense.amount)

    return total_cents


def settle_balances(participant_map: Dict[str, ParticipantSummary]) -> List[Settlement]:
    """
    Finalize balances and match debtors to creditors, largest first.

    Greedy: the result settles everyone but is not guaranteed to use the
    fewest possible transfers.
    """
    creditors: List[List] = []
    debtors: List[List] = []

    for summary in participant_map.values():
        summary.balance_cents = summary.paid_cents - summary.owed_cents
        # working copies; the summaries keep their final balances
        if summary.balance_cents > 0:
            creditors.append([summary.participant_id, summary.balance_cents])
        elif summary.balance_cents < 0:
            debtors.append([summary.participant_id, summary.balance_cents])

    creditors.sort(key=lambda entry: -entry[1])
    debtors.sort(key=lambda entry: entry[1])

    settlements: List[Settlement] = []
    ci = 0
    di = 0

    while ci < len(creditors) and di < len(debtors):
        creditor = creditors[ci]
        debtor = debtors[di]

        amount = min(creditor[1], abs(debtor[1]))
        if amount <= 0:
            break

        settlements.append(Settlement(from_id=debtor[0], to_id=creditor[0], amount_cents=amount))

        creditor[1] -= amount
        debtor[1] += amount

        if abs(creditor[1]) < SETTLEMENT_TOLERANCE_CENTS:
            ci += 1
        if abs(debtor[1]) < SETTLEMENT_TOLERANCE_CENTS:
            di += 1

    return settlements


def calculate(
    participants: Iterable[Participant],
    expenses: Iterable[Expense],
    additional_expenses: Iterable[AdditionalExpense] = (),
    *,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> SplitBillSummary:
    """
    Compute who paid what, who owes what, and who should pay whom.

    Expenses referencing unknown participants are filtered rather than
    rejected; pass on_diagnostic to be told about them.
    """
    participant_map = build_participant_map(participants)
    direct_total, snapshot = apply_expenses(expenses, participant_map, on_diagnostic)
    additional_total = apply_additional_expenses(additional_expenses, participant_map, snapshot, on_diagnostic)
    settlements = settle_balances(participant_map)

    return SplitBillSummary(
        total_cents=direct_total + additional_total,
        per_participant=list(participant_map.values()),
        settlements=settlements,
    )
