from datetime import date

from splitbill.domain.models import AdditionalExpense, Expense, Participant, PaymentMethodSnapshot
from splitbill.domain.settlement import calculate
from splitbill.services.share_message import build_share_message

PEOPLE = [
    Participant(id="a", name="Alice"),
    Participant(id="b", name="Bob"),
    Participant(id="c", name="Cara"),
]


def _render(expenses, additional, activity_name="Team dinner", payment_methods=()):
    summary = calculate(PEOPLE, expenses, additional)
    return build_share_message(
        activity_name=activity_name,
        participants=PEOPLE,
        expenses=expenses,
        additional_expenses=additional,
        summary=summary,
        payment_methods=payment_methods,
        today=date(2024, 5, 1),
    )


def test_message_lists_items_additional_shares_and_payments():
    expenses = [Expense(id="e1", description="Dinner", amount=100, paid_by="a", participants=("a", "b", "c"))]
    additional = [
        AdditionalExpense(id="x1", description="Service", amount=30, paid_by="a", participants=("a", "b", "c"))
    ]

    assert _render(expenses, additional) == "\n".join(
        [
            "Split Bill - Summary",
            "",
            "Bill for Team dinner",
            "Date: 01/05/2024",
            "",
            "Items:",
            "- Dinner (Rp100) | Split with: Alice, Bob, Cara | Paid by: Alice",
            "",
            "Additional items:",
            "- Service (Rp30) paid by: Alice",
            "  - Alice: Rp10",
            "  - Bob: Rp10",
            "  - Cara: Rp10",
            "",
            "Payment summary:",
            "- Bob -> Alice: Rp43",
            "- Cara -> Alice: Rp43",
            "",
            "Payment methods:",
            "- None",
        ]
    )


def test_empty_bill_message():
    message = _render([], [], activity_name="  ")
    assert "Bill for Untitled activity" in message
    assert "- No main expenses" in message
    assert "Additional items:" not in message
    assert message.endswith("Payment summary:\n- Everyone is settled up\n\nPayment methods:\n- None")


def test_discount_has_no_per_person_lines():
    expenses = [Expense(id="e1", description="Pizza", amount=50, paid_by="b", participants=("a", "b"))]
    additional = [
        AdditionalExpense(id="d1", description="Voucher", amount=-5, paid_by="b", participants=("a", "b"))
    ]
    message = _render(expenses, additional)
    assert "- Voucher (-Rp5) paid by: Bob" in message
    assert "  - " not in message


def test_unknown_ids_render_as_unknown():
    expenses = [Expense(id="e1", description="Taxi", amount=12, paid_by="zed", participants=("a", "zed"))]
    message = _render(expenses, [])
    assert "- Taxi (Rp12) | Split with: Alice, Unknown | Paid by: Unknown" in message


def test_payment_methods_show_account_or_phone_number():
    expenses = [Expense(id="e1", description="Taxi", amount=20, paid_by="a", participants=("a", "b"))]
    methods = [
        PaymentMethodSnapshot(
            id="pm1", category="bank_transfer", provider="BCA", owner_name="Alice", account_number="1234567890"
        ),
        PaymentMethodSnapshot(id="pm2", category="ewallet", provider="GoPay", owner_name="Alice", phone_number="0812"),
    ]
    message = _render(expenses, [], payment_methods=methods)
    assert message.endswith(
        "Payment summary:\n- Bob -> Alice: Rp10\n\n"
        "Payment methods:\n- BCA - Alice (1234567890)\n- GoPay - Alice (0812)"
    )
