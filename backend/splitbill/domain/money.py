# backend/splitbill/domain/money.py
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

Amount = Union[int, float, Decimal]


class MoneyError(ValueError):
    """Raised when currency/money conversion or formatting fails."""


@dataclass(frozen=True)
class Money:
    """
    Simple money value object using integer cents.
    Amounts are kept as cents and only turned into decimal units at the edges.
    """
    cents: int

    def __post_init__(self) -> None:
        if not isinstance(self.cents, int) or isinstance(self.cents, bool):
            raise MoneyError("Money.cents must be an int")

    def format(self, symbol: str = "Rp") -> str:
        """
        Format as whole currency units with "." thousands separators,
        e.g. 123456789 cents -> "Rp1.234.568".
        """
        units = int(Decimal(self.cents).scaleb(-2).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        sign = "-" if units < 0 else ""
        grouped = f"{abs(units):,}".replace(",", ".")
        return f"{sign}{symbol}{grouped}"


def decimal_to_cents(
    value: Amount | str,
    *,
    rounding=ROUND_HALF_UP,
) -> int:
    """
    Convert a decimal-like value to cents with explicit rounding.
    Used for display; the split math rounds with split_logic.amount_to_cents().

    Floats go through their shortest repr so 0.1 is treated as "0.1".

    Examples:
      "12.34" -> 1234
      12.345 -> 1235 (half-up)
      -0.005 -> -1 (half away from zero)
    """
    if isinstance(value, bool):
        raise MoneyError(f"invalid decimal value: {value}")
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        cents = int((d * Decimal(100)).quantize(Decimal("1"), rounding=rounding))
    except (InvalidOperation, ValueError) as e:
        raise MoneyError(f"invalid decimal value: {value}") from e

    return cents


def cents_to_amount(cents: int) -> float:
    """
    Convert integer cents back to decimal currency units (3334 -> 33.34).
    """
    if not isinstance(cents, int) or isinstance(cents, bool):
        raise MoneyError("cents must be an int")
    return float(Decimal(cents).scaleb(-2))


def format_currency(amount: Amount, *, symbol: str = "Rp") -> str:
    if isinstance(amount, float) and not math.isfinite(amount):
        return f"{symbol}0"
    if isinstance(amount, Decimal) and not amount.is_finite():
        return f"{symbol}0"
    return Money(cents=decimal_to_cents(amount)).format(symbol=symbol)
