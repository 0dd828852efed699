# backend/splitbill/domain/split_logic.py
from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from numbers import Real
from typing import List, Sequence

from splitbill.domain.money import Amount


class SplitLogicError(ValueError):
    """Raised when split inputs are invalid."""


def amount_to_cents(amount: Amount) -> int:
    """
    round(amount * 100) on the float product, ties to even
    (1.005 -> 100, -0.125 -> -12, 0.125 -> 12).
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise SplitLogicError(f"amount must be a finite number, got {amount!r}")
    try:
        return round(float(amount) * 100)
    except (ValueError, OverflowError) as e:
        raise SplitLogicError(f"amount must be a finite number, got {amount!r}") from e


def distribute_equally(amount: Amount, count: int) -> List[int]:
    """
    Split an amount into `count` integer-cent shares:

      base = cents // count
      remainder = cents - base * count
      first 'remainder' slots get base + 1, rest get base

    Shares always sum to the amount rounded to cents. Negative amounts
    floor towards minus infinity, so the remainder stays in [0, count).
    """
    if count <= 0:
        return []

    total_cents = amount_to_cents(amount)
    if total_cents == 0:
        return [0] * count

    base = total_cents // count
    remainder = total_cents - base * count

    return [base + 1 if i < remainder else base for i in range(count)]


def distribute_proportionally(amount: Amount, weights: Sequence[Amount]) -> List[int]:
    """
    Split an amount into integer-cent shares proportional to `weights`.

    - Negative weights count as 0.
    - If every weight is 0, falls back to distribute_equally().
    - Each slot first gets floor(cents * weight / total_weight); leftover cents
      go one at a time to slots ordered by descending weight, ties broken by
      the lower index.
    """
    count = len(weights)
    if count == 0:
        return []

    total_cents = amount_to_cents(amount)
    if total_cents == 0:
        return [0] * count

    normalized: List[Fraction] = []
    for w in weights:
        if isinstance(w, bool) or not isinstance(w, (Real, Decimal)):
            raise SplitLogicError("weights must be numbers")
        normalized.append(Fraction(w) if w > 0 else Fraction(0))

    total_weight = sum(normalized, Fraction(0))
    if total_weight == 0:
        return distribute_equally(amount, count)

    shares = [math.floor(total_cents * w / total_weight) for w in normalized]
    remainder = total_cents - sum(shares)

    order = sorted(range(count), key=lambda i: (-normalized[i], i))
    pointer = 0
    while remainder > 0:
        shares[order[pointer % count]] += 1
        remainder -= 1
        pointer += 1

    return shares
