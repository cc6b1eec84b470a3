"""
Billing arithmetic for sessions.

Every amount is a :class:`~decimal.Decimal` with two decimal places.
A line total is ``quantity * unit_price - discount`` floored at zero,
and a session total is the sum of its line totals minus the session
discount, floored at zero.  A discount larger than the amount it
applies to is rejected rather than silently clamped.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

ZERO = Decimal('0.00')
CENT = Decimal('0.01')


class BillingError(ValueError):
    pass


def money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class LineItem:
    quantity: int
    unit_price: Decimal
    discount: Decimal = ZERO

    @property
    def subtotal(self) -> Decimal:
        return money(self.quantity * money(self.unit_price))

    @property
    def discount_exceeds_subtotal(self) -> bool:
        return money(self.discount) > self.subtotal

    @property
    def total(self) -> Decimal:
        return max(ZERO, self.subtotal - money(self.discount))


def line_total(quantity: int, unit_price, discount=ZERO) -> Decimal:
    line = LineItem(quantity, money(unit_price), money(discount))
    if line.discount_exceeds_subtotal:
        raise BillingError('Discount cannot exceed subtotal.')
    return line.total


@dataclass
class SessionTotals:
    treatments_total: Decimal
    medicines_total: Decimal
    discount: Decimal
    treatment_lines: List[Decimal] = field(default_factory=list)
    medicine_lines: List[Decimal] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return self.treatments_total + self.medicines_total

    @property
    def total(self) -> Decimal:
        return max(ZERO, self.subtotal - self.discount)


def session_totals(treatments: Iterable[LineItem], medicines: Iterable[LineItem], discount=ZERO) -> SessionTotals:
    """Reduce line items to session totals.

    Raises :class:`BillingError` when a line discount exceeds its line
    subtotal or the session discount exceeds the sum of line totals.
    """
    treatment_lines = [_checked_total(line) for line in treatments]
    medicine_lines = [_checked_total(line) for line in medicines]
    totals = SessionTotals(
        treatments_total=sum(treatment_lines, ZERO),
        medicines_total=sum(medicine_lines, ZERO),
        discount=money(discount),
        treatment_lines=treatment_lines,
        medicine_lines=medicine_lines,
    )
    if totals.discount > totals.subtotal:
        raise BillingError('Session discount cannot exceed item total.')
    return totals


def _checked_total(line: LineItem) -> Decimal:
    if line.discount_exceeds_subtotal:
        raise BillingError('Discount cannot exceed subtotal.')
    return line.total


def loyalty_points_for(total) -> int:
    """Points awarded for a paid invoice: the total rounded to a whole number."""
    return int(money(total).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def decrement_stock(available: int, consumed: int) -> int:
    return max(0, available - consumed)


def as_number(value) -> float:
    """JSON representation of a money amount."""
    return float(money(value))
