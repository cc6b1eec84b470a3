"""Pure billing arithmetic; no database needed."""
from decimal import Decimal

import pytest

from clinic.services.billing import (
    BillingError,
    LineItem,
    decrement_stock,
    line_total,
    loyalty_points_for,
    money,
    session_totals,
)


def D(value):
    return Decimal(value)


def test_line_total_subtracts_discount():
    assert line_total(2, D('1000'), D('150')) == D('1850.00')


def test_line_total_allows_discount_equal_to_subtotal():
    assert line_total(1, D('250.50'), D('250.50')) == D('0.00')


def test_line_total_rejects_discount_above_subtotal():
    with pytest.raises(BillingError):
        line_total(1, D('100'), D('100.01'))


@pytest.mark.parametrize('quantity,unit_price,discount', [
    (1, '0', '0'),
    (3, '33.33', '0.99'),
    (7, '1250.00', '8750.00'),
    (12, '0.10', '1.00'),
])
def test_line_total_is_never_negative_and_matches_formula(quantity, unit_price, discount):
    line = LineItem(quantity, D(unit_price), D(discount))
    assert not line.discount_exceeds_subtotal
    assert line.total == max(D('0'), quantity * D(unit_price) - D(discount))
    assert line.total >= 0


def test_session_total_example_treatment_with_session_discount():
    totals = session_totals([LineItem(2, D('1000'))], [], D('200'))
    assert totals.treatments_total == D('2000.00')
    assert totals.medicines_total == D('0.00')
    assert totals.total == D('1800.00')


def test_session_totals_combine_treatments_and_medicines():
    totals = session_totals(
        [LineItem(1, D('1500'), D('100'))],
        [LineItem(3, D('120.50')), LineItem(1, D('80'), D('80'))],
        D('0'),
    )
    assert totals.treatment_lines == [D('1400.00')]
    assert totals.medicine_lines == [D('361.50'), D('0.00')]
    assert totals.subtotal == D('1761.50')
    assert totals.total == D('1761.50')


def test_session_discount_may_consume_whole_subtotal():
    totals = session_totals([LineItem(1, D('500'))], [], D('500'))
    assert totals.total == D('0.00')


def test_session_discount_above_subtotal_is_rejected():
    with pytest.raises(BillingError, match='Session discount cannot exceed item total.'):
        session_totals([LineItem(1, D('500'))], [LineItem(1, D('20'))], D('520.01'))


def test_line_discount_above_subtotal_is_rejected_inside_session():
    with pytest.raises(BillingError):
        session_totals([LineItem(1, D('10'), D('11'))], [], D('0'))


def test_money_rounds_half_up_to_cents():
    assert money('2.345') == D('2.35')
    assert money(None) == D('0.00')


@pytest.mark.parametrize('total,points', [
    ('1800.00', 1800),
    ('1800.49', 1800),
    ('1800.50', 1801),
    ('0', 0),
])
def test_loyalty_points_round_half_up(total, points):
    assert loyalty_points_for(D(total)) == points


def test_stock_decrement_floors_at_zero():
    assert decrement_stock(10, 3) == 7
    assert decrement_stock(2, 5) == 0
