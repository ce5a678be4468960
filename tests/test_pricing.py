from decimal import Decimal

import pytest

from app.services.pricing import (
    LineAmounts,
    line_amounts,
    order_totals,
    round2,
    split_strips,
)


@pytest.mark.parametrize(
    "quantity, box_size, expected",
    [
        (25, 12, (2, 1)),
        (24, 12, (2, 0)),
        (5, 12, (0, 5)),
        (0, 12, (0, 0)),
        (7, 0, (0, 7)),
        (7, -3, (0, 7)),
    ],
)
def test_split_strips(quantity, box_size, expected):
    boxes, remainder = split_strips(quantity, box_size)

    assert (boxes, remainder) == expected
    if box_size > 0:
        assert boxes * box_size + remainder == quantity
        assert 0 <= remainder < box_size


def test_line_amounts_for_ten_strips_at_eighteen_percent():
    amounts = line_amounts(Decimal("100.00"), 10, Decimal("18"))

    assert amounts == LineAmounts(
        base=Decimal("1000.00"),
        gst_amount=Decimal("180.00"),
        total=Decimal("1180.00"),
    )


def test_line_amounts_round_half_up_on_base_and_gst_independently():
    # base 3 x 0.335 = 1.005 -> 1.01; gst 1.01 x 5% = 0.0505 -> 0.05
    amounts = line_amounts(Decimal("0.335"), 3, Decimal("5"))

    assert amounts.base == Decimal("1.01")
    assert amounts.gst_amount == Decimal("0.05")
    assert amounts.total == Decimal("1.06")


def test_line_amounts_accepts_floats_without_binary_noise():
    amounts = line_amounts(0.1, 3, 18)

    assert amounts.base == Decimal("0.30")
    assert amounts.gst_amount == Decimal("0.05")


def test_round2_half_up():
    assert round2(Decimal("2.675")) == Decimal("2.68")
    assert round2("2.674") == Decimal("2.67")


def test_order_totals_sum_rounded_lines():
    lines = [
        line_amounts(Decimal("100.00"), 10, Decimal("18")),
        line_amounts(Decimal("12.50"), 4, Decimal("5")),
    ]

    totals = order_totals(lines)

    assert totals.subtotal == Decimal("1050.00")
    assert totals.gst_total == Decimal("182.50")
    assert totals.grand_total == Decimal("1232.50")
    assert totals.grand_total == totals.subtotal + totals.gst_total


def test_order_totals_of_no_lines_is_zero():
    totals = order_totals([])

    assert totals.subtotal == Decimal("0.00")
    assert totals.grand_total == Decimal("0.00")
