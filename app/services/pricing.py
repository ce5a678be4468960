"""Pure money and packaging arithmetic shared by orders, invoices and DTOs.

Amounts are ``Decimal`` rounded half-up to two places at every derived step;
the base and the GST are rounded independently before they are added, which
is what keeps persisted line items reconcilable to the paisa.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Union

Number = Union[Decimal, int, float, str]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs such as 0.1 from dragging binary noise along
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineAmounts:
    base: Decimal
    gst_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    gst_total: Decimal
    grand_total: Decimal


def split_strips(quantity: int, box_size: int) -> Tuple[int, int]:
    """Return ``(boxes, remainder)`` for ``quantity`` strips.

    A non-positive box size means the variant is not boxed: everything is
    reported as loose strips.
    """
    if not box_size or box_size <= 0:
        return 0, quantity
    boxes = quantity // box_size
    return boxes, quantity - boxes * box_size


def line_amounts(unit_price: Number, quantity: int, gst_percent: Number) -> LineAmounts:
    base = round2(to_decimal(unit_price) * quantity)
    gst_amount = round2(base * to_decimal(gst_percent) / HUNDRED)
    return LineAmounts(base=base, gst_amount=gst_amount, total=round2(base + gst_amount))


def order_totals(lines: Iterable[LineAmounts]) -> OrderTotals:
    subtotal = ZERO
    gst_total = ZERO
    for line in lines:
        subtotal += line.base
        gst_total += line.gst_amount
    subtotal = round2(subtotal)
    gst_total = round2(gst_total)
    return OrderTotals(
        subtotal=subtotal,
        gst_total=gst_total,
        grand_total=round2(subtotal + gst_total),
    )
