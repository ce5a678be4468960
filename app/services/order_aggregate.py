from decimal import Decimal
from typing import Dict, Optional

from app.models.order import Order, OrderItem
from app.models.product import ProductVariation
from app.services.pricing import OrderTotals, line_amounts, order_totals


class OrderAggregate:
    """An order plus its line items, with totals derived from the items.

    Totals are recomputed from scratch after every mutation. Stock is not
    touched here; the coordinator pairs each quantity change with a ledger
    call.
    """

    def __init__(self, order: Order):
        self.order = order
        self._items: Dict[int, OrderItem] = {item.variant_id: item for item in order.items}

    def item_for(self, variant_id: int) -> Optional[OrderItem]:
        return self._items.get(variant_id)

    def quantity_of(self, variant_id: int) -> int:
        item = self._items.get(variant_id)
        return item.quantity if item else 0

    def variant_ids(self):
        return list(self._items.keys())

    def add_or_replace_item(
        self,
        variant: ProductVariation,
        quantity: int,
        unit_price: Optional[Decimal] = None,
        gst_percent: Optional[Decimal] = None,
    ) -> OrderTotals:
        if quantity <= 0:
            raise ValueError("Line quantity must be positive")

        item = self._items.get(variant.id)
        if item is None:
            item = OrderItem(
                product_id=variant.product_id,
                variant_id=variant.id,
                unit_price=variant.price if unit_price is None else unit_price,
                gst_percent=variant.gst_percent if gst_percent is None else gst_percent,
            )
            item.product = variant.product
            item.variant = variant
            self.order.items.append(item)
            self._items[variant.id] = item
        else:
            if unit_price is not None:
                item.unit_price = unit_price
            if gst_percent is not None:
                item.gst_percent = gst_percent

        item.quantity = quantity
        amounts = line_amounts(item.unit_price, item.quantity, item.gst_percent)
        item.gst_amount = amounts.gst_amount
        item.total = amounts.total
        return self.recompute()

    def remove_item(self, variant_id: int) -> OrderTotals:
        item = self._items.pop(variant_id, None)
        if item is not None:
            self.order.items.remove(item)
        return self.recompute()

    def recompute(self) -> OrderTotals:
        totals = order_totals(
            line_amounts(item.unit_price, item.quantity, item.gst_percent)
            for item in self._items.values()
        )
        self.order.subtotal = totals.subtotal
        self.order.gst_total = totals.gst_total
        self.order.grand_total = totals.grand_total
        return totals
