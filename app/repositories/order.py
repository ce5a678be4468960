from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from app.models.order import Order, OrderItem, OrderStatus
from app.models.product import ProductVariation


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _live(self):
        return self.db.query(Order).filter(Order.deleted_at.is_(None))

    def get(self, order_id: int) -> Optional[Order]:
        return (
            self._live()
            .options(
                selectinload(Order.seller),
                selectinload(Order.items).selectinload(OrderItem.product),
                selectinload(Order.items)
                .selectinload(OrderItem.variant)
                .selectinload(ProductVariation.variation),
            )
            .filter(Order.id == order_id)
            .first()
        )

    def get_for_update(self, order_id: int) -> Optional[Order]:
        return self._live().filter(Order.id == order_id).with_for_update().first()

    def find_open_cart_for_update(self, seller_id: int, cart_day: date) -> Optional[Order]:
        return (
            self._live()
            .filter(
                Order.seller_id == seller_id,
                Order.cart_date == cart_day,
                Order.status == OrderStatus.DRAFT,
            )
            .with_for_update()
            .first()
        )

    def stale_carts_for_update(self, before: date) -> List[Order]:
        return (
            self._live()
            .filter(Order.status == OrderStatus.DRAFT, Order.cart_date < before)
            .order_by(Order.id)
            .with_for_update()
            .all()
        )

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def list(
        self,
        *,
        seller_id: Optional[int],
        status: Optional[OrderStatus],
        offset: int,
        limit: int,
    ) -> Tuple[List[Order], int]:
        query = self._live()
        if seller_id is not None:
            query = query.filter(Order.seller_id == seller_id)
        if status is not None:
            query = query.filter(Order.status == status)

        total = query.count()
        orders = (
            query.options(selectinload(Order.seller), selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return orders, total
