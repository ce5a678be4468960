from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, sessionmaker

from app.models.order import Order, OrderStatus
from app.models.seller import Seller
from app.tasks import order_tasks


def _create_cart(db: Session, seller: Seller, cart_day: date) -> int:
    cart = Order(
        seller_id=seller.id,
        status=OrderStatus.DRAFT,
        cart_date=cart_day,
        subtotal=Decimal("0.00"),
        gst_total=Decimal("0.00"),
        grand_total=Decimal("0.00"),
    )
    db.add(cart)
    db.commit()
    return cart.id


def test_finalize_stale_carts_task(monkeypatch, session_factory: sessionmaker, db_session: Session):
    seller = Seller(name="Night Shift Pharma", is_active=True)
    db_session.add(seller)
    db_session.commit()
    stale_id = _create_cart(db_session, seller, date(2020, 1, 1))
    open_id = _create_cart(db_session, seller, date.today())

    monkeypatch.setattr(order_tasks, "SessionLocal", session_factory)

    assert order_tasks.finalize_stale_carts() == 1

    db_session.expire_all()
    stale = db_session.get(Order, stale_id)
    assert stale.status == OrderStatus.COMPLETED
    assert stale.cart_date is None
    assert db_session.get(Order, open_id).status == OrderStatus.DRAFT
