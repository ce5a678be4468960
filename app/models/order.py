from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Enum,
    Text,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
import enum
from app.db.base_class import Base
from app.services.pricing import line_amounts, split_strips


class OrderStatus(str, enum.Enum):
    DRAFT = "draft"            # open scan cart, still accumulating
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("sellers.id"), nullable=False)

    # Pricing
    subtotal = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    gst_total = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    grand_total = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.COMPLETED, nullable=False, index=True)
    # Set only while the order is the seller's open scan cart for that day
    cart_date = Column(Date, nullable=True)

    notes = Column(Text, nullable=True)

    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    seller = relationship("Seller", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        UniqueConstraint("seller_id", "cart_date", name="uq_orders_seller_cart_date"),
    )
    __mapper_args__ = {"version_id_col": version}

    @property
    def seller_name(self) -> str:
        return self.seller.name if self.seller else "N/A"


Index("ix_orders_seller_created_at", Order.seller_id, Order.created_at)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    variant_id = Column(Integer, ForeignKey("product_variations.id"), nullable=False)

    quantity = Column(Integer, nullable=False)  # strips

    # Snapshot at order time
    unit_price = Column(Numeric(10, 2), nullable=False)
    gst_percent = Column(Numeric(5, 2), nullable=False)

    gst_amount = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product")
    variant = relationship("ProductVariation")

    __table_args__ = (
        UniqueConstraint("order_id", "variant_id", name="uq_order_items_order_variant"),
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    @property
    def base_amount(self) -> Decimal:
        return line_amounts(self.unit_price, self.quantity, self.gst_percent).base

    @property
    def product_name(self) -> str:
        return self.product.name if self.product else "N/A"

    @property
    def variant_name(self) -> str:
        return self.variant.variation_name if self.variant else "N/A"

    @property
    def box_quantity(self) -> int:
        return self.variant.box_quantity if self.variant else 0

    @property
    def boxes(self) -> int:
        return split_strips(self.quantity, self.box_quantity)[0]

    @property
    def remaining_strips(self) -> int:
        return split_strips(self.quantity, self.box_quantity)[1]
