from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
from app.db.base_class import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)

    # Tax
    gst_percent = Column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)  # 0, 5, 18, 40
    hsn_code = Column(String(20), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    variants = relationship("ProductVariation", back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("gst_percent >= 0 AND gst_percent <= 100", name="ck_products_gst_percent_range"),
    )


class Variation(Base):
    """Packaging / flavour dimension shared across products (500ml, Red, ...)"""
    __tablename__ = "variations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    product_variations = relationship("ProductVariation", back_populates="variation")


class ProductVariation(Base):
    """Sellable unit: price, box size, stock and barcodes per product x variation"""
    __tablename__ = "product_variations"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    variation_id = Column(Integer, ForeignKey("variations.id"), nullable=False)

    price = Column(Numeric(10, 2), nullable=False)  # per strip
    box_quantity = Column(Integer, default=1, nullable=False)  # strips per box
    stock_in_hand = Column(Integer, default=0, nullable=False)  # strips

    product_qr_code = Column(String(100), unique=True, nullable=True, index=True)
    box_qr_code = Column(String(100), unique=True, nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = Column(DateTime, nullable=True)

    # Relationships
    product = relationship("Product", back_populates="variants")
    variation = relationship("Variation", back_populates="product_variations")

    __table_args__ = (
        UniqueConstraint("product_id", "variation_id", name="uq_product_variations_product_variation"),
        CheckConstraint("stock_in_hand >= 0", name="ck_product_variations_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_product_variations_price_non_negative"),
    )

    @property
    def product_name(self) -> str:
        return self.product.name if self.product else "N/A"

    @property
    def variation_name(self) -> str:
        return self.variation.name if self.variation else "N/A"

    @property
    def gst_percent(self) -> Decimal:
        return self.product.gst_percent if self.product else Decimal("0")


Index("ix_product_variations_stock_in_hand", ProductVariation.stock_in_hand)
