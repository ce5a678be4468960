from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.models.order import OrderStatus
from app.schemas._money import Money
from app.schemas._sanitize import clean_text


class OrderItemIn(BaseModel):
    variant_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    # Alternate key: when variant_id is not a product variation id it is read
    # as a variation id of this product.
    product_id: Optional[int] = Field(default=None, gt=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    gst_percent: Optional[Decimal] = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)


class OrderCreate(BaseModel):
    seller_id: int = Field(..., gt=0)
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, value: Optional[str]) -> Optional[str]:
        return clean_text(value, max_length=500, field="Notes")


class OrderUpdate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, value: Optional[str]) -> Optional[str]:
        return clean_text(value, max_length=500, field="Notes")


class ScanRequest(BaseModel):
    seller_id: int = Field(..., gt=0)
    barcode: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(default=1, gt=0)  # scan events, multiplied by the box size for box codes

    @field_validator("barcode")
    @classmethod
    def strip_barcode(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Barcode is required")
        return value


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    variant_id: int
    variant_name: str
    quantity: int
    box_quantity: int
    boxes: int
    remaining_strips: int
    unit_price: Money
    gst_percent: Money
    base_amount: Money
    gst_amount: Money
    total: Money

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    seller_id: int
    seller_name: str
    status: OrderStatus
    subtotal: Money
    gst_total: Money
    grand_total: Money
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse]

    class Config:
        from_attributes = True


class OrderSummaryResponse(BaseModel):
    id: int
    seller_id: int
    seller_name: str
    status: OrderStatus
    subtotal: Money
    gst_total: Money
    grand_total: Money
    item_count: int
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderSummaryResponse":
        return cls(
            id=order.id,
            seller_id=order.seller_id,
            seller_name=order.seller_name,
            status=order.status,
            subtotal=order.subtotal,
            gst_total=order.gst_total,
            grand_total=order.grand_total,
            item_count=len(order.items),
            created_at=order.created_at,
        )


class ScanDetail(BaseModel):
    barcode: str
    code_type: str
    variant_id: int
    units_added: int
    item_quantity: int
    stock_in_hand: int


class ScanResponse(BaseModel):
    order: OrderResponse
    scan: ScanDetail
