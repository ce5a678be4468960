from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal, Optional
from decimal import Decimal

from app.schemas._money import Money
from app.schemas._sanitize import clean_text


class ProductVariationResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    variation_id: int
    variation_name: str
    price: Money
    gst_percent: Money
    box_quantity: int
    stock_in_hand: int
    product_qr_code: Optional[str]
    box_qr_code: Optional[str]
    is_active: bool

    class Config:
        from_attributes = True


class BarcodeLookupResponse(BaseModel):
    type: Literal["PRODUCT_QR", "BOX_QR"]
    scanned_qr: Literal["product_qr_code", "box_qr_code"]
    variant_id: int
    product_id: int
    variation_id: int
    product_name: str
    variation_name: str
    price_per_unit: Money
    gst_percent: Money
    box_quantity: int
    units_per_scan: int
    stock_in_hand: int


class ScanProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    gst_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100, max_digits=5, decimal_places=2)
    hsn_code: Optional[str] = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = clean_text(value, max_length=200, field="Name")
        if not cleaned:
            raise ValueError("Name is required")
        return cleaned


class ScanVariationIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = clean_text(value, max_length=100, field="Name")
        if not cleaned:
            raise ValueError("Name is required")
        return cleaned


class ScanProductVariationIn(BaseModel):
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    box_quantity: int = Field(default=1, gt=0)
    stock_in_hand: int = Field(default=0, ge=0)
    product_qr_code: Optional[str] = Field(default=None, max_length=100)
    box_qr_code: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def validate_codes(self):
        if not self.product_qr_code and not self.box_qr_code:
            raise ValueError("At least one of product_qr_code or box_qr_code is required")
        if self.product_qr_code and self.product_qr_code == self.box_qr_code:
            raise ValueError("product_qr_code and box_qr_code must differ")
        return self


class ScanProductCreate(BaseModel):
    product: ScanProductIn
    variation: ScanVariationIn
    product_variation: ScanProductVariationIn
