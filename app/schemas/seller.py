from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas._sanitize import clean_text


class SellerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    contact_number: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = clean_text(value, max_length=200, field="Name")
        if not cleaned:
            raise ValueError("Name is required")
        return cleaned

    @field_validator("address")
    @classmethod
    def validate_address(cls, value: Optional[str]) -> Optional[str]:
        return clean_text(value, max_length=500, field="Address")


class SellerResponse(BaseModel):
    id: int
    name: str
    contact_number: Optional[str]
    email: Optional[str]
    address: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
