from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    purchase_price: Decimal = Field(ge=0)
    sale_price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    available: bool = True
    image_url: str | None = None
    category: str | None = None
    supplier: str | None = None
    purchase_date: date | None = None


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    purchase_price: Decimal | None = Field(default=None, ge=0)
    sale_price: Decimal | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    available: bool | None = None
    image_url: str | None = None
    category: str | None = None
    supplier: str | None = None
    purchase_date: date | None = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    purchase_price: float
    sale_price: float
    stock: int
    available: bool
    image_url: str | None = None
    category: str | None = None
    supplier: str | None = None
    purchase_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
