"""Pydantic schemas for the storefront package."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class ProductStatus(str, Enum):
    PUBLISHED = "published"
    DRAFT = "draft"
    ARCHIVED = "archived"


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    cost_price: Optional[float] = Field(default=None, ge=0)
    sku: Optional[str] = None
    stock_quantity: int = Field(default=0, ge=0)
    category: Optional[str] = None
    status: ProductStatus = ProductStatus.DRAFT
    featured_image_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("sku", "category", "featured_image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class Product(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    repairer_id: Optional[str] = None
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    price: float = 0.0
    cost_price: Optional[float] = None
    sku: Optional[str] = None
    stock_quantity: int = 0
    stock_status: StockStatus = StockStatus.OUT_OF_STOCK
    category: Optional[str] = None
    status: ProductStatus = ProductStatus.DRAFT
    featured_image_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", "repairer_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("price", "stock_quantity", mode="before")
    @classmethod
    def null_number(cls, v: Any) -> Any:
        return 0 if v is None else v


class ProductFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[str] = None


class StatusUpdate(BaseModel):
    status: ProductStatus


class StockUpdate(BaseModel):
    stock_quantity: int = Field(..., ge=0)
