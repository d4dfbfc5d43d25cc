"""Database Models - Pydantic models for catalog and cart rows."""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from farmcart.services.money import multiply, to_decimal as _to_decimal

SellerRole = Literal["customer", "farmer", "meat_seller"]
ProductCategory = Literal["live_animal", "cut_meat"]


class Seller(BaseModel):
    """User row embedded as a product's seller."""
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: SellerRole = "customer"
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CatalogEntry(BaseModel):
    """Product model (a sellable animal or cut)."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    category: ProductCategory = "cut_meat"
    subcategory: Optional[str] = None
    images: list[str] = []
    seller_id: Optional[str] = None
    seller: Optional[Seller] = None
    stock_quantity: int = 0
    weight: Optional[float] = None
    weight_unit: Optional[Literal["kg", "lbs"]] = None
    breed: Optional[str] = None
    age_months: Optional[int] = None
    certifications: list[str] = []
    is_available: bool = True
    rating: float = 0.0
    review_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("images", "certifications", mode="before")
    @classmethod
    def null_list_to_empty(cls, v):
        return v or []


class CartLine(BaseModel):
    """One (principal, product, quantity) row joined with its product.

    ``product`` is a snapshot taken when the row was last read from the
    store; it is not refreshed when the catalog changes.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    user_id: str
    product_id: str
    quantity: int = Field(ge=1)
    product: CatalogEntry
    created_at: Optional[datetime] = None

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        """Quantity times snapshot price."""
        return multiply(self.product.price, self.quantity)


class MarketplaceStats(BaseModel):
    """Storefront counters shown on the home page."""
    total_products: int = 0
    active_sellers: int = 0
    total_orders: int = 0
