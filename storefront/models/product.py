# storefront/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Pricing hierarchy:
      base_price -> variation_price (override when > 0) -> seasonal discount
    `price` is the nominal shelf price shown in listings and used by deals.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        min_length=1,
        index=True,
        description="Display name of the product",
    )

    price: float = Field(
        ge=0,
        description="Nominal unit price",
    )

    stock: int = Field(
        default=0,
        description="How many units currently in stock",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    unit: str | None = Field(
        default=None,
        description="Display unit (piece, kg, pack...)",
    )

    image_url: str | None = Field(
        default=None,
        description="Main product image URL",
    )

    # ---- Pricing hierarchy ----

    base_price: float | None = Field(
        default=None,
        description="Base price; falls back to price when empty",
    )

    variation_price: float | None = Field(
        default=None,
        description="Variation override, used when > 0",
    )

    seasonal_discount: float | None = Field(
        default=None,
        description="Seasonal discount magnitude",
    )

    # Percentage | Fixed Amount
    seasonal_discount_type: str | None = Field(
        default=None,
        description="How seasonal_discount is applied",
    )

    seasonal_discount_active: bool = Field(
        default=False,
        description="Whether the seasonal discount is currently running",
    )

    # ---- Deals ----

    # BOGO | Bundle
    deal_type: str | None = Field(
        default=None,
        description="Promotional deal kind",
    )

    deal_value: str | None = Field(
        default=None,
        description='Bundle terms, e.g. "3for2"',
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
