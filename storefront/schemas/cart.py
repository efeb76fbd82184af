# storefront/schemas/cart.py
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import field_validator
from sqlmodel import SQLModel, Field

DealType = Literal["BOGO", "Bundle"]
SeasonalDiscountType = Literal["Percentage", "Fixed Amount"]

DEFAULT_UNIT = "piece"
DEFAULT_DISCOUNT_TYPE: SeasonalDiscountType = "Fixed Amount"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PricingFields(SQLModel):
    """
    Pricing hierarchy + deal fields shared by catalog records and cart items.

    Catalog data is not trusted: missing or malformed values are coerced to
    safe defaults instead of failing validation.
    """

    price: float = 0.0
    stock: int = 0

    base_price: float | None = None
    variation_price: float | None = None
    seasonal_discount: float = 0.0
    seasonal_discount_type: SeasonalDiscountType = DEFAULT_DISCOUNT_TYPE
    seasonal_discount_active: bool = False

    deal_type: DealType | None = None
    deal_value: str | None = None

    @field_validator("price", "seasonal_discount", mode="before")
    @classmethod
    def default_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("stock", mode="before")
    @classmethod
    def non_negative_stock(cls, v: Any) -> Any:
        if v is None:
            return 0
        try:
            return max(int(v), 0)
        except (TypeError, ValueError):
            return 0

    @field_validator("seasonal_discount_active", mode="before")
    @classmethod
    def default_inactive(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("seasonal_discount_type", mode="before")
    @classmethod
    def normalize_discount_type(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip().lower() == "percentage":
            return "Percentage"
        return DEFAULT_DISCOUNT_TYPE

    @field_validator("deal_type", mode="before")
    @classmethod
    def normalize_deal_type(cls, v: Any) -> str | None:
        if not isinstance(v, str):
            return None
        key = v.strip().lower()
        if key == "bogo":
            return "BOGO"
        if key == "bundle":
            return "Bundle"
        return None

    @field_validator("deal_value", mode="before")
    @classmethod
    def blank_deal_value(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LineItem(PricingFields):
    """
    One product quantity in the cart.

    `price` is the last-known nominal unit price (used by deal math and
    display); the effective unit price comes from the pricing hierarchy.
    """

    id: uuid.UUID
    name: str
    unit: str = DEFAULT_UNIT
    image: str | None = None

    quantity: int = Field(default=1, ge=1)

    added_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class DealRecord(SQLModel):
    """
    A promotional deal applied to one line item. Derived, never stored.
    """

    id: str
    product_id: uuid.UUID
    product_name: str
    type: DealType
    description: str
    free_items: int
    savings: float
    applied_quantity: int
    bundle_sets: int | None = None


class DealsSummary(SQLModel):
    total_savings: float = 0.0
    applied_deals: list[DealRecord] = Field(default_factory=list)


class CartState(SQLModel):
    """
    Full cart state.

    total / item_count / deals_summary are outputs of CartStore.recompute()
    and are never written anywhere else.
    """

    items: list[LineItem] = Field(default_factory=list)
    total: float = 0.0
    item_count: int = 0
    deals_summary: DealsSummary = Field(default_factory=DealsSummary)
    last_validated: datetime | None = None
    error: str | None = None
    is_loading: bool = False


class ItemValidation(SQLModel):
    """
    Result of re-checking one line item against the catalog.
    """

    id: uuid.UUID
    name: str
    unavailable: bool = False
    error: str | None = None

    old_price: float | None = None
    new_price: float | None = None
    old_stock: int | None = None
    new_stock: int | None = None
    price_changed: bool = False
    stock_changed: bool = False


class ValidationReport(SQLModel):
    """
    Outcome of one validation pass.

    notices are the human-readable messages for the UI (removed items,
    adjusted quantities, price moves).
    """

    results: list[ItemValidation] = Field(default_factory=list)
    notices: list[str] = Field(default_factory=list)
    changed: bool = False
    validated_at: datetime | None = None


# ---- Request payloads ----


class CartItemCreate(SQLModel):
    """
    Payload for adding one unit of a product to the cart.
    """

    product_id: uuid.UUID


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart item (<= 0 removes it).
    """

    quantity: int
