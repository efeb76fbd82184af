# storefront/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order assembled at checkout.

    Stores the totals breakdown exactly as computed from re-validated
    catalog prices at submission time.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    # ---- Customer / delivery ----

    customer_name: str = Field(
        description="Name of the person receiving the order",
    )
    phone: str = Field(
        description="Contact phone number for delivery",
    )
    email: str | None = Field(
        default=None,
        description="Contact email (optional)",
    )
    address: str = Field(
        description="Street address",
    )
    city: str = Field(
        description="City",
    )
    postal_code: str | None = Field(
        default=None,
    )
    instructions: str | None = Field(
        default=None,
        description="Optional delivery instructions",
    )

    # ---- Payment ----

    payment_method: str = Field(
        index=True,
        description="Payment method id",
    )
    transaction_id: str | None = Field(
        default=None,
        description="Gateway transaction id for non-cash payments",
    )

    # confirmed | payment_pending
    status: str = Field(
        default="payment_pending",
        index=True,
        description="Order status lifecycle",
    )

    # pending | None (cash orders need no verification)
    verification_status: str | None = Field(
        default=None,
    )

    # ---- Totals ----

    subtotal: float = Field(
        description="Subtotal after deal savings",
    )
    deal_savings: float = Field(
        default=0,
    )
    delivery_charge: float = Field(
        default=0,
    )
    gateway_fee: float = Field(
        default=0,
    )
    total_amount: float = Field(
        description="subtotal + delivery_charge + gateway_fee",
    )

    price_validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When item prices were last checked against the catalog",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    product_name: str = Field(
        description="Product name at time of order",
    )

    product_image: str | None = Field(
        default=None,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    # Catalog price at time of order, before deals
    unit_price: float = Field(
        description="Validated unit price at time of order",
    )
