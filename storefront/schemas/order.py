# storefront/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel

OrderStatus = Literal["confirmed", "payment_pending"]
VerificationStatus = Literal["pending"]


class OrderLine(SQLModel):
    """
    A validated line handed to the order assembler (catalog price).
    """

    id: uuid.UUID
    name: str
    price: float
    quantity: int
    image: str | None = None


class OrderDraft(SQLModel):
    """
    Everything the order assembler needs from checkout.

    Customer, payment and session fields are attached by the caller.
    """

    items: list[OrderLine]
    subtotal: float
    deal_savings: float
    delivery_charge: float
    gateway_fee: float
    total: float


class PaymentResult(SQLModel):
    """
    Outcome of a gateway transaction executed outside this service.
    """

    transaction_id: str
    reference: str | None = None
    timestamp: datetime | None = None
    success: bool = True


class OrderCreate(SQLModel):
    """
    Payload for placing an order from the current cart.

    User provides:
      - contact details and delivery address
      - payment method id (+ gateway result for non-cash methods)

    Backend derives:
      - items and prices (re-validated against the catalog)
      - totals breakdown (deals, delivery, gateway fee)
      - status / verification_status from the payment method
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    phone: str
    email: str | None = None
    address: str
    city: str
    postal_code: str | None = None
    instructions: str | None = None

    payment_method: str
    transaction_id: str | None = None
    payment_result: PaymentResult | None = None

    @field_validator("name", "phone", "address", "city", "payment_method")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("email", "postal_code", "instructions", "transaction_id")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    customer_name: str
    phone: str
    email: str | None
    address: str
    city: str
    postal_code: str | None
    instructions: str | None
    payment_method: str
    transaction_id: str | None
    status: OrderStatus
    verification_status: VerificationStatus | None
    subtotal: float
    deal_savings: float
    delivery_charge: float
    gateway_fee: float
    total_amount: float
    price_validated_at: datetime
    created_at: datetime


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_image: str | None
    quantity: int
    unit_price: float
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]
