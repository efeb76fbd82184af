# storefront/schemas/checkout.py
from pydantic import ConfigDict
from sqlmodel import SQLModel


class PaymentMethod(SQLModel):
    """
    Payment method descriptor produced by the payments collaborator.

    fee:
      - number => proportional rate applied to the subtotal (0.025 = 2.5%)
      - string => flat amount ("25")
      - missing / 0 => no gateway fee
    minimum_fee floors the computed fee.
    """

    id: str
    name: str
    enabled: bool = True
    fee: float | str | None = None
    minimum_fee: float | None = None


class CheckoutTotals(SQLModel):
    """
    Checkout breakdown, recomputed on every call.
    """

    original_subtotal: float
    deal_savings: float
    subtotal: float
    delivery_charge: float
    gateway_fee: float
    grand_total: float


class CheckoutQuoteRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    payment_method: str | None = None
