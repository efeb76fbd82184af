# storefront/services/checkout.py
import logging
from collections.abc import Sequence

from storefront.schemas.cart import LineItem
from storefront.schemas.checkout import CheckoutTotals, PaymentMethod
from storefront.services.deals import compute_deals

logger = logging.getLogger(__name__)

# Orders at or above this subtotal (after deals) ship for free
FREE_DELIVERY_THRESHOLD = 2000

# Flat delivery charge below the threshold
DELIVERY_CHARGE = 150


def calculate_delivery_charge(subtotal: float) -> float:
    return 0 if subtotal >= FREE_DELIVERY_THRESHOLD else DELIVERY_CHARGE


def calculate_gateway_fee(payment_method: PaymentMethod | None, subtotal: float) -> float:
    """
    Gateway surcharge for the selected payment method.

      - no method / no fee      => 0
      - numeric fee             => fee * subtotal
      - string fee              => flat amount
    The result is floored at minimum_fee.
    """
    if payment_method is None or not payment_method.fee:
        return 0

    fee = payment_method.fee
    if isinstance(fee, (int, float)):
        amount = fee * subtotal
    else:
        try:
            amount = float(fee)
        except ValueError:
            logger.warning(
                "Ignoring unparsable fee %r for payment method %s", fee, payment_method.id
            )
            amount = 0

    return max(amount, payment_method.minimum_fee or 0)


def compute_checkout_totals(
    items: Sequence[LineItem],
    payment_method: PaymentMethod | None = None,
) -> CheckoutTotals:
    """
    Checkout breakdown for the given (ideally just validated) items.

    Deal savings are recomputed here from the items passed in, never taken
    from a cart's cached summary: validated prices may differ from the ones
    the cart last summarised.
    """
    original_subtotal = sum(item.price * item.quantity for item in items)
    deal_savings = compute_deals(items).total_savings

    subtotal = max(original_subtotal - deal_savings, 0)
    delivery_charge = calculate_delivery_charge(subtotal)
    gateway_fee = calculate_gateway_fee(payment_method, subtotal)

    return CheckoutTotals(
        original_subtotal=original_subtotal,
        deal_savings=deal_savings,
        subtotal=subtotal,
        delivery_charge=delivery_charge,
        gateway_fee=gateway_fee,
        grand_total=subtotal + delivery_charge + gateway_fee,
    )
