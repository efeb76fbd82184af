# storefront/services/pricing.py
from storefront.schemas.cart import PricingFields


def resolve_price(item: PricingFields) -> float:
    """
    Effective unit price from the pricing hierarchy.

    Precedence (each stage only applies when eligible):
      1. base_price (falls back to price when missing)
      2. variation_price, when present and > 0
      3. active seasonal discount on top of whichever of the above won:
           - Percentage   => price * (1 - discount / 100)
           - Fixed Amount => price - discount

    The result is never negative.
    """
    effective = item.base_price or item.price or 0.0

    if item.variation_price is not None and item.variation_price > 0:
        effective = item.variation_price

    discount = item.seasonal_discount or 0.0
    if item.seasonal_discount_active and discount > 0:
        if item.seasonal_discount_type == "Percentage":
            effective = effective * (1 - discount / 100)
        else:
            effective = effective - discount

    return max(effective, 0.0)
