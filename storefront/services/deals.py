# storefront/services/deals.py
import logging
import re
from collections.abc import Iterable

from storefront.core.exceptions import InvalidDealEncodingError
from storefront.schemas.cart import DealRecord, DealsSummary, LineItem

logger = logging.getLogger(__name__)

# Minimum line quantity before a deal is even considered
BOGO_MIN_QUANTITY = 2
BUNDLE_MIN_QUANTITY = 3

_BUNDLE_PATTERN = re.compile(r"^\s*(\d+)\s*for\s*(\d+)\s*$", re.IGNORECASE)


def parse_bundle_terms(deal_value: str | None) -> tuple[int, int]:
    """
    Parse a bundle encoding such as "3for2" or " 3 for 2 ".

    Returns (buy_qty, pay_qty). Both must be positive and pay_qty must be
    smaller than buy_qty, otherwise InvalidDealEncodingError is raised.
    """
    if not deal_value:
        raise InvalidDealEncodingError("Bundle deal has no terms")

    match = _BUNDLE_PATTERN.match(deal_value)
    if match is None:
        raise InvalidDealEncodingError(f"Unrecognised bundle terms: {deal_value!r}")

    buy_qty, pay_qty = int(match.group(1)), int(match.group(2))
    if buy_qty <= 0 or pay_qty <= 0 or pay_qty >= buy_qty:
        raise InvalidDealEncodingError(f"Bundle terms out of range: {deal_value!r}")

    return buy_qty, pay_qty


def _bogo_deal(item: LineItem) -> DealRecord | None:
    if item.quantity < BOGO_MIN_QUANTITY:
        return None

    free_items = item.quantity // 2
    return DealRecord(
        id=f"{item.id}-bogo",
        product_id=item.id,
        product_name=item.name,
        type="BOGO",
        description="Buy 1 Get 1 Free",
        free_items=free_items,
        savings=free_items * item.price,
        applied_quantity=item.quantity,
    )


def _bundle_deal(item: LineItem) -> DealRecord | None:
    if item.quantity < BUNDLE_MIN_QUANTITY:
        return None

    try:
        buy_qty, pay_qty = parse_bundle_terms(item.deal_value)
    except InvalidDealEncodingError as exc:
        logger.debug("Ignoring bundle deal on %s: %s", item.id, exc)
        return None

    if item.quantity < buy_qty:
        return None

    bundle_sets = item.quantity // buy_qty
    free_items = bundle_sets * (buy_qty - pay_qty)
    return DealRecord(
        id=f"{item.id}-bundle",
        product_id=item.id,
        product_name=item.name,
        type="Bundle",
        description=f"{item.deal_value} Deal",
        free_items=free_items,
        savings=free_items * item.price,
        applied_quantity=item.quantity,
        bundle_sets=bundle_sets,
    )


def compute_deals(items: Iterable[LineItem]) -> DealsSummary:
    """
    Detect applicable deals and compute savings for every line item.

    Savings use each item's nominal `price`, not the hierarchy-resolved
    price. The summary is rebuilt from scratch on every call.
    """
    applied: list[DealRecord] = []

    for item in items:
        if item.deal_type == "BOGO":
            deal = _bogo_deal(item)
        elif item.deal_type == "Bundle":
            deal = _bundle_deal(item)
        else:
            deal = None

        if deal is not None:
            applied.append(deal)

    return DealsSummary(
        total_savings=sum(deal.savings for deal in applied),
        applied_deals=applied,
    )
