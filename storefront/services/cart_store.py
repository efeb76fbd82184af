# storefront/services/cart_store.py
import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from storefront.core.config import get_settings
from storefront.schemas.cart import (
    DEFAULT_UNIT,
    CartState,
    DealsSummary,
    ItemValidation,
    LineItem,
)
from storefront.schemas.product import CatalogProduct
from storefront.services.deals import compute_deals
from storefront.services.pricing import resolve_price

logger = logging.getLogger(__name__)

# Pricing hierarchy fields refreshed from the catalog on every add
HIERARCHY_FIELDS = (
    "base_price",
    "variation_price",
    "seasonal_discount",
    "seasonal_discount_type",
    "seasonal_discount_active",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CartStore:
    """
    Authoritative in-memory cart for one shopping session.

    Responsibilities:
      - own the CartState (one store per session, passed to callers)
      - synchronous mutations: add / remove / set_quantity / clear
      - keep total / item_count / deals_summary derived via recompute()
        after every items mutation
      - apply a validation pass as one atomic batch

    Mutations never raise: quantities are clamped to the last-known stock
    and bad catalog data is coerced to safe defaults.
    """

    def __init__(self, placeholder_image: str | None = None, currency: str | None = None):
        settings = get_settings()
        self.placeholder_image = placeholder_image or settings.PLACEHOLDER_IMAGE_URL
        self.currency = currency or settings.CURRENCY_LABEL
        self._state = CartState()

    # ---- read accessors ----

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> list[LineItem]:
        return list(self._state.items)

    @property
    def total(self) -> float:
        return self._state.total

    @property
    def item_count(self) -> int:
        return self._state.item_count

    @property
    def deals_summary(self) -> DealsSummary:
        return self._state.deals_summary

    @property
    def total_savings(self) -> float:
        return self._state.deals_summary.total_savings

    @property
    def last_validated(self) -> datetime | None:
        return self._state.last_validated

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def get(self, product_id: uuid.UUID) -> LineItem | None:
        for item in self._state.items:
            if item.id == product_id:
                return item
        return None

    def contains(self, product_id: uuid.UUID) -> bool:
        return self.get(product_id) is not None

    def quantity_of(self, product_id: uuid.UUID) -> int:
        item = self.get(product_id)
        return item.quantity if item else 0

    def snapshot(self) -> CartState:
        """Deep copy of the current state, safe to hand to other code."""
        return self._state.model_copy(deep=True)

    # ---- status flags (no recompute) ----

    def set_loading(self, loading: bool) -> None:
        self._state.is_loading = loading

    def set_error(self, message: str | None) -> None:
        self._state.error = message

    def clear_error(self) -> None:
        self._state.error = None

    # ---- mutations ----

    def add(self, product: CatalogProduct, refresh_price: bool = False) -> None:
        """
        Add one unit of `product`.

        Existing line: quantity += 1, clamped to product.stock. When the
        quantity actually grows, the pricing hierarchy and stock are
        refreshed from `product` (and the nominal price too if
        refresh_price is set).

        New line: inserted with quantity 1 unless the product has no stock.
        """
        existing = self.get(product.id)

        if existing is not None:
            new_quantity = min(existing.quantity + 1, product.stock)
            if new_quantity > existing.quantity:
                existing.quantity = new_quantity
                existing.updated_at = _now()
                for field in HIERARCHY_FIELDS:
                    setattr(existing, field, getattr(product, field))
                existing.base_price = product.base_price or product.price
                existing.stock = product.stock
                if refresh_price:
                    existing.price = product.price
            else:
                logger.debug(
                    "Quantity of %s already at stock limit (%s)", product.id, product.stock
                )
        elif product.stock <= 0:
            logger.info("Not adding %s to cart: out of stock", product.id)
        else:
            now = _now()
            self._state.items.append(
                LineItem(
                    id=product.id,
                    name=product.name,
                    unit=product.unit or DEFAULT_UNIT,
                    image=product.image or self.placeholder_image,
                    price=product.price,
                    stock=product.stock,
                    base_price=product.base_price or product.price,
                    variation_price=product.variation_price or None,
                    seasonal_discount=product.seasonal_discount,
                    seasonal_discount_type=product.seasonal_discount_type,
                    seasonal_discount_active=product.seasonal_discount_active,
                    deal_type=product.deal_type,
                    deal_value=product.deal_value,
                    quantity=1,
                    added_at=now,
                    updated_at=now,
                )
            )

        self.recompute()

    def remove(self, product_id: uuid.UUID) -> None:
        """Remove a line; unknown ids are ignored."""
        self._drop(product_id)
        self.recompute()

    def set_quantity(self, product_id: uuid.UUID, quantity: int) -> None:
        """
        Set the quantity of a line, clamped to its last-known stock.

        quantity <= 0 removes the line.
        """
        if quantity <= 0:
            self._drop(product_id)
        else:
            item = self.get(product_id)
            if item is not None:
                clamped = min(quantity, item.stock)
                if clamped <= 0:
                    self._drop(product_id)
                else:
                    if clamped < quantity:
                        logger.debug(
                            "Clamped quantity of %s from %s to %s", product_id, quantity, clamped
                        )
                    item.quantity = clamped
                    item.updated_at = _now()

        self.recompute()

    def refresh_from_catalog(self, product: CatalogProduct) -> None:
        """
        Overwrite a line's nominal price, hierarchy and stock with current
        catalog data, clamping quantity to the new stock.
        """
        item = self.get(product.id)
        if item is None:
            return

        item.price = product.price
        item.stock = product.stock
        for field in HIERARCHY_FIELDS:
            setattr(item, field, getattr(product, field))
        item.base_price = product.base_price or product.price
        item.updated_at = _now()

        if item.quantity > item.stock:
            if item.stock <= 0:
                self._drop(product.id)
            else:
                item.quantity = item.stock

        self.recompute()

    def clear(self) -> None:
        """Reset to the empty cart."""
        self._state.items = []
        self._state.total = 0.0
        self._state.item_count = 0
        self._state.deals_summary = DealsSummary()
        self._state.error = None
        self._state.last_validated = None

    def apply_validation(
        self, results: Iterable[ItemValidation]
    ) -> tuple[bool, list[str]]:
        """
        Apply a whole validation pass in one transition.

          - unavailable items are removed
          - changed items get the catalog price / stock, and quantity is
            clamped down to the new stock (an item with no stock left is
            removed)

        If anything changed, totals are recomputed once and last_validated
        is stamped. Otherwise the state is left untouched.

        Returns whether the store changed, plus the user-facing notices for
        the changes made.
        """
        notices: list[str] = []
        has_changes = False

        for result in results:
            item = self.get(result.id)
            if item is None:
                # Removed while the pass was in flight
                continue

            if result.unavailable:
                self._drop(result.id)
                has_changes = True
                notices.append(f"{result.name} is no longer available and was removed from cart")
                continue

            if not (result.price_changed or result.stock_changed):
                continue

            old_price = item.price
            if result.new_price is not None:
                item.price = result.new_price
            if result.new_stock is not None:
                item.stock = max(result.new_stock, 0)
            has_changes = True

            if item.stock <= 0:
                self._drop(result.id)
                notices.append(f"{result.name} is out of stock and was removed from cart")
                continue

            if item.quantity > item.stock:
                item.quantity = max(1, item.stock)
                notices.append(
                    f"{result.name} quantity adjusted to {item.quantity} due to stock availability"
                )

            if result.price_changed:
                direction = "increased" if item.price > old_price else "decreased"
                notices.append(
                    f"{result.name} price {direction} from {self.currency} {old_price:,.2f} "
                    f"to {self.currency} {item.price:,.2f}"
                )

        if has_changes:
            self.recompute()
            self._state.last_validated = _now()
            for notice in notices:
                logger.info(notice)

        return has_changes, notices

    def recompute(self) -> None:
        """
        Refresh every derived field from the current items.

        Deals first, then the pricing hierarchy per item:
            total = sum(resolved_price * quantity) - deal savings
        No currency rounding is applied.
        """
        summary = compute_deals(self._state.items)
        savings_by_product: dict[uuid.UUID, float] = {}
        for deal in summary.applied_deals:
            savings_by_product[deal.product_id] = (
                savings_by_product.get(deal.product_id, 0.0) + deal.savings
            )

        total = 0.0
        for item in self._state.items:
            total += resolve_price(item) * item.quantity
            total -= savings_by_product.get(item.id, 0.0)

        self._state.deals_summary = summary
        self._state.total = total
        self._state.item_count = sum(item.quantity for item in self._state.items)

    # ---- internal helpers ----

    def _drop(self, product_id: uuid.UUID) -> None:
        self._state.items = [item for item in self._state.items if item.id != product_id]
