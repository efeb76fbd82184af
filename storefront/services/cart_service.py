# storefront/services/cart_service.py
import asyncio
import logging
import uuid
from datetime import datetime, timezone

from storefront.core.exceptions import (
    InsufficientStockError,
    ProductUnavailableError,
    ValidationFailedError,
)
from storefront.repositories.catalog_repo import CatalogLookup
from storefront.schemas.cart import ItemValidation, LineItem, ValidationReport
from storefront.schemas.product import CatalogProduct
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class CartService:
    """
    Async orchestration between a CartStore and the live catalog.

    Responsibilities:
      - full-cart validation passes (price / stock / availability diff)
      - add and quantity updates checked against current catalog data

    Every operation awaits all of its catalog calls first and only then
    applies one synchronous transition to the store. A failed operation
    raises and leaves the items untouched.
    """

    def __init__(self, catalog: CatalogLookup):
        self.catalog = catalog

    # ---- internal helpers ----

    async def _get_active_product(self, product_id: uuid.UUID) -> CatalogProduct:
        product = await self.catalog.get_by_id(product_id)
        if not product.is_active:
            raise ProductUnavailableError("Product is no longer available")
        return product

    async def _check_item(self, item: LineItem) -> ItemValidation:
        try:
            product = await self._get_active_product(item.id)
        except ProductUnavailableError:
            return ItemValidation(
                id=item.id,
                name=item.name,
                unavailable=True,
                error="Product no longer available",
            )

        return ItemValidation(
            id=item.id,
            name=item.name,
            old_price=item.price,
            new_price=product.price,
            old_stock=item.stock,
            new_stock=product.stock,
            price_changed=product.price != item.price,
            stock_changed=product.stock != item.stock,
        )

    # ---- public operations ----

    async def validate_cart(self, store: CartStore) -> ValidationReport:
        """
        Re-check every cart line against the catalog.

        Steps:
          1. Snapshot the current lines.
          2. Look all of them up concurrently.
             - not found / inactive => unavailable
             - any other failure    => ValidationFailedError, nothing applied
          3. Apply the collected results to the store in one batch.
        """
        items = store.items
        store.set_loading(True)
        try:
            try:
                results = list(await asyncio.gather(*(self._check_item(it) for it in items)))
            except Exception as e:
                logger.warning("Cart validation failed: %s", e)
                store.set_error(f"Failed to validate cart prices: {e}")
                raise ValidationFailedError(f"Failed to validate cart prices: {e}") from e

            changed, notices = store.apply_validation(results)
        finally:
            store.set_loading(False)

        return ValidationReport(
            results=results,
            notices=notices,
            changed=changed,
            validated_at=datetime.now(timezone.utc),
        )

    async def add_with_validation(
        self,
        store: CartStore,
        product_id: uuid.UUID,
    ) -> CatalogProduct:
        """
        Add one unit of a product after checking it against the catalog.

        Rules:
          - product must exist and be active
          - product must have stock
          - quantity already in cart must be below stock
        """
        store.set_loading(True)
        try:
            product = await self._get_active_product(product_id)
        finally:
            store.set_loading(False)

        if product.stock <= 0:
            raise InsufficientStockError("Product is out of stock")

        if store.quantity_of(product_id) >= product.stock:
            raise InsufficientStockError.only_available(product.stock, product.unit)

        store.add(product, refresh_price=True)
        logger.info("%s added to cart", product.name)
        return product

    async def update_quantity_with_validation(
        self,
        store: CartStore,
        product_id: uuid.UUID,
        quantity: int,
    ) -> CatalogProduct:
        """
        Set a line's quantity after checking it against the catalog.

        quantity above current stock => InsufficientStockError.
        On success the line also picks up current price / hierarchy / stock.
        """
        product = await self._get_active_product(product_id)

        if quantity > product.stock:
            raise InsufficientStockError.only_available(product.stock, product.unit)

        if quantity <= 0:
            store.remove(product_id)
        else:
            store.refresh_from_catalog(product)
            store.set_quantity(product_id, quantity)
        return product
