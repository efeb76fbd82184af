# storefront/services/order_service.py
import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.exceptions import (
    EmptyCartError,
    PaymentMethodUnavailableError,
    ValidationFailedError,
)
from storefront.models.order import Order, OrderItem
from storefront.repositories.catalog_repo import CatalogLookup
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.cart import LineItem
from storefront.schemas.checkout import CheckoutTotals, PaymentMethod
from storefront.schemas.order import (
    OrderCreate,
    OrderDraft,
    OrderItemRead,
    OrderLine,
    OrderRead,
    OrderWithItemsRead,
)
from storefront.services.cart_store import CartStore
from storefront.services.checkout import compute_checkout_totals

logger = logging.getLogger(__name__)

# Payment methods settled on delivery; everything else waits for verification
CASH_METHODS = {"cash"}


class OrderService:
    """
    Business logic for turning a cart into an order.

    Responsibilities:
      - Resolve the selected payment method
      - Re-validate every cart item against the catalog at submission time
      - Compute the final totals from validated prices
      - Persist Order + OrderItem rows in one transaction
      - Clear the cart after success
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: CatalogLookup,
        payment_methods: Sequence[PaymentMethod],
    ):
        self.order_repo = order_repo
        self.catalog = catalog
        self.payment_methods = {m.id: m for m in payment_methods}

    # -------- Payment methods --------

    def available_payment_methods(self) -> list[PaymentMethod]:
        return [m for m in self.payment_methods.values() if m.enabled]

    def get_payment_method(self, method_id: str | None) -> PaymentMethod | None:
        """
        Look up an enabled payment method.

        None => no method selected yet (quotes are still allowed).
        Unknown or disabled ids raise PaymentMethodUnavailableError.
        """
        if method_id is None:
            return None
        method = self.payment_methods.get(method_id)
        if method is None or not method.enabled:
            raise PaymentMethodUnavailableError()
        return method

    # -------- Checkout --------

    def quote(self, store: CartStore, method_id: str | None = None) -> CheckoutTotals:
        """
        Totals for the cart as currently held (no catalog round-trip).
        """
        return compute_checkout_totals(store.items, self.get_payment_method(method_id))

    async def validate_items(self, items: Sequence[LineItem]) -> list[LineItem]:
        """
        Re-fetch every item and return copies carrying the catalog price.

        Any lookup failure rejects the whole batch.
        """
        validated: list[LineItem] = []
        failed: list[str] = []

        for item in items:
            try:
                product = await self.catalog.get_by_id(item.id)
            except Exception as e:
                logger.warning("Failed to validate %s: %s", item.name, e)
                failed.append(item.name)
                continue

            if not product.is_active:
                failed.append(item.name)
                continue

            validated.append(item.model_copy(update={"price": product.price}))

        if failed:
            raise ValidationFailedError(
                f"Please review cart items and try again (failed: {', '.join(failed)})"
            )

        return validated

    async def prepare_order(
        self,
        store: CartStore,
        payment_method: PaymentMethod | None,
    ) -> OrderDraft:
        """
        Build the order assembler input from re-validated items.
        """
        if not store.items:
            raise EmptyCartError()

        items = await self.validate_items(store.items)
        totals = compute_checkout_totals(items, payment_method)

        return OrderDraft(
            items=[
                OrderLine(
                    id=it.id,
                    name=it.name,
                    price=it.price,
                    quantity=it.quantity,
                    image=it.image,
                )
                for it in items
            ],
            subtotal=totals.subtotal,
            deal_savings=totals.deal_savings,
            delivery_charge=totals.delivery_charge,
            gateway_fee=totals.gateway_fee,
            total=totals.grand_total,
        )

    async def place_order(
        self,
        session: Session,
        store: CartStore,
        payload: OrderCreate,
    ) -> OrderWithItemsRead:
        """
        Convert the cart into an Order.

        Steps:
          1. Resolve the payment method (must exist and be enabled).
          2. Re-validate items and compute totals (OrderDraft).
          3. Reject a non-positive total.
          4. Create Order row (status from payment method).
          5. Create OrderItem rows.
          6. Commit, then clear the cart.
        """
        # 1) Payment method
        method = self.get_payment_method(payload.payment_method)

        # 2) Validated draft
        draft = await self.prepare_order(store, method)

        # 3) Sanity check
        if draft.total <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart total is invalid. Please check your cart.",
            )

        # 4) Create the Order
        is_cash = method.id in CASH_METHODS
        transaction_id = payload.transaction_id
        if transaction_id is None and payload.payment_result is not None:
            transaction_id = payload.payment_result.transaction_id

        order = Order(
            customer_name=payload.name,
            phone=payload.phone,
            email=payload.email,
            address=payload.address,
            city=payload.city,
            postal_code=payload.postal_code,
            instructions=payload.instructions,
            payment_method=method.id,
            transaction_id=None if is_cash else transaction_id,
            status="confirmed" if is_cash else "payment_pending",
            verification_status=None if is_cash else "pending",
            subtotal=draft.subtotal,
            deal_savings=draft.deal_savings,
            delivery_charge=draft.delivery_charge,
            gateway_fee=draft.gateway_fee,
            total_amount=draft.total,
            price_validated_at=datetime.now(timezone.utc),
        )
        order = self.order_repo.create_order(session, order)

        # 5) Create OrderItem rows
        order_items = self.order_repo.create_items(
            session,
            [
                OrderItem(
                    order_id=order.id,
                    product_id=line.id,
                    product_name=line.name,
                    product_image=line.image,
                    quantity=line.quantity,
                    unit_price=line.price,
                )
                for line in draft.items
            ],
        )

        # 6) Commit and clear cart
        session.commit()
        session.refresh(order)
        store.clear()

        logger.info("Order %s placed (%s, total %.2f)", order.id, method.id, order.total_amount)
        return self._build_order_with_items_dto(order, order_items)

    # -------- Read operations --------

    def list_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        orders = self.order_repo.list_all(session, skip, limit)
        return [OrderRead.model_validate(o, from_attributes=True) for o in orders]

    def get_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                product_name=it.product_name,
                product_image=it.product_image,
                quantity=it.quantity,
                unit_price=it.unit_price,
                line_total=it.quantity * it.unit_price,
            )
            for it in items
        ]

        base = OrderRead.model_validate(order, from_attributes=True)
        return OrderWithItemsRead(**base.model_dump(), items=item_dtos)
