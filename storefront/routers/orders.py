# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.cart_sessions import (
    CartSessionRegistry,
    get_cart_registry,
    get_cart_session_id,
    get_cart_store,
)
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.order_repo import OrderRepository
from storefront.routers.cart import catalog
from storefront.schemas.checkout import CheckoutQuoteRequest, CheckoutTotals, PaymentMethod
from storefront.schemas.order import OrderCreate, OrderRead, OrderWithItemsRead
from storefront.services.cart_store import CartStore
from storefront.services.order_service import OrderService

router = APIRouter(tags=["Checkout"])

order_repo = OrderRepository()
service = OrderService(order_repo, catalog, get_settings().PAYMENT_METHODS)


def get_order_service() -> OrderService:
    return service


# -------- Checkout --------


@router.get("/checkout/payment-methods", response_model=list[PaymentMethod])
def list_payment_methods(order_service: OrderService = Depends(get_order_service)):
    """
    Enabled payment methods with their fee terms.
    """
    return order_service.available_payment_methods()


@router.post("/checkout/quote", response_model=CheckoutTotals)
async def quote_checkout(
    payload: CheckoutQuoteRequest,
    store: CartStore = Depends(get_cart_store),
    order_service: OrderService = Depends(get_order_service),
):
    """
    Checkout breakdown (deals, delivery, gateway fee) for the cart as held.
    """
    return order_service.quote(store, payload.payment_method)


@router.post("/checkout", response_model=OrderWithItemsRead)
async def checkout(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    store: CartStore = Depends(get_cart_store),
    session_id: str = Depends(get_cart_session_id),
    registry: CartSessionRegistry = Depends(get_cart_registry),
    order_service: OrderService = Depends(get_order_service),
):
    """
    Place an order from the current cart.

    Items are re-validated against the catalog and totals recomputed
    before anything is written. The cart session ends on success.
    """
    order = await order_service.place_order(session, store, payload)
    registry.end(session_id)
    return order


# -------- Orders --------


@router.get("/orders", response_model=list[OrderRead])
def list_orders(
    session: Session = Depends(get_session),
    order_service: OrderService = Depends(get_order_service),
    skip: int = 0,
    limit: int = 50,
):
    """
    List orders, newest first (without items).
    """
    return order_service.list_orders(session, skip, limit)


@router.get("/orders/{order_id}", response_model=OrderWithItemsRead)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    order_service: OrderService = Depends(get_order_service),
):
    """
    Get a single order with its items.
    """
    return order_service.get_order(session, order_id)
