# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends, Response, status

from storefront.core.cart_sessions import (
    CartSessionRegistry,
    get_cart_registry,
    get_cart_session_id,
    get_cart_store,
)
from storefront.database import engine
from storefront.repositories.catalog_repo import SQLCatalogRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartState,
    ValidationReport,
)
from storefront.services.cart_service import CartService
from storefront.services.cart_store import CartStore

router = APIRouter(prefix="/cart", tags=["Cart"])

catalog = SQLCatalogRepository(engine)
service = CartService(catalog)


def get_cart_service() -> CartService:
    return service


@router.get("", response_model=CartState)
async def get_my_cart(store: CartStore = Depends(get_cart_store)):
    """
    Get the current session's cart with derived totals and deals.
    """
    return store.snapshot()


@router.post("", response_model=CartState)
async def add_to_cart(
    payload: CartItemCreate,
    store: CartStore = Depends(get_cart_store),
    cart_service: CartService = Depends(get_cart_service),
):
    """
    Add one unit of a product after checking it against the catalog.

    Returns the updated cart.
    """
    await cart_service.add_with_validation(store, payload.product_id)
    return store.snapshot()


@router.patch("/{product_id}", response_model=CartState)
async def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    store: CartStore = Depends(get_cart_store),
    cart_service: CartService = Depends(get_cart_service),
):
    """
    Set the quantity of a product in the cart (<= 0 removes it).

    Returns the updated cart.
    """
    await cart_service.update_quantity_with_validation(store, product_id, payload.quantity)
    return store.snapshot()


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def end_cart_session(
    session_id: str = Depends(get_cart_session_id),
    registry: CartSessionRegistry = Depends(get_cart_registry),
):
    """
    End the cart session and drop its cart. Unknown sessions are ignored.
    """
    registry.end(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", response_model=CartState)
async def remove_cart_item(
    product_id: uuid.UUID,
    store: CartStore = Depends(get_cart_store),
):
    """
    Remove a product from the cart. Unknown products are ignored.
    """
    store.remove(product_id)
    return store.snapshot()


@router.delete("", response_model=CartState)
async def clear_cart(store: CartStore = Depends(get_cart_store)):
    """
    Clear the entire cart.
    """
    store.clear()
    return store.snapshot()


@router.post("/validate", response_model=ValidationReport)
async def validate_cart(
    store: CartStore = Depends(get_cart_store),
    cart_service: CartService = Depends(get_cart_service),
):
    """
    Re-check every cart line against the live catalog and apply the
    corrections in one batch.
    """
    return await cart_service.validate_cart(store)
