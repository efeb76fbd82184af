# storefront/core/cart_sessions.py
import logging
from collections import OrderedDict

from fastapi import Depends, Header, HTTPException, Request, status

from storefront.core.config import get_settings
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)


class CartSessionRegistry:
    """
    Owns one CartStore per shopping session.

    Created in the app lifespan and torn down at shutdown. A session ends
    after a successful checkout or an explicit DELETE /cart/session; past
    max_sessions the least recently used cart is dropped. Persistence and
    rehydration of carts belong to an outer layer.
    """

    def __init__(self, max_sessions: int | None = None):
        self.max_sessions = max_sessions or get_settings().CART_SESSION_LIMIT
        self._stores: OrderedDict[str, CartStore] = OrderedDict()

    def get_or_create(self, session_id: str) -> CartStore:
        store = self._stores.get(session_id)
        if store is not None:
            self._stores.move_to_end(session_id)
            return store

        store = CartStore()
        self._stores[session_id] = store
        logger.debug("Opened cart session %s", session_id)

        while len(self._stores) > self.max_sessions:
            evicted, _ = self._stores.popitem(last=False)
            logger.info("Cart session limit reached, dropped session %s", evicted)
        return store

    def end(self, session_id: str) -> bool:
        """Forget a session's cart. Returns False for unknown sessions."""
        if self._stores.pop(session_id, None) is None:
            return False
        logger.debug("Closed cart session %s", session_id)
        return True

    def close(self) -> None:
        self._stores.clear()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)


def get_cart_registry(request: Request) -> CartSessionRegistry:
    return request.app.state.cart_registry


async def get_cart_session_id(
    x_cart_session: str | None = Header(default=None),
) -> str:
    if not x_cart_session or not x_cart_session.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Cart-Session header",
        )
    return x_cart_session.strip()


async def get_cart_store(
    session_id: str = Depends(get_cart_session_id),
    registry: CartSessionRegistry = Depends(get_cart_registry),
) -> CartStore:
    """
    FastAPI dependency resolving the caller's CartStore from the
    X-Cart-Session header.
    """
    return registry.get_or_create(session_id)
