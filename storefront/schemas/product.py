# storefront/schemas/product.py
import uuid

from storefront.schemas.cart import PricingFields


class CatalogProduct(PricingFields):
    """
    Current catalog record for one product, as returned by a CatalogLookup.

    Optional pricing hierarchy fields may be absent; they default the same
    way cart items do.
    """

    id: uuid.UUID
    name: str
    is_active: bool = True
    unit: str | None = None
    image: str | None = None
