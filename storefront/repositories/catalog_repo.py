# storefront/repositories/catalog_repo.py
import uuid
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.engine import Engine
from sqlmodel import Session

from storefront.core.exceptions import ProductUnavailableError
from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import CatalogProduct


class CatalogLookup(Protocol):
    """
    Read-only view of the live catalog used by cart validation and checkout.

    get_by_id raises ProductUnavailableError for unknown / deleted ids.
    Any other exception is treated as a transient lookup failure.
    """

    async def get_by_id(self, product_id: uuid.UUID) -> CatalogProduct: ...


def to_catalog_product(product: Product) -> CatalogProduct:
    return CatalogProduct(
        id=product.id,
        name=product.name,
        price=product.price,
        stock=product.stock,
        is_active=product.is_active,
        unit=product.unit,
        image=product.image_url,
        base_price=product.base_price,
        variation_price=product.variation_price,
        seasonal_discount=product.seasonal_discount,
        seasonal_discount_type=product.seasonal_discount_type,
        seasonal_discount_active=product.seasonal_discount_active,
        deal_type=product.deal_type,
        deal_value=product.deal_value,
    )


class SQLCatalogRepository:
    """
    CatalogLookup backed by the products table.

    Each lookup opens its own short-lived Session inside the threadpool so
    concurrent lookups never share a connection.
    """

    def __init__(self, engine: Engine, repo: ProductRepository | None = None):
        self.engine = engine
        self.repo = repo or ProductRepository()

    def _load(self, product_id: uuid.UUID) -> CatalogProduct | None:
        with Session(self.engine) as session:
            product = self.repo.get_by_id(session, product_id)
            if product is None:
                return None
            return to_catalog_product(product)

    async def get_by_id(self, product_id: uuid.UUID) -> CatalogProduct:
        product = await run_in_threadpool(self._load, product_id)
        if product is None:
            raise ProductUnavailableError("Product not found")
        return product
