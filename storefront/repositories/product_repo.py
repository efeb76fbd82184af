# storefront/repositories/product_repo.py
import uuid

from sqlmodel import Session

from storefront.models.product import Product


class ProductRepository:
    """
    Data access layer for the product catalog.

    Read-only: the catalog is maintained outside this service.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)
