import uuid

from storefront.core.exceptions import ProductUnavailableError
from storefront.schemas.cart import LineItem
from storefront.schemas.product import CatalogProduct


class FakeCatalog:
    """In-memory CatalogLookup."""

    def __init__(self):
        self.products: dict[uuid.UUID, CatalogProduct] = {}
        self.broken: set[uuid.UUID] = set()
        self.calls: list[uuid.UUID] = []

    def put(self, product: CatalogProduct) -> CatalogProduct:
        self.products[product.id] = product
        return product

    def update(self, product_id: uuid.UUID, **changes) -> CatalogProduct:
        product = self.products[product_id].model_copy(update=changes)
        self.products[product_id] = product
        return product

    def delete(self, product_id: uuid.UUID) -> None:
        self.products.pop(product_id, None)

    async def get_by_id(self, product_id: uuid.UUID) -> CatalogProduct:
        self.calls.append(product_id)
        if product_id in self.broken:
            raise ConnectionError("catalog unreachable")
        product = self.products.get(product_id)
        if product is None:
            raise ProductUnavailableError("Product not found")
        return product


def make_product(**overrides) -> CatalogProduct:
    data = {
        "id": uuid.uuid4(),
        "name": "Chocolate Cake",
        "price": 100.0,
        "stock": 10,
    }
    data.update(overrides)
    return CatalogProduct(**data)


def make_item(**overrides) -> LineItem:
    data = {
        "id": uuid.uuid4(),
        "name": "Croissant",
        "price": 100.0,
        "stock": 20,
        "quantity": 1,
    }
    data.update(overrides)
    return LineItem(**data)
