import pytest

from storefront.core.exceptions import (
    InsufficientStockError,
    ProductUnavailableError,
    ValidationFailedError,
)
from storefront.services.cart_service import CartService

from tests.factories import make_product


@pytest.fixture
def service(catalog):
    return CartService(catalog)


def fill(store, catalog, *products):
    for product in products:
        catalog.put(product)
        store.add(product)


# ---- validate_cart ----


async def test_unavailable_item_is_removed_and_total_recomputed(store, catalog, service):
    keep = make_product(price=40)
    gone = make_product(price=60, name="Eclair")
    fill(store, catalog, keep, gone)
    catalog.delete(gone.id)

    report = await service.validate_cart(store)

    assert [item.id for item in store.items] == [keep.id]
    assert store.total == 40
    assert store.last_validated is not None
    assert report.changed is True
    assert report.notices == ["Eclair is no longer available and was removed from cart"]
    [_, gone_result] = report.results
    assert gone_result.unavailable is True


async def test_inactive_product_counts_as_unavailable(store, catalog, service):
    product = make_product()
    fill(store, catalog, product)
    catalog.update(product.id, is_active=False)

    await service.validate_cart(store)

    assert store.items == []


async def test_no_changes_leaves_store_untouched(store, catalog, service):
    fill(store, catalog, make_product(), make_product(price=55))
    before = store.snapshot()

    report = await service.validate_cart(store)

    assert report.changed is False
    assert report.notices == []
    assert store.last_validated is None
    assert store.snapshot() == before


async def test_price_and_stock_changes_are_applied(store, catalog, service):
    product = make_product(price=100, stock=10, name="Brownie")
    fill(store, catalog, product)
    store.set_quantity(product.id, 6)
    catalog.update(product.id, price=90, stock=4)

    report = await service.validate_cart(store)

    item = store.get(product.id)
    assert item.price == 90
    assert item.stock == 4
    assert item.quantity == 4
    assert report.results[0].price_changed is True
    assert report.results[0].stock_changed is True
    assert "Brownie price decreased from Rs. 100.00 to Rs. 90.00" in report.notices


async def test_lookup_failure_rejects_whole_pass(store, catalog, service):
    healthy, flaky, deleted = make_product(), make_product(), make_product()
    fill(store, catalog, healthy, flaky, deleted)
    catalog.update(healthy.id, price=500)
    catalog.delete(deleted.id)
    catalog.broken.add(flaky.id)
    before_items = [item.model_copy() for item in store.items]
    before_total = store.total

    with pytest.raises(ValidationFailedError) as exc_info:
        await service.validate_cart(store)

    assert "catalog unreachable" in exc_info.value.detail
    assert store.items == before_items
    assert store.total == before_total
    assert store.last_validated is None
    assert store.error is not None
    assert store.is_loading is False


async def test_every_item_is_looked_up(store, catalog, service):
    products = [make_product() for _ in range(3)]
    fill(store, catalog, *products)

    await service.validate_cart(store)

    assert sorted(catalog.calls) == sorted(p.id for p in products)


async def test_item_removed_during_pass_is_not_reported_as_change(store, catalog):
    product = make_product(price=100)
    fill(store, catalog, product)
    catalog.update(product.id, price=150)

    class RemovingCatalog:
        async def get_by_id(self, product_id):
            store.remove(product_id)
            return await catalog.get_by_id(product_id)

    report = await CartService(RemovingCatalog()).validate_cart(store)

    assert report.results[0].price_changed is True
    assert report.changed is False
    assert report.notices == []
    assert store.last_validated is None


async def test_validating_empty_cart_is_a_noop(store, service):
    report = await service.validate_cart(store)

    assert report.results == []
    assert store.last_validated is None


# ---- add_with_validation ----


async def test_add_with_validation_uses_catalog_data(store, catalog, service):
    product = catalog.put(make_product(price=75, stock=3, unit="box"))

    await service.add_with_validation(store, product.id)

    item = store.get(product.id)
    assert item.quantity == 1
    assert item.unit == "box"
    assert store.total == 75
    assert store.is_loading is False


async def test_add_with_validation_refreshes_price_of_existing_line(store, catalog, service):
    product = catalog.put(make_product(price=75, stock=3))
    await service.add_with_validation(store, product.id)
    catalog.update(product.id, price=80)

    await service.add_with_validation(store, product.id)

    item = store.get(product.id)
    assert item.quantity == 2
    assert item.price == 80


async def test_add_with_validation_rejects_inactive(store, catalog, service):
    product = catalog.put(make_product(is_active=False))

    with pytest.raises(ProductUnavailableError):
        await service.add_with_validation(store, product.id)

    assert store.items == []
    assert store.is_loading is False


async def test_add_with_validation_rejects_out_of_stock(store, catalog, service):
    product = catalog.put(make_product(stock=0))

    with pytest.raises(InsufficientStockError, match="out of stock"):
        await service.add_with_validation(store, product.id)


async def test_add_with_validation_rejects_at_stock_limit(store, catalog, service):
    product = catalog.put(make_product(stock=1, unit="kg"))
    await service.add_with_validation(store, product.id)

    with pytest.raises(InsufficientStockError) as exc_info:
        await service.add_with_validation(store, product.id)

    assert exc_info.value.detail == "Only 1 kg available in stock"
    assert store.quantity_of(product.id) == 1


async def test_add_with_validation_unknown_product(store, service):
    with pytest.raises(ProductUnavailableError):
        await service.add_with_validation(store, make_product().id)


# ---- update_quantity_with_validation ----


async def test_update_quantity_with_validation(store, catalog, service):
    product = make_product(price=20, stock=10)
    fill(store, catalog, product)
    catalog.update(product.id, price=22, stock=8)

    await service.update_quantity_with_validation(store, product.id, 5)

    item = store.get(product.id)
    assert item.quantity == 5
    assert item.price == 22
    assert item.stock == 8
    assert store.total == 110


async def test_update_quantity_with_validation_rejects_over_stock(store, catalog, service):
    product = make_product(stock=10)
    fill(store, catalog, product)
    catalog.update(product.id, stock=2)

    with pytest.raises(InsufficientStockError):
        await service.update_quantity_with_validation(store, product.id, 3)

    assert store.quantity_of(product.id) == 1
    assert store.get(product.id).stock == 10


async def test_update_quantity_with_validation_zero_removes(store, catalog, service):
    product = make_product()
    fill(store, catalog, product)

    await service.update_quantity_with_validation(store, product.id, 0)

    assert store.items == []
