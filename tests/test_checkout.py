import pytest

from storefront.schemas.checkout import PaymentMethod
from storefront.services.checkout import (
    calculate_delivery_charge,
    calculate_gateway_fee,
    compute_checkout_totals,
)

from tests.factories import make_item, make_product


def test_delivery_charge_threshold():
    assert calculate_delivery_charge(1999) == 150
    assert calculate_delivery_charge(2000) == 0


def test_totals_below_free_delivery():
    items = [make_item(price=1999, quantity=1)]

    totals = compute_checkout_totals(items)

    assert totals.original_subtotal == 1999
    assert totals.deal_savings == 0
    assert totals.subtotal == 1999
    assert totals.delivery_charge == 150
    assert totals.gateway_fee == 0
    assert totals.grand_total == 2149


def test_totals_with_deals_and_free_delivery():
    items = [
        make_item(price=500, quantity=4, deal_type="BOGO"),
        make_item(price=300, quantity=6, deal_type="Bundle", deal_value="3for2"),
    ]

    totals = compute_checkout_totals(items)

    assert totals.original_subtotal == 2000 + 1800
    assert totals.deal_savings == 1000 + 600
    assert totals.subtotal == 2200
    assert totals.delivery_charge == 0
    assert totals.grand_total == 2200


def test_deals_can_push_subtotal_below_free_delivery():
    items = [make_item(price=1200, quantity=2, deal_type="BOGO")]

    totals = compute_checkout_totals(items)

    assert totals.original_subtotal == 2400
    assert totals.subtotal == 1200
    assert totals.delivery_charge == 150


def test_proportional_gateway_fee():
    method = PaymentMethod(id="card", name="Card", fee=0.02)

    assert calculate_gateway_fee(method, 5000) == pytest.approx(100)


def test_gateway_fee_is_floored_at_minimum():
    method = PaymentMethod(id="card", name="Card", fee=0.02, minimum_fee=30)

    assert calculate_gateway_fee(method, 500) == 30


def test_flat_gateway_fee_from_string():
    method = PaymentMethod(id="bank", name="Bank", fee="45")

    assert calculate_gateway_fee(method, 10_000) == 45


@pytest.mark.parametrize("fee", [None, 0, "", "n/a"])
def test_missing_or_unusable_fee(fee):
    method = PaymentMethod(id="cash", name="Cash", fee=fee)

    assert calculate_gateway_fee(method, 1000) == 0


def test_no_payment_method_means_no_fee():
    assert calculate_gateway_fee(None, 1000) == 0


def test_grand_total_includes_gateway_fee():
    items = [make_item(price=1000, quantity=1)]
    method = PaymentMethod(id="card", name="Card", fee=0.03, minimum_fee=10)

    totals = compute_checkout_totals(items, method)

    assert totals.gateway_fee == pytest.approx(30)
    assert totals.grand_total == pytest.approx(1000 + 150 + 30)


def test_checkout_savings_follow_validated_prices_not_cart_summary(store):
    product = make_product(price=100, deal_type="BOGO")
    store.add(product)
    store.add(product)
    assert store.total_savings == 100

    # price moved in the catalog after the cart last summarised its deals
    validated = [item.model_copy(update={"price": 120}) for item in store.items]
    totals = compute_checkout_totals(validated)

    assert totals.deal_savings == 120
    assert store.total_savings == 100


def test_calculator_is_stateless():
    items = [make_item(price=250, quantity=3)]

    assert compute_checkout_totals(items) == compute_checkout_totals(items)
