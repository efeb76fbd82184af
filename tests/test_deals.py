import pytest

from storefront.core.exceptions import InvalidDealEncodingError
from storefront.services.deals import compute_deals, parse_bundle_terms

from tests.factories import make_item


def test_bogo_every_second_unit_free():
    item = make_item(deal_type="BOGO", price=100, quantity=5)

    summary = compute_deals([item])

    assert summary.total_savings == 200
    [deal] = summary.applied_deals
    assert deal.id == f"{item.id}-bogo"
    assert deal.product_id == item.id
    assert deal.type == "BOGO"
    assert deal.free_items == 2
    assert deal.savings == 200
    assert deal.applied_quantity == 5
    assert deal.bundle_sets is None


def test_bundle_three_for_two():
    item = make_item(deal_type="Bundle", deal_value="3for2", price=50, quantity=6)

    summary = compute_deals([item])

    [deal] = summary.applied_deals
    assert deal.bundle_sets == 2
    assert deal.free_items == 2
    assert deal.savings == 100
    assert deal.description == "3for2 Deal"
    assert summary.total_savings == 100


def test_bundle_partial_set_is_not_discounted():
    item = make_item(deal_type="Bundle", deal_value="3for2", price=50, quantity=5)

    [deal] = compute_deals([item]).applied_deals

    assert deal.bundle_sets == 1
    assert deal.free_items == 1


@pytest.mark.parametrize(
    "deal_type, deal_value, quantity",
    [
        ("BOGO", None, 1),
        ("Bundle", "3for2", 2),
        ("Bundle", "5for3", 4),
    ],
)
def test_below_threshold_gives_no_deal(deal_type, deal_value, quantity):
    item = make_item(deal_type=deal_type, deal_value=deal_value, quantity=quantity)

    summary = compute_deals([item])

    assert summary.total_savings == 0
    assert summary.applied_deals == []


@pytest.mark.parametrize("deal_value", [None, "", "three for two", "3x2", "2for3", "3for3", "3for0"])
def test_unparsable_bundle_is_ignored(deal_value):
    item = make_item(deal_type="Bundle", deal_value=deal_value, quantity=9)

    summary = compute_deals([item])

    assert summary.total_savings == 0
    assert summary.applied_deals == []


def test_bundle_terms_tolerate_whitespace_and_case():
    assert parse_bundle_terms(" 3 for 2 ") == (3, 2)
    assert parse_bundle_terms("4FOR3") == (4, 3)


def test_parse_bundle_terms_rejects_garbage():
    with pytest.raises(InvalidDealEncodingError):
        parse_bundle_terms("buy three")


def test_deals_use_nominal_price_not_resolved_price():
    item = make_item(
        deal_type="BOGO",
        price=100,
        base_price=100,
        variation_price=60,
        quantity=2,
    )

    assert compute_deals([item]).total_savings == 100


def test_items_without_deals_are_skipped():
    plain = make_item(quantity=4)
    bogo = make_item(deal_type="BOGO", price=30, quantity=3)

    summary = compute_deals([plain, bogo])

    assert [d.product_id for d in summary.applied_deals] == [bogo.id]
    assert summary.total_savings == 30


def test_unknown_deal_type_is_dropped_on_validation():
    item = make_item(deal_type="FLASH", quantity=4)

    assert item.deal_type is None
    assert compute_deals([item]).applied_deals == []
