"""
Tests: Order aggregator — unit prices with add-ons and order totals.

Run with:
    pytest amc_engine/tests/test_orders.py -v
"""

import pytest

from amc_engine.engine import EntitlementEngine, InvalidInputError
from amc_engine.engine.orders import OrderAggregator
from amc_engine.models.schemas import AddOn, FlatOffer, OrderLineItem, PercentageOffer, Product


@pytest.fixture
def offers():
    return {
        "MONSOON": PercentageOffer(
            id="MONSOON", discount_value=5, min_order_amount=5000,
            max_discount_amount=300, is_active=True,
        ),
        "FLAT200": FlatOffer(id="FLAT200", discount_value=200, is_active=True),
    }


@pytest.fixture
def purifier():
    return Product(id="RO-100", name="RO Purifier", base_price=10000,
                   discount_percent=10, offer_id="MONSOON")


@pytest.fixture
def gold_amc():
    return AddOn(id="AMC-GOLD", name="Gold Plan", price=2500)


class TestPriceLine:
    def test_add_on_added_after_discounts(self, offers, purifier, gold_amc):
        line = OrderAggregator().price_line(
            OrderLineItem(product=purifier, quantity=1, add_on=gold_amc), offers
        )
        assert line.breakdown.final_price == pytest.approx(8700)
        assert line.add_on_price == 2500
        assert line.unit_price == pytest.approx(11200)

    def test_flat_offer_not_prorated_by_quantity(self, offers):
        product = Product(id="FILTER", base_price=1000, offer_id="FLAT200")
        line = OrderAggregator().price_line(OrderLineItem(product=product, quantity=3), offers)
        assert line.unit_price == 800
        assert line.line_total == 2400

    def test_quantity_below_one_rejected(self, purifier):
        with pytest.raises(InvalidInputError) as exc:
            OrderAggregator().price_line(OrderLineItem(product=purifier, quantity=0))
        assert exc.value.field == "quantity"

    def test_negative_add_on_rejected(self, purifier):
        item = OrderLineItem(product=purifier, add_on=AddOn(id="X", price=-5))
        with pytest.raises(InvalidInputError) as exc:
            OrderAggregator().price_line(item)
        assert exc.value.field == "add_on.price"

    def test_missing_add_on_price_counts_as_zero(self, purifier):
        item = OrderLineItem(product=purifier, add_on=AddOn(id="AMC-FREE"))
        line = OrderAggregator().price_line(item)
        assert line.add_on_price == 0
        assert line.unit_price == pytest.approx(9000)


class TestPriceOrder:
    def test_total_is_sum_of_lines(self, offers, purifier, gold_amc):
        filter_part = Product(id="FILTER", base_price=450)
        quote = OrderAggregator().price_order(
            [
                OrderLineItem(product=purifier, quantity=2, add_on=gold_amc),
                OrderLineItem(product=filter_part, quantity=4),
            ],
            offers,
        )
        assert len(quote.lines) == 2
        assert quote.total == pytest.approx(11200 * 2 + 450 * 4)

    def test_empty_order(self):
        quote = OrderAggregator().price_order([])
        assert quote.lines == []
        assert quote.total == 0

    def test_inputs_not_mutated(self, offers, purifier):
        items = [OrderLineItem(product=purifier, quantity=1)]
        snapshot = [i.model_dump() for i in items]
        first = OrderAggregator().price_order(items, offers)
        second = OrderAggregator().price_order(items, offers)
        assert [i.model_dump() for i in items] == snapshot
        assert first == second

    def test_reflects_offer_changes_between_calls(self, offers, purifier):
        aggregator = OrderAggregator()
        items = [OrderLineItem(product=purifier, quantity=1)]
        preview = aggregator.price_order(items, offers)
        expired = {"MONSOON": offers["MONSOON"].model_copy(update={"is_active": False})}
        checkout = aggregator.price_order(items, expired)
        assert preview.total == pytest.approx(8700)
        assert checkout.total == pytest.approx(9000)


class TestMergeLineItems:
    def test_same_product_and_add_on_merged(self, purifier, gold_amc):
        merged = OrderAggregator.merge_line_items([
            OrderLineItem(product=purifier, quantity=1, add_on=gold_amc),
            OrderLineItem(product=purifier, quantity=2, add_on=gold_amc),
        ])
        assert len(merged) == 1
        assert merged[0].quantity == 3

    def test_different_add_on_kept_separate(self, purifier, gold_amc):
        merged = OrderAggregator.merge_line_items([
            OrderLineItem(product=purifier, quantity=1, add_on=gold_amc),
            OrderLineItem(product=purifier, quantity=1),
        ])
        assert [m.quantity for m in merged] == [1, 1]

    def test_products_without_id_not_merged(self):
        loose = Product(base_price=100)
        merged = OrderAggregator.merge_line_items([
            OrderLineItem(product=loose), OrderLineItem(product=loose),
        ])
        assert len(merged) == 2

    def test_original_items_untouched(self, purifier):
        first = OrderLineItem(product=purifier, quantity=1)
        OrderAggregator.merge_line_items([first, OrderLineItem(product=purifier, quantity=5)])
        assert first.quantity == 1

    def test_engine_quote_merges_by_default(self, offers, purifier):
        engine = EntitlementEngine()
        items = [OrderLineItem(product=purifier), OrderLineItem(product=purifier)]
        quote = engine.quote_order(items, offers)
        assert len(quote.lines) == 1
        assert quote.lines[0].quantity == 2
        assert quote.total == pytest.approx(17400)
