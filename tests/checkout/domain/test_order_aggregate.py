"""Tests for placing an Order from a priced cart."""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from checkout.catalogue.product import Product
from checkout.discount.discount import Discount, DiscountType
from checkout.order.events import OrderPlaced
from checkout.order.order import Order
from checkout.pricing.engine import price_cart
from protean.exceptions import ValidationError


@pytest.fixture()
def breakdown():
    today = date(2025, 6, 15)
    p1 = Product.create(name="eBook", price="100.00", product_id="P1")
    p2 = Product.create(name="Course", price="50.00", product_id="P2")
    product20 = Discount.create(
        code="PRODUCT20",
        percentage="20.00",
        discount_type=DiscountType.PRODUCT_SPECIFIC,
        valid_from=today,
        valid_until=today,
        remaining_uses=1,
        applicable_product_ids=["P1"],
    )
    return price_cart([p1, p2, p1], [product20])


class TestPlaceOrder:
    def test_totals_copied_from_breakdown(self, breakdown):
        order = Order.place("user-1", breakdown)
        assert order.user_id == "user-1"
        assert order.subtotal_amount == Decimal("250.00")
        assert order.final_amount == Decimal("210.00")

    def test_one_line_per_requested_unit(self, breakdown):
        order = Order.place("user-1", breakdown)
        assert [line.product_id for line in order.lines] == ["P1", "P2", "P1"]
        assert [line.discounted_price for line in order.lines] == [80.0, 50.0, 80.0]

    def test_resolved_product_ids_are_distinct(self, breakdown):
        order = Order.place("user-1", breakdown)
        assert order.resolved_product_ids == ["P1", "P2"]

    def test_applied_discount_codes(self, breakdown):
        order = Order.place("user-1", breakdown)
        assert order.applied_discount_codes == ["PRODUCT20"]

    def test_created_at_is_set(self, breakdown):
        assert Order.place("user-1", breakdown).created_at is not None

    def test_order_placed_event(self, breakdown):
        order = Order.place("user-1", breakdown)

        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == str(order.id)
        assert event.user_id == "user-1"
        assert event.unit_count == 3
        assert event.final_price == 210.0


class TestOrderInvariants:
    def test_final_price_above_subtotal_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Order(user_id="user-1", original_subtotal=10.0, final_price=12.0)
        assert "Final price cannot exceed the original subtotal" in str(exc.value)

    def test_empty_order_defaults(self):
        order = Order(user_id="user-1")
        assert order.applied_discount_codes == []
        assert order.resolved_product_ids == []
        assert order.final_amount == Decimal("0.00")
