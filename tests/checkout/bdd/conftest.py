"""Shared BDD fixtures and step definitions for checkout scenarios."""

import pytest
from checkout.catalogue.product import Product
from checkout.discount.discount import Discount
from checkout.exceptions import CheckoutError
from checkout.placement.orchestrator import CheckoutRequest, place_order
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then, when


def _split(value):
    return [item for item in value.split(",") if item]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for the checkout result or the rejection it raised."""
    return {"result": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" priced at {price} with {stock:d} in stock'))
def product_in_stock(save, make_product, product_id, price, stock):
    save(make_product(product_id, price, stock=stock))


@given(parsers.cfparse('a general discount "{code}" of {percentage} percent with {uses:d} uses'))
def general_discount(save, make_discount, code, percentage, uses):
    save(make_discount(code, percentage, remaining_uses=uses))


@given(parsers.cfparse('a product-specific discount "{code}" of {percentage} percent on "{product_id}" with {uses:d} uses'))
def product_specific_discount(save, make_discount, code, percentage, product_id, uses):
    save(make_discount(code, percentage, product_ids=[product_id], remaining_uses=uses))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
def _attempt(outcome, user_id, authenticated_user_id, products, codes, today):
    request = CheckoutRequest(user_id=user_id, product_ids=_split(products), discount_codes=_split(codes))
    try:
        outcome["result"] = place_order(request, authenticated_user_id, today=today)
    except CheckoutError as exc:
        outcome["exc"] = exc


@when(parsers.cfparse('"{user_id}" checks out "{products}" with codes "{codes}"'))
def checks_out(outcome, user_id, products, codes, today):
    _attempt(outcome, user_id, user_id, products, codes, today)


@when(parsers.cfparse('"{user_id}" checks out "{products}" without discount codes'))
def checks_out_without_codes(outcome, user_id, products, today):
    _attempt(outcome, user_id, user_id, products, "", today)


@when(parsers.cfparse('"{authenticated_user_id}" orders "{products}" on behalf of "{user_id}"'))
def orders_on_behalf_of(outcome, authenticated_user_id, products, user_id, today):
    _attempt(outcome, user_id, authenticated_user_id, products, "", today)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is created with a final price of {price}"))
def order_created(outcome, price):
    assert outcome["exc"] is None, outcome["exc"]
    assert str(outcome["result"].final_price) == price


@then(parsers.cfparse('the checkout is rejected with "{message}"'))
def checkout_rejected(outcome, message):
    assert outcome["result"] is None
    assert outcome["exc"].message == message


@then(parsers.cfparse('the stock of "{product_id}" is {stock:d}'))
def stock_is(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse('discount "{code}" has {uses:d} uses left'))
def uses_left(code, uses):
    assert current_domain.repository_for(Discount).find_by_code(code).remaining_uses == uses
