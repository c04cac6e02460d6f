import os
from datetime import date, timedelta

import pytest


@pytest.fixture(scope="session")
def _checkout_domain(request):
    """Initialize the checkout domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from checkout.domain import checkout

    checkout.init()
    return checkout


@pytest.fixture(scope="session", autouse=True)
def setup_db(_checkout_domain):
    from checkout.domain import checkout
    from checkout.utils.db import drop_db, setup_db

    setup_db(checkout)

    yield

    drop_db(checkout)


@pytest.fixture(autouse=True)
def run_around_tests(_checkout_domain):
    """Push domain context before each test, cleanup after."""
    from checkout.identity import reset_identity_provider

    ctx = _checkout_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    reset_identity_provider()
    ctx.pop()


# ---------------------------------------------------------------------------
# Catalogue and discount data
# ---------------------------------------------------------------------------
@pytest.fixture()
def today():
    return date.today()


@pytest.fixture()
def save():
    """Persist aggregates through their repositories; returns what it was given."""
    from protean.utils.globals import current_domain

    def _save(*aggregates):
        for aggregate in aggregates:
            current_domain.repository_for(type(aggregate)).add(aggregate)
        return aggregates[0] if len(aggregates) == 1 else aggregates

    return _save


@pytest.fixture()
def make_product():
    from checkout.catalogue.product import Product

    def _make(product_id, price, stock=10, name=None):
        return Product.create(name=name or f"Product {product_id}", price=price, stock=stock, product_id=product_id)

    return _make


@pytest.fixture()
def make_discount(today):
    """Build a Discount valid from yesterday to a month from now with ten uses.

    Passing ``product_ids`` makes it product-specific.
    """
    from checkout.discount.discount import Discount, DiscountType

    def _make(code, percentage, product_ids=None, **overrides):
        defaults = {
            "code": code,
            "percentage": percentage,
            "discount_type": DiscountType.GENERAL if product_ids is None else DiscountType.PRODUCT_SPECIFIC,
            "valid_from": today - timedelta(days=1),
            "valid_until": today + timedelta(days=30),
            "remaining_uses": 10,
            "applicable_product_ids": product_ids,
        }
        defaults.update(overrides)
        return Discount.create(**defaults)

    return _make


@pytest.fixture()
def p1(save, make_product):
    return save(make_product("P1", "100.00", stock=10))


@pytest.fixture()
def p2(save, make_product):
    return save(make_product("P2", "50.00", stock=5))


@pytest.fixture()
def general10(save, make_discount):
    return save(make_discount("GENERAL10", "10.00"))


@pytest.fixture()
def product20(save, make_discount, p1):
    return save(make_discount("PRODUCT20", "20.00", product_ids=[p1.id], remaining_uses=5))


@pytest.fixture()
def reload():
    """Fetch the stored state of an aggregate."""
    from protean.utils.globals import current_domain

    def _reload(aggregate):
        return current_domain.repository_for(type(aggregate)).get(aggregate.id)

    return _reload
