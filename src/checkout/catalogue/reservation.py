"""Stock reservation — quantity checks and the stock half of the checkout commit.

Quantities are derived from the requested product id list: every occurrence
of an id is one unit. Availability is checked once while validating the
cart and again under the commit lock, right before stock is deducted, so a
checkout that lost a race for the last units is rejected instead of driving
stock negative.
"""

from collections import Counter

from protean.utils.globals import current_domain

from checkout.catalogue.product import Product
from checkout.exceptions import InsufficientStock


def requested_quantities(product_ids) -> Counter:
    """Count units per product id, preserving first-occurrence order."""
    return Counter(str(product_id) for product_id in product_ids)


def ensure_stock_available(products: dict[str, Product], quantities: Counter) -> None:
    for product_id, quantity in quantities.items():
        product = products[product_id]
        if quantity > product.stock:
            raise InsufficientStock(product_id, requested=quantity, available=product.stock)


class StockReservation:
    """Stock deductions for one checkout, validated against freshly loaded products."""

    def __init__(self, products: dict[str, Product], quantities: Counter):
        self.products = products
        self.quantities = quantities

    @classmethod
    def load(cls, quantities: Counter) -> "StockReservation":
        """Re-read every requested product and re-check availability.

        Must run inside the commit transaction so the reads and the later
        writes see the same state.
        """
        repo = current_domain.repository_for(Product)
        products = repo.find_by_ids(quantities.keys())
        for product_id, quantity in quantities.items():
            if product_id not in products:
                raise InsufficientStock(product_id, requested=quantity, available=0)

        ensure_stock_available(products, quantities)
        return cls(products, quantities)

    def commit(self) -> None:
        repo = current_domain.repository_for(Product)
        for product_id, quantity in self.quantities.items():
            product = self.products[product_id]
            product.deduct_stock(quantity)
            repo.add(product)
