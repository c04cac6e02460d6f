"""Checkout bounded context: pricing, discount validation and order placement.

Validates a buyer's cart against discount eligibility and stock, prices it
under the discount-stacking rules, and commits stock, discount usage and the
resulting Order as one unit of work.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
