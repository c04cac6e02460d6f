"""Discount code validation.

Validation is all-or-nothing: codes are checked in the order they were
supplied and the first unusable one rejects the whole batch. Valid codes
from a rejected batch are never returned.
"""

from datetime import date

from protean.utils.globals import current_domain

from checkout.discount.discount import Discount
from checkout.exceptions import DiscountNotFound


def distinct_codes(codes) -> list[str]:
    """Drop repeated codes, keeping the first occurrence order."""
    return list(dict.fromkeys(codes or []))


def validate_discount_codes(codes, today: date | None = None) -> list[Discount]:
    """Resolve ``codes`` to usable Discounts, one per distinct code.

    Raises the ``InvalidDiscount`` subclass describing the first code that is
    unknown, not yet valid, expired, or out of uses.
    """
    codes = distinct_codes(codes)
    if not codes:
        return []

    today = today or date.today()
    discounts = current_domain.repository_for(Discount).find_by_codes(codes)

    validated = []
    for code in codes:
        discount = discounts.get(code)
        if discount is None:
            raise DiscountNotFound(code)

        failure = discount.eligibility(today)
        if failure is not None:
            raise failure(code)

        validated.append(discount)

    return validated
