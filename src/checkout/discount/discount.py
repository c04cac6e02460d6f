"""Discount aggregate — percentage discount codes with a validity window and a usage budget.

Two kinds of discount exist:
    GENERAL           applies to the whole order, after product-specific discounts
    PRODUCT_SPECIFIC  applies only to units of the products listed in
                      ``applicable_product_ids``; an empty list applies to nothing

A code is usable on a given day when the day falls inside the inclusive
[valid_from, valid_until] window and at least one use remains. Uses are only
consumed by a committed checkout (see ``checkout.discount.ledger``).
"""

import json
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Date, Float, Integer, String, Text

from checkout.discount.events import DiscountRedeemed
from checkout.domain import checkout
from checkout.exceptions import (
    DiscountExhausted,
    DiscountExpired,
    DiscountNotYetValid,
    InvalidDiscount,
)


class DiscountType(Enum):
    GENERAL = "General"
    PRODUCT_SPECIFIC = "Product_Specific"


@checkout.aggregate
class Discount:
    code = String(required=True, max_length=100, unique=True)
    percentage = Float(required=True, min_value=0.0, max_value=100.0)
    discount_type = String(choices=DiscountType, default=DiscountType.GENERAL.value)
    valid_from = Date(required=True)
    valid_until = Date(required=True)
    remaining_uses = Integer(default=0, min_value=0)
    applicable_product_ids = Text()  # JSON array of product ids

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.valid_from and self.valid_until and self.valid_from > self.valid_until:
            raise ValidationError({"valid_until": ["Validity window must end on or after its start"]})

    @classmethod
    def create(
        cls,
        code,
        percentage,
        discount_type=DiscountType.GENERAL,
        valid_from=None,
        valid_until=None,
        remaining_uses=0,
        applicable_product_ids=None,
    ):
        discount_type = DiscountType(discount_type)
        return cls(
            code=code,
            percentage=float(percentage),
            discount_type=discount_type.value,
            valid_from=valid_from,
            valid_until=valid_until,
            remaining_uses=remaining_uses,
            applicable_product_ids=json.dumps([str(pid) for pid in applicable_product_ids or []]),
        )

    @property
    def rate(self) -> Decimal:
        """Percentage as a fixed-point amount."""
        return Decimal(str(self.percentage))

    @property
    def is_general(self) -> bool:
        return DiscountType(self.discount_type) == DiscountType.GENERAL

    @property
    def product_ids(self) -> frozenset[str]:
        if not self.applicable_product_ids:
            return frozenset()
        return frozenset(json.loads(self.applicable_product_ids))

    def applies_to(self, product_id) -> bool:
        if self.is_general:
            return True
        return str(product_id) in self.product_ids

    def eligibility(self, today: date) -> type[InvalidDiscount] | None:
        """Return the failure kind that makes this code unusable on ``today``, or None."""
        if today < self.valid_from:
            return DiscountNotYetValid
        if today > self.valid_until:
            return DiscountExpired
        if self.remaining_uses <= 0:
            return DiscountExhausted
        return None

    def redeem(self):
        """Consume one use of this code."""
        if self.remaining_uses <= 0:
            raise DiscountExhausted(self.code)

        self.remaining_uses -= 1

        self.raise_(
            DiscountRedeemed(
                discount_id=str(self.id),
                code=self.code,
                remaining_uses=self.remaining_uses,
                redeemed_at=datetime.now(UTC),
            )
        )


def applicable_discounts(product_id, discounts) -> list[Discount]:
    """Discounts from ``discounts`` that apply to the given product, in input order."""
    return [discount for discount in discounts if discount.applies_to(product_id)]
